"""Consumer group data types and plain-text table formatting."""