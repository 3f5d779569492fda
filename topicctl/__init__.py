"""Configuration models and validation for Kafka topics and ACLs, with consumer-group types."""

__version__ = "0.1.0"