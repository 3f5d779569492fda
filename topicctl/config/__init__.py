"""Topic and ACL config models, settings validation and YAML loading."""