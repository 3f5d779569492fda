[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "topicctl"
version = "0.1.0"
description = "Configuration models, validation and YAML loading for Kafka topics and ACLs, with consumer-group data types and tables"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["kafka", "topics", "acl", "configuration", "consumer-groups", "yaml"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["topicctl"]

[tool.pytest.ini_options]
addopts = "-ra"
