"""Loading topic and ACL configs from YAML files."""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from typing import Any, TypeVar

import yaml

from topicctl.config.acl import ACLConfig
from topicctl.config.meta import ResourceMeta, ValidationError
from topicctl.config.topic import TopicConfig

_T = TypeVar("_T")

# Documents in one file are separated by lines of "---".
_SEPARATOR = re.compile(r"(?:^|[\t\n\f\r ]*\n)---[\t\n\f\r ]*")
_ENV_REF = re.compile(
    r"\$(?:\{([^}]*)\}|([*#$@!?\-0-9])|([A-Za-z_][A-Za-z0-9_]*))"
)


def _expand_env(text: str) -> str:
    """Replace $VAR and ${VAR} with their values; unset variables become empty."""

    def substitute(match: re.Match) -> str:
        name = next(group for group in match.groups() if group is not None)
        return os.environ.get(name, "")

    return _ENV_REF.sub(substitute, text)


def _is_empty(contents: str) -> bool:
    """True if every line is blank or a comment."""
    return all(
        not line.strip() or line.strip().startswith("#")
        for line in contents.split("\n")
    )


def _decode_yaml(contents: bytes | str) -> Any:
    if isinstance(contents, bytes):
        contents = contents.decode("utf-8")
    try:
        return yaml.safe_load(contents)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid YAML: {exc}") from exc


def _load_documents(
    path: str | os.PathLike, load_one: Callable[[str], _T]
) -> list[_T]:
    with open(path, encoding="utf-8") as handle:
        contents = _expand_env(handle.read())
    return [
        load_one(document)
        for document in (
            part.strip() for part in _SEPARATOR.split(contents.strip())
        )
        if not _is_empty(document)
    ]


def load_topic_bytes(contents: bytes | str) -> TopicConfig:
    """Load one TopicConfig from YAML, rejecting unknown fields."""
    return TopicConfig.from_dict(_decode_yaml(contents))


def load_topics_file(path: str | os.PathLike) -> list[TopicConfig]:
    """Load every TopicConfig in a YAML file, expanding environment variables."""
    return _load_documents(path, load_topic_bytes)


def load_acl_bytes(contents: bytes | str) -> ACLConfig:
    """Load one ACLConfig from YAML, rejecting unknown fields."""
    return ACLConfig.from_dict(_decode_yaml(contents))


def load_acls_file(path: str | os.PathLike) -> list[ACLConfig]:
    """Load every ACLConfig in a YAML file, expanding environment variables."""
    return _load_documents(path, load_acl_bytes)


def check_consistency(resource_meta: ResourceMeta, cluster_meta: Any) -> None:
    """Raise ValidationError unless the resource belongs to the given cluster.

    The cluster metadata needs name, environment and region attributes.
    """
    errors = []
    if resource_meta.cluster != cluster_meta.name:
        errors.append("Topic cluster name does not match name in cluster config")
    if resource_meta.environment != cluster_meta.environment:
        errors.append("Topic environment does not match cluster environment")
    if resource_meta.region != cluster_meta.region:
        errors.append("Topic region does not match cluster region")
    if errors:
        raise ValidationError(errors)