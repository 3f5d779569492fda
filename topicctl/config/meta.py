"""Metadata shared by topic and ACL configs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any


class ValidationError(ValueError):
    """One or more problems found while validating a config."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


_STRING_FIELDS = ("name", "cluster", "region", "environment", "description")
_KNOWN_FIELDS = frozenset((*_STRING_FIELDS, "labels", "consumers"))


@dataclass
class ResourceMeta:
    """The mostly immutable metadata associated with a resource."""

    name: str = ""
    cluster: str = ""
    region: str = ""
    environment: str = ""
    description: str = ""
    labels: dict[str, str] | None = None
    # Consumers expected to read from this resource.
    consumers: list[str] | None = None

    def validate(self) -> None:
        """Raise ValidationError if any required field is empty."""
        errors = [
            f"{label} must be set"
            for label, value in (
                ("Name", self.name),
                ("Cluster", self.cluster),
                ("Region", self.region),
                ("Environment", self.environment),
            )
            if not value
        ]
        if errors:
            raise ValidationError(errors)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ResourceMeta":
        """Build from a decoded mapping, rejecting unknown fields."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError("meta must be a mapping")
        unknown = sorted(str(key) for key in data if key not in _KNOWN_FIELDS)
        if unknown:
            raise ValueError(f'unknown field "{unknown[0]}" in meta')

        kwargs: dict[str, Any] = {}
        for key in _STRING_FIELDS:
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                raise ValueError(f"meta.{key} must be a string")
            kwargs[key] = value

        labels = data.get("labels")
        if labels is not None:
            if not isinstance(labels, Mapping) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in labels.items()
            ):
                raise ValueError("meta.labels must be a mapping of strings")
            kwargs["labels"] = dict(labels)

        consumers = data.get("consumers")
        if consumers is not None:
            if not isinstance(consumers, list) or not all(
                isinstance(c, str) for c in consumers
            ):
                raise ValueError("meta.consumers must be a list of strings")
            kwargs["consumers"] = list(consumers)

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Return the serialisable form; empty consumers are omitted."""
        result: dict[str, Any] = {
            "name": self.name,
            "cluster": self.cluster,
            "region": self.region,
            "environment": self.environment,
            "description": self.description,
            "labels": dict(self.labels) if self.labels is not None else None,
        }
        if self.consumers:
            result["consumers"] = list(self.consumers)
        return result