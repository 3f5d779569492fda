"""ACL configs: the resources, operations and permissions to grant."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from topicctl.config.meta import ResourceMeta, ValidationError


class _NamedIntEnum(IntEnum):
    """Integer codes that are written by name in config files."""

    @property
    def label(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))

    @classmethod
    def parse(cls, value: Any) -> "_NamedIntEnum":
        """Accept a member, its code, or its name in any case.

        Names that are not recognised map to UNKNOWN.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"invalid {cls.__name__}: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.name.replace("_", "").lower() == normalized:
                    return member
            return cls["UNKNOWN"]
        raise ValueError(f"invalid {cls.__name__}: {value!r}")


class ResourceType(_NamedIntEnum):
    UNKNOWN = 0
    ANY = 1
    TOPIC = 2
    GROUP = 3
    CLUSTER = 4
    TRANSACTIONAL_ID = 5
    DELEGATION_TOKEN = 6


class PatternType(_NamedIntEnum):
    UNKNOWN = 0
    ANY = 1
    MATCH = 2
    LITERAL = 3
    PREFIXED = 4


class ACLOperationType(_NamedIntEnum):
    UNKNOWN = 0
    ANY = 1
    ALL = 2
    READ = 3
    WRITE = 4
    CREATE = 5
    DELETE = 6
    ALTER = 7
    DESCRIBE = 8
    CLUSTER_ACTION = 9
    DESCRIBE_CONFIGS = 10
    ALTER_CONFIGS = 11
    IDEMPOTENT_WRITE = 12


class ACLPermissionType(_NamedIntEnum):
    UNKNOWN = 0
    ANY = 1
    DENY = 2
    ALLOW = 3


@dataclass(frozen=True)
class ACLEntry:
    """A single ACL as sent to the cluster."""

    resource_type: ResourceType
    resource_name: str
    resource_pattern_type: PatternType
    principal: str
    host: str
    operation: ACLOperationType
    permission_type: ACLPermissionType


@dataclass
class ACLResource:
    """The resource, principal and permission an ACL applies to."""

    type: ResourceType = ResourceType.UNKNOWN
    name: str = ""
    pattern_type: PatternType = PatternType.UNKNOWN
    principal: str = ""
    host: str = ""
    permission: ACLPermissionType = ACLPermissionType.UNKNOWN


@dataclass
class ACL:
    """A resource and the operations granted on it."""

    resource: ACLResource = field(default_factory=ACLResource)
    operations: list[ACLOperationType] = field(default_factory=list)


@dataclass
class ACLSpec:
    acls: list[ACL] = field(default_factory=list)


def _check_mapping(data: Any, allowed: frozenset[str], where: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError(f"{where} must be a mapping")
    unknown = sorted(str(key) for key in data if key not in allowed)
    if unknown:
        raise ValueError(f'unknown field "{unknown[0]}" in {where}')
    return data


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{where} must be a string")
    return value


def _parse_enum(enum_type: type[_NamedIntEnum], value: Any, where: str):
    if value is None:
        return enum_type["UNKNOWN"]
    try:
        return enum_type.parse(value)
    except ValueError as exc:
        raise ValueError(f"{where}: {exc}") from exc


def _resource_from_dict(data: Any) -> ACLResource:
    if data is None:
        return ACLResource()
    data = _check_mapping(
        data,
        frozenset(("type", "name", "patternType", "principal", "host", "permission")),
        "resource",
    )
    return ACLResource(
        type=_parse_enum(ResourceType, data.get("type"), "resource.type"),
        name=_string(data.get("name"), "resource.name"),
        pattern_type=_parse_enum(
            PatternType, data.get("patternType"), "resource.patternType"
        ),
        principal=_string(data.get("principal"), "resource.principal"),
        host=_string(data.get("host"), "resource.host"),
        permission=_parse_enum(
            ACLPermissionType, data.get("permission"), "resource.permission"
        ),
    )


def _acl_from_dict(data: Any) -> ACL:
    data = _check_mapping(data, frozenset(("resource", "operations")), "acl")
    operations = data.get("operations")
    if operations is None:
        operations = []
    if not isinstance(operations, list):
        raise ValueError("acl.operations must be a list")
    return ACL(
        resource=_resource_from_dict(data.get("resource")),
        operations=[
            _parse_enum(ACLOperationType, op, "acl.operations") for op in operations
        ],
    )


@dataclass
class ACLConfig:
    """The desired ACLs for one resource group in a cluster."""

    meta: ResourceMeta = field(default_factory=ResourceMeta)
    spec: ACLSpec = field(default_factory=ACLSpec)

    def to_new_acl_entries(self) -> list[ACLEntry]:
        """Expand every ACL into one entry per operation."""
        return [
            ACLEntry(
                resource_type=acl.resource.type,
                resource_name=acl.resource.name,
                resource_pattern_type=acl.resource.pattern_type,
                principal=acl.resource.principal,
                host=acl.resource.host,
                operation=operation,
                permission_type=acl.resource.permission,
            )
            for acl in self.spec.acls
            for operation in acl.operations
        ]

    def set_defaults(self) -> None:
        """Default the host to "*" and the permission to allow where unset."""
        for acl in self.spec.acls:
            if not acl.resource.host:
                acl.resource.host = "*"
            if acl.resource.permission == ACLPermissionType.UNKNOWN:
                acl.resource.permission = ACLPermissionType.ALLOW

    def validate(self) -> None:
        """Raise ValidationError listing every problem found."""
        errors: list[str] = []
        try:
            self.meta.validate()
        except ValidationError as exc:
            errors.extend(exc.errors)

        for acl in self.spec.acls:
            resource = acl.resource
            if resource.type == ResourceType.UNKNOWN:
                errors.append("ACL resource type cannot be unknown")
            if not resource.name:
                errors.append("ACL resource name cannot be empty")
            if resource.pattern_type == PatternType.UNKNOWN:
                errors.append("ACL resource pattern type cannot be unknown")
            if not resource.principal:
                errors.append("ACL resource principal cannot be empty")
            errors.extend(
                "ACL operation cannot be unknown"
                for operation in acl.operations
                if operation == ACLOperationType.UNKNOWN
            )

        if errors:
            raise ValidationError(errors)

    @classmethod
    def from_dict(cls, data: Any) -> "ACLConfig":
        """Build from a decoded mapping, rejecting unknown fields."""
        if data is None:
            return cls()
        data = _check_mapping(data, frozenset(("meta", "spec")), "config")
        spec_data = data.get("spec")
        acls: list[ACL] = []
        if spec_data is not None:
            spec_data = _check_mapping(spec_data, frozenset(("acls",)), "spec")
            raw_acls = spec_data.get("acls")
            if raw_acls is not None:
                if not isinstance(raw_acls, list):
                    raise ValueError("spec.acls must be a list")
                acls = [_acl_from_dict(item) for item in raw_acls]
        return cls(meta=ResourceMeta.from_dict(data.get("meta")), spec=ACLSpec(acls=acls))