"""Topic configs: partitions, replication, settings and placement."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import yaml

from topicctl.config.meta import ResourceMeta, ValidationError
from topicctl.config.settings import RETENTION_KEY, ConfigEntry, TopicSettings

log = logging.getLogger(__name__)


class PlacementStrategy(str, Enum):
    """How the partition replicas of a topic are placed."""

    ANY = "any"
    BALANCED_LEADERS = "balanced-leaders"
    IN_RACK = "in-rack"
    CROSS_RACK = "cross-rack"
    STATIC = "static"
    STATIC_IN_RACK = "static-in-rack"


class PickerMethod(str, Enum):
    """How ties are broken when choosing replica placements."""

    CLUSTER_USE = "cluster-use"
    LOWEST_INDEX = "lowest-index"
    RANDOMIZED = "randomized"


def _text(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _enum_list(enum_type: type[Enum]) -> str:
    return "[" + " ".join(member.value for member in enum_type) + "]"


@dataclass
class TopicPlacementConfig:
    """How the partition replicas in a topic should be chosen."""

    strategy: PlacementStrategy | str = ""
    picker: PickerMethod | str = ""
    # Used by the "static" strategy only.
    static_assignments: list[list[int]] | None = None
    # Used by the "static-in-rack" strategy only.
    static_rack_assignments: list[str] | None = None


@dataclass
class TopicMigrationConfig:
    """Throttle and batch size used when migrating partitions."""

    throttle_mb: int = 0
    partition_batch_size: int = 0


@dataclass
class TopicSpec:
    """The mutable specification of a topic."""

    partitions: int = 0
    replication_factor: int = 0
    retention_minutes: int = 0
    settings: TopicSettings = field(default_factory=TopicSettings)
    placement_config: TopicPlacementConfig = field(default_factory=TopicPlacementConfig)
    migration_config: TopicMigrationConfig | None = None


@dataclass
class NewTopicConfig:
    """What is sent to the cluster to create a topic."""

    topic: str
    num_partitions: int
    replication_factor: int
    config_entries: list[ConfigEntry] = field(default_factory=list)


def _check_mapping(data: Any, allowed: frozenset[str], where: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError(f"{where} must be a mapping")
    unknown = sorted(str(key) for key in data if key not in allowed)
    if unknown:
        raise ValueError(f'unknown field "{unknown[0]}" in {where}')
    return data


def _int(value: Any, where: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{where} must be an integer")
    return value


def _enum_or_text(enum_type: type[Enum], value: Any, where: str) -> Any:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{where} must be a string")
    try:
        return enum_type(value)
    except ValueError:
        return value


def _decoded_number(value: Any) -> Any:
    """Numbers in free-form settings decode as floats, as in JSON."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return float(value)
    if isinstance(value, list):
        return [_decoded_number(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _decoded_number(item) for key, item in value.items()}
    return value


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    return value


def _placement_from_dict(data: Any) -> TopicPlacementConfig:
    if data is None:
        return TopicPlacementConfig()
    data = _check_mapping(
        data,
        frozenset(("strategy", "picker", "staticAssignments", "staticRackAssignments")),
        "placement",
    )
    static = data.get("staticAssignments")
    if static is not None:
        if not isinstance(static, list) or not all(isinstance(row, list) for row in static):
            raise ValueError("placement.staticAssignments must be a list of lists")
        static = [
            [_int(item, "placement.staticAssignments") for item in row] for row in static
        ]
    racks = data.get("staticRackAssignments")
    if racks is not None:
        if not isinstance(racks, list) or not all(isinstance(r, str) for r in racks):
            raise ValueError("placement.staticRackAssignments must be a list of strings")
        racks = list(racks)
    return TopicPlacementConfig(
        strategy=_enum_or_text(PlacementStrategy, data.get("strategy"), "placement.strategy"),
        picker=_enum_or_text(PickerMethod, data.get("picker"), "placement.picker"),
        static_assignments=static,
        static_rack_assignments=racks,
    )


def _spec_from_dict(data: Any) -> TopicSpec:
    if data is None:
        return TopicSpec()
    data = _check_mapping(
        data,
        frozenset(
            (
                "partitions",
                "replicationFactor",
                "retentionMinutes",
                "settings",
                "placement",
                "migration",
            )
        ),
        "spec",
    )
    settings_data = data.get("settings")
    if settings_data is None:
        settings = TopicSettings()
    elif isinstance(settings_data, Mapping):
        settings = TopicSettings(
            {str(key): _decoded_number(value) for key, value in settings_data.items()}
        )
    else:
        raise ValueError("spec.settings must be a mapping")

    migration_data = data.get("migration")
    migration = None
    if migration_data is not None:
        migration_data = _check_mapping(
            migration_data, frozenset(("throttleMB", "partitionBatchSize")), "migration"
        )
        migration = TopicMigrationConfig(
            throttle_mb=_int(migration_data.get("throttleMB"), "migration.throttleMB"),
            partition_batch_size=_int(
                migration_data.get("partitionBatchSize"), "migration.partitionBatchSize"
            ),
        )

    return TopicSpec(
        partitions=_int(data.get("partitions"), "spec.partitions"),
        replication_factor=_int(data.get("replicationFactor"), "spec.replicationFactor"),
        retention_minutes=_int(data.get("retentionMinutes"), "spec.retentionMinutes"),
        settings=settings,
        placement_config=_placement_from_dict(data.get("placement")),
        migration_config=migration,
    )


@dataclass
class TopicConfig:
    """The desired configuration of a topic."""

    meta: ResourceMeta = field(default_factory=ResourceMeta)
    spec: TopicSpec = field(default_factory=TopicSpec)

    def to_new_topic_config(self) -> NewTopicConfig:
        """Build the request used to create this topic."""
        config = NewTopicConfig(
            topic=self.meta.name,
            num_partitions=self.spec.partitions,
            replication_factor=self.spec.replication_factor,
        )
        if self.spec.settings:
            config.config_entries = self.spec.settings.to_config_entries(None)
        if self.spec.retention_minutes > 0:
            config.config_entries.append(
                ConfigEntry(RETENTION_KEY, str(self.spec.retention_minutes * 60 * 1000))
            )
        return config

    def set_defaults(self) -> None:
        """Fill in the migration and picker defaults where unset."""
        if self.spec.migration_config is None:
            self.spec.migration_config = TopicMigrationConfig()
        if self.spec.migration_config.partition_batch_size == 0:
            # Migrate partitions one at a time.
            self.spec.migration_config.partition_batch_size = 1
        if not self.spec.placement_config.picker:
            self.spec.placement_config.picker = PickerMethod.RANDOMIZED

    def validate(self, num_racks: int = 0) -> None:
        """Raise ValidationError listing every problem found."""
        errors: list[str] = []
        spec = self.spec
        settings = spec.settings if spec.settings is not None else TopicSettings()

        try:
            self.meta.validate()
        except ValidationError as exc:
            errors.extend(exc.errors)

        if spec.partitions <= 0:
            errors.append("Partitions must be a positive number")
        if spec.replication_factor <= 0:
            errors.append("ReplicationFactor must be > 0")

        try:
            settings.validate()
        except ValidationError as exc:
            errors.extend(exc.errors)

        if spec.retention_minutes < 0:
            errors.append("RetentionMinutes must be >= 0")
        if spec.retention_minutes > 0 and settings.get(RETENTION_KEY) is not None:
            errors.append("Cannot set both RetentionMinutes and retention.ms in settings")
        if (
            settings.get("local.retention.bytes") is not None
            or settings.get("local.retention.ms") is not None
        ) and settings.get("remote.storage.enable") is None:
            errors.append(
                "Setting local retention parameters requires "
                "remote.storage.enable to be set in settings"
            )

        placement = spec.placement_config
        if placement.strategy not in list(PlacementStrategy):
            errors.append(f"PlacementStrategy must in {_enum_list(PlacementStrategy)}")
        if placement.picker not in list(PickerMethod):
            errors.append(f"PickerMethod must in {_enum_list(PickerMethod)}")

        strategy = placement.strategy
        if strategy == PlacementStrategy.BALANCED_LEADERS:
            if num_racks > 0 and spec.partitions % num_racks != 0:
                # Balanced leaders are impossible unless partitions divide evenly.
                errors.append(
                    f"Number of partitions ({spec.partitions}) is not a multiple "
                    f"of the number of racks ({num_racks})"
                )
        elif strategy == PlacementStrategy.CROSS_RACK:
            if num_racks > 0 and spec.replication_factor > num_racks:
                errors.append(
                    f"Replication factor ({spec.replication_factor}) cannot be "
                    f"larger than the number of racks ({num_racks})"
                )
        elif strategy == PlacementStrategy.STATIC:
            assignments = placement.static_assignments or []
            if len(assignments) != spec.partitions:
                errors.append("Static assignments must be same length as partitions")
            elif any(len(row) != spec.replication_factor for row in assignments):
                errors.append("Static assignment rows must match replication factor")
        elif strategy == PlacementStrategy.STATIC_IN_RACK:
            if len(placement.static_rack_assignments or []) != spec.partitions:
                errors.append(
                    "Static rack assignments must be same length as partitions"
                )

        if (
            num_racks > 0
            and strategy != PlacementStrategy.BALANCED_LEADERS
            and spec.partitions % num_racks != 0
        ):
            log.warning(
                "Number of partitions (%d) is not a multiple of the number of racks (%d)",
                spec.partitions,
                num_racks,
            )

        if errors:
            raise ValidationError(errors)

    def to_dict(self) -> dict[str, Any]:
        """Return the serialisable form, leaving out empty optional fields."""
        spec = self.spec
        placement = spec.placement_config
        placement_dict: dict[str, Any] = {"strategy": _text(placement.strategy)}
        if placement.picker:
            placement_dict["picker"] = _text(placement.picker)
        if placement.static_assignments:
            placement_dict["staticAssignments"] = _plain(placement.static_assignments)
        if placement.static_rack_assignments:
            placement_dict["staticRackAssignments"] = list(
                placement.static_rack_assignments
            )

        spec_dict: dict[str, Any] = {
            "partitions": spec.partitions,
            "replicationFactor": spec.replication_factor,
        }
        if spec.retention_minutes:
            spec_dict["retentionMinutes"] = spec.retention_minutes
        if spec.settings:
            spec_dict["settings"] = _plain(dict(spec.settings))
        spec_dict["placement"] = placement_dict
        if spec.migration_config is not None:
            spec_dict["migration"] = {
                "throttleMB": spec.migration_config.throttle_mb,
                "partitionBatchSize": spec.migration_config.partition_batch_size,
            }
        return {"meta": self.meta.to_dict(), "spec": spec_dict}

    def to_yaml(self) -> str:
        """Render as a YAML document with sorted keys."""
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=True)

    @classmethod
    def from_dict(cls, data: Any) -> "TopicConfig":
        """Build from a decoded mapping, rejecting unknown fields."""
        if data is None:
            return cls()
        data = _check_mapping(data, frozenset(("meta", "spec")), "config")
        return cls(
            meta=ResourceMeta.from_dict(data.get("meta")),
            spec=_spec_from_dict(data.get("spec")),
        )