"""Consumer group state, membership and lag."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

log = logging.getLogger(__name__)


class ResetOffsetsStrategy(str, Enum):
    """Where to move a group's offsets when resetting them."""

    LATEST = "latest"
    EARLIEST = "earliest"


@dataclass
class GroupCoordinator:
    """The coordinator broker for a single consumer group."""

    group_id: str
    coordinator: int
    topics: list[str] = field(default_factory=list)


@dataclass
class MemberInfo:
    """A single consumer group member and its assigned partitions."""

    member_id: str = ""
    client_id: str = ""
    client_host: str = ""
    topic_partitions: dict[str, list[int]] = field(default_factory=dict)

    def topics(self) -> list[str]:
        """All topics this member consumes from, sorted."""
        return sorted(self.topic_partitions)


@dataclass
class GroupDetails:
    """The state and members of a consumer group."""

    group_id: str = ""
    state: str = ""
    members: list[MemberInfo] = field(default_factory=list)

    def topics_map(self) -> set[str]:
        """All topics consumed by any member of the group."""
        return {topic for member in self.members for topic in member.topics()}

    def partition_members(self, topic: str) -> dict[int, MemberInfo]:
        """Map each partition of the topic to the member assigned to it."""
        partitions: dict[int, MemberInfo] = {}
        for member in self.members:
            for partition in member.topic_partitions.get(topic, []):
                if partition in partitions:
                    log.warning("Multiple members assigned to partition %d", partition)
                partitions[partition] = member
        return partitions


def _or_zero(value: datetime | None, reference: datetime | None) -> datetime:
    if value is not None:
        return value
    tzinfo = reference.tzinfo if reference is not None else None
    return datetime.min.replace(tzinfo=tzinfo)


@dataclass
class MemberPartitionLag:
    """Lag for one topic partition and the group member consuming it.

    A time of None stands for an unset (zero) time.
    """

    topic: str
    partition: int
    member_id: str = ""
    newest_offset: int = 0
    newest_time: datetime | None = None
    member_offset: int = 0
    member_time: datetime | None = None

    def offset_lag(self) -> int:
        """How far the member's committed offset trails the newest offset."""
        return self.newest_offset - self.member_offset

    def time_lag(self) -> timedelta:
        """Time between the newest message and the member's latest committed one."""
        newest = _or_zero(self.newest_time, self.member_time)
        member = _or_zero(self.member_time, self.newest_time)
        return newest - member