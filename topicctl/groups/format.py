"""Plain-text tables describing consumer groups."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

from topicctl.groups.types import GroupCoordinator, MemberInfo


def _center(text: str, width: int) -> str:
    gap = width - len(text)
    left = gap // 2
    return " " * left + text + " " * (gap - left)


def _title(header: str) -> str:
    return header.replace("_", " ").strip().upper()


def _render_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render a table with top and bottom borders but no side borders."""
    titles = [_title(header) for header in headers]
    rows = [list(row) for row in rows]
    widths = [len(title) for title in titles]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    line = "-" + "+".join("-" * (width + 2) for width in widths) + "-"

    def render_row(cells: Sequence[str]) -> str:
        return " " + "|".join(f" {cell} " for cell in cells) + " "

    lines = [
        line,
        render_row([_center(title, width) for title, width in zip(titles, widths)]),
        line,
    ]
    lines.extend(
        render_row([cell.ljust(width) for cell, width in zip(row, widths)])
        for row in rows
    )
    lines.append(line)
    return "\n".join(lines).rstrip("\n")


def _total_partitions(member: MemberInfo) -> int:
    return sum(len(partitions) for partitions in member.topic_partitions.values())


def format_group_coordinators(group_coordinators: Iterable[GroupCoordinator]) -> str:
    """Table of each group, its coordinator broker and its topics."""
    return _render_table(
        ["Group", "Coordinator", "Topics"],
        (
            [
                coordinator.group_id,
                str(coordinator.coordinator),
                "[" + " ".join(coordinator.topics) + "]",
            ]
            for coordinator in group_coordinators
        ),
    )


def format_member_partition_counts(members: Iterable[MemberInfo]) -> str:
    """Table of how many members consume each number of partitions."""
    counts = Counter(_total_partitions(member) for member in members)
    return _render_table(
        ["Num Partitions", "Num Members"],
        ([str(count), str(counts[count])] for count in sorted(counts)),
    )


def format_partition_offsets(partition_offsets: Mapping[int, int]) -> str:
    """Table of the proposed new offset for each partition, by partition."""
    return _render_table(
        ["Partition", "New Offset"],
        (
            [str(partition), str(partition_offsets[partition])]
            for partition in sorted(partition_offsets)
        ),
    )