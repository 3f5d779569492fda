import logging
from datetime import datetime, timedelta, timezone

from topicctl.groups.types import (
    GroupDetails,
    MemberInfo,
    MemberPartitionLag,
    ResetOffsetsStrategy,
)


def _details():
    return GroupDetails(
        group_id="group",
        state="Stable",
        members=[
            MemberInfo(
                member_id="m1",
                topic_partitions={"topic-b": [0, 1], "topic-a": [2]},
            ),
            MemberInfo(member_id="m2", topic_partitions={"topic-b": [2, 3]}),
        ],
    )


def test_member_topics_sorted():
    member = _details().members[0]
    assert member.topics() == ["topic-a", "topic-b"]


def test_topics_map_unions_members():
    assert _details().topics_map() == {"topic-a", "topic-b"}


def test_partition_members():
    details = _details()
    members = details.partition_members("topic-b")
    assert sorted(members) == [0, 1, 2, 3]
    assert members[0].member_id == "m1"
    assert members[3].member_id == "m2"
    assert details.partition_members("missing") == {}


def test_partition_members_duplicate_warns_and_last_wins(caplog):
    details = GroupDetails(
        members=[
            MemberInfo(member_id="m1", topic_partitions={"t": [5]}),
            MemberInfo(member_id="m2", topic_partitions={"t": [5]}),
        ]
    )
    with caplog.at_level(logging.WARNING):
        members = details.partition_members("t")
    assert members[5].member_id == "m2"
    assert "Multiple members assigned to partition 5" in caplog.text


def test_offset_lag():
    lag = MemberPartitionLag(topic="t", partition=0, newest_offset=5, member_offset=2)
    assert lag.offset_lag() == 3


def test_time_lag():
    member_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    newest_time = member_time + timedelta(seconds=30)
    lag = MemberPartitionLag(
        topic="t", partition=0, newest_time=newest_time, member_time=member_time
    )
    assert lag.time_lag() == newest_time - member_time


def test_time_lag_unset_member_time_is_large():
    newest_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
    lag = MemberPartitionLag(topic="t", partition=0, newest_time=newest_time)
    assert lag.time_lag() > timedelta(days=365 * 1000)


def test_reset_strategy_from_text():
    assert ResetOffsetsStrategy("earliest") is ResetOffsetsStrategy.EARLIEST
    assert ResetOffsetsStrategy("latest") is ResetOffsetsStrategy.LATEST