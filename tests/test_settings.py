from datetime import timedelta

import pytest

from topicctl.config.meta import ValidationError
from topicctl.config.settings import (
    ConfigEntry,
    TopicSettings,
    value_to_int,
    value_to_string,
)


@pytest.mark.parametrize(
    "settings",
    [
        {
            "cleanup.policy": "compact",
            "retention.ms": 1234,
            "min.cleanable.dirty.ratio": 0.54,
            "preallocate": True,
            "follower.replication.throttled.replicas": ["1:3", "4:5", "6:7"],
            "leader.replication.throttled.replicas": ["1:3", "4:5", "6:7"],
        },
        {
            "cleanup.policy": "compact,delete",
            "retention.ms": "1234",
            "min.cleanable.dirty.ratio": "0.54",
            "preallocate": "true",
            "follower.replication.throttled.replicas": "1:3,4:5,6:7",
        },
        {"cleanup.policy": "", "retention.ms": ""},
    ],
    ids=["base types", "string types", "empty values"],
)
def test_validate_settings_ok(settings):
    topic_settings = TopicSettings(settings)
    topic_settings.validate()
    assert topic_settings == settings


@pytest.mark.parametrize(
    "settings",
    [
        {"bad-key": "1"},
        {"cleanup.policy": "non-matching"},
        {"retention.ms": "not-an-int"},
        {"retention.ms": -100},
        {"follower.replication.throttled.replicas": "3,4:5"},
    ],
    ids=[
        "unrecognized key",
        "non-matching string",
        "bad int",
        "out-of-range int",
        "bad throttles",
    ],
)
def test_validate_settings_error(settings):
    with pytest.raises(ValidationError):
        TopicSettings(settings).validate()


def test_validate_error_messages():
    with pytest.raises(ValidationError) as info:
        TopicSettings({"bad-key": "1", "retention.ms": -100}).validate()
    assert info.value.errors == [
        "Key bad-key is not recognized topic config setting",
        "Invalid value for key retention.ms: -100",
    ]


def _settings_for_entries():
    return TopicSettings(
        {
            "cleanup.policy": "compact",
            "follower.replication.throttled.replicas": ["1:3", "4:5", "6:7"],
            "leader.replication.throttled.replicas": None,
            "min.cleanable.dirty.ratio": 0.54,
            "preallocate": True,
            "retention.ms": 1234,
        }
    )


def test_settings_to_config_entries_all():
    entries = _settings_for_entries().to_config_entries(None)
    assert set(entries) == {
        ConfigEntry("cleanup.policy", "compact"),
        ConfigEntry("follower.replication.throttled.replicas", "1:3,4:5,6:7"),
        ConfigEntry("leader.replication.throttled.replicas", ""),
        ConfigEntry("min.cleanable.dirty.ratio", "0.54"),
        ConfigEntry("preallocate", "true"),
        ConfigEntry("retention.ms", "1234"),
    }
    assert len(entries) == 6


def test_settings_to_config_entries_keys():
    entries = _settings_for_entries().to_config_entries(
        ["cleanup.policy", "retention.ms"]
    )
    assert set(entries) == {
        ConfigEntry("cleanup.policy", "compact"),
        ConfigEntry("retention.ms", "1234"),
    }


def test_settings_to_config_entries_missing_key():
    with pytest.raises(KeyError):
        _settings_for_entries().to_config_entries(["cleanup.policy", "invalid-key"])


def test_settings_to_config_entries_bad_value():
    with pytest.raises(ValueError):
        TopicSettings({"key": {"abc": 123}}).to_config_entries(None)


def test_config_map_diffs():
    settings = TopicSettings(
        {
            "cleanup.policy": "compact",
            "follower.replication.throttled.replicas": ["1:3", "4:5", "6:8"],
            "preallocate": True,
        }
    )
    config_map = {
        "cleanup.policy": "compact",
        "follower.replication.throttled.replicas": "1:3,4:5,6:7",
        "leader.replication.throttled.replicas": "4:8,6:7",
        "preallocate": "false",
        "retention.ms": "1234",
    }
    diff_keys, missing_keys = settings.config_map_diffs(config_map)
    assert sorted(diff_keys) == [
        "follower.replication.throttled.replicas",
        "preallocate",
    ]
    assert sorted(missing_keys) == ["leader.replication.throttled.replicas", "retention.ms"]


_STEP = timedelta(milliseconds=100)


@pytest.mark.parametrize(
    "settings, config_map, step, expected_reduce, expected_retention",
    [
        ({"retention.ms": "5000"}, {"retention.ms": "5000"}, _STEP, False, "5000"),
        ({"retention.ms": "500000"}, {"retention.ms": "5000"}, _STEP, False, "500000"),
        ({"retention.ms": "5000"}, {"retention.ms": "5010"}, _STEP, False, "5000"),
        ({"retention.ms": "5000"}, {"retention.ms": "5100"}, _STEP, False, "5000"),
        ({"retention.ms": "5000"}, {"retention.ms": "6000"}, _STEP, True, 5900),
        ({"retention.ms": "5000"}, {}, _STEP, False, "5000"),
        ({}, {"retention.ms": "5000"}, _STEP, False, None),
        ({"retention.ms": 3000}, {"retention.ms": "5000"}, timedelta(0), False, 3000),
    ],
    ids=[
        "no change",
        "increase",
        "small decrease",
        "medium decrease",
        "big decrease",
        "no existing retention",
        "no new retention",
        "0 step size",
    ],
)
def test_reduce_retention_drop(
    settings, config_map, step, expected_reduce, expected_retention
):
    topic_settings = TopicSettings(
        {"other.key": "other.value", **settings, "another.key": "another.value"}
    )
    full_map = {"other.key": "other.value", **config_map}
    reduced = topic_settings.reduce_retention_drop(full_map, step)
    assert reduced is expected_reduce
    assert topic_settings.get("retention.ms") == expected_retention


@pytest.mark.parametrize(
    "settings, config_map",
    [
        ({"retention.ms": "xxxx"}, {"retention.ms": "5000"}),
        ({"retention.ms": "5000"}, {"retention.ms": "xxxx"}),
    ],
    ids=["bad formatting settings", "bad formatting config"],
)
def test_reduce_retention_drop_errors(settings, config_map):
    with pytest.raises(ValueError):
        TopicSettings(settings).reduce_retention_drop(config_map, _STEP)


def test_get_value_str():
    settings = TopicSettings({"preallocate": False, "max.compaction.lag.ms": 12345.0})
    assert settings.get_value_str("preallocate") == "false"
    assert settings.get_value_str("max.compaction.lag.ms") == "12345"
    with pytest.raises(KeyError):
        settings.get_value_str("missing")


def test_copy_is_independent():
    original = TopicSettings({"a": "1"})
    duplicate = original.copy()
    duplicate["b"] = "2"
    assert isinstance(duplicate, TopicSettings)
    assert original == {"a": "1"}
    assert duplicate == {"a": "1", "b": "2"}


def test_from_config_map():
    settings = TopicSettings.from_config_map({"cleanup.policy": "compact"})
    assert isinstance(settings, TopicSettings)
    assert settings == {"cleanup.policy": "compact"}


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        (True, "true"),
        (12345.0, "12345"),
        (0.5, "0.50"),
        (7, "7"),
        ("abc", "abc"),
        (["1:3", 4, 2.0], "1:3,4,2"),
    ],
)
def test_value_to_string(value, expected):
    assert value_to_string(value) == expected


def test_value_to_string_rejects_mapping():
    with pytest.raises(TypeError):
        value_to_string({"a": 1})


@pytest.mark.parametrize(
    "value, expected", [(None, 0), (3.9, 3), (42, 42), ("-12", -12)]
)
def test_value_to_int(value, expected):
    assert value_to_int(value) == expected


def test_value_to_int_errors():
    with pytest.raises(ValueError):
        value_to_int(" 12")
    with pytest.raises(TypeError):
        value_to_int(True)
    with pytest.raises(TypeError):
        value_to_int([1])