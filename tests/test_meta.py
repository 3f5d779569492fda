import pytest

from topicctl.config.meta import ResourceMeta, ValidationError


def test_valid_meta():
    meta = ResourceMeta(
        name="test-topic",
        cluster="test-cluster",
        region="test-region",
        environment="test-environment",
        description="test-description",
    )
    meta.validate()
    assert meta.name == "test-topic"


def test_meta_missing_fields():
    meta = ResourceMeta(
        name="test-topic",
        environment="test-environment",
        description="Bootstrapped via topicctl bootstrap",
    )
    with pytest.raises(ValidationError) as info:
        meta.validate()
    assert info.value.errors == ["Cluster must be set", "Region must be set"]


def test_empty_meta_lists_all_errors():
    with pytest.raises(ValidationError) as info:
        ResourceMeta().validate()
    assert len(info.value.errors) == 4
    assert "Name must be set" in str(info.value)


def test_from_dict_round_trip():
    data = {
        "name": "n",
        "cluster": "c",
        "region": "r",
        "environment": "e",
        "description": "d",
        "labels": {"team": "infra"},
        "consumers": ["svc-a"],
    }
    meta = ResourceMeta.from_dict(data)
    assert meta.labels == {"team": "infra"}
    assert meta.to_dict() == data


def test_to_dict_omits_empty_consumers():
    result = ResourceMeta(name="x").to_dict()
    assert "consumers" not in result
    assert result["labels"] is None


def test_from_dict_rejects_unknown_field():
    with pytest.raises(ValueError, match="extra"):
        ResourceMeta.from_dict({"name": "x", "extra": 1})


def test_from_dict_rejects_wrong_type():
    with pytest.raises(ValueError):
        ResourceMeta.from_dict({"name": 5})


def test_from_dict_none_gives_defaults():
    assert ResourceMeta.from_dict(None) == ResourceMeta()