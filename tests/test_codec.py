from dataclasses import asdict, dataclass, field

import pytest

from kubecompat.codec import marshal_to_yaml, unmarshal_from_yaml


@dataclass
class _Sample:
    name: str
    labels: dict = field(default_factory=dict)
    ports: tuple = ()


def test_round_trip_nested():
    document = {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": "web", "labels": {"app": "web"}},
        "spec": {"replicas": 3, "template": {"spec": {"containers": [{"name": "main"}]}}},
    }
    assert unmarshal_from_yaml(marshal_to_yaml(document)) == document


def test_keys_are_sorted():
    assert marshal_to_yaml({"b": 1, "a": "x"}) == b"a: x\nb: 1\n"


def test_output_is_bytes_and_decodes_as_text():
    encoded = marshal_to_yaml({"kind": "Job"})
    assert encoded.decode("utf-8").startswith("kind: Job")


def test_unmarshal_accepts_text():
    assert unmarshal_from_yaml("kind: CronJob\n") == {"kind": "CronJob"}


def test_unmarshal_empty_is_none():
    assert unmarshal_from_yaml(b"") is None


def test_unmarshal_invalid():
    with pytest.raises(ValueError):
        unmarshal_from_yaml(b"key: [unclosed\n")


def test_dataclass_encodes_as_mapping():
    sample = _Sample("web", {"app": "web"}, (80, 443))
    decoded = unmarshal_from_yaml(marshal_to_yaml(sample))
    expected = asdict(sample)
    expected["ports"] = list(expected["ports"])
    assert decoded == expected


def test_unrepresentable_value():
    with pytest.raises(TypeError):
        marshal_to_yaml({"value": object()})