import pytest

from kubecompat.openapi import DEFAULT_SCHEMA_CACHE, OpenAPISchemaError
from kubecompat.validator import (
    FieldError,
    SpecValidationError,
    validate_spec_fields,
    validate_spec_from_schema,
)

DETAIL = "not allowed by OpenAPI schema"

DOCUMENT = {
    "definitions": {
        "io.k8s.api.apps.v1.Deployment": {
            "properties": {"spec": {"properties": {"replicas": {}, "selector": {}}}}
        },
        "io.k8s.api.core.v1.Pod": {
            "properties": {"spec": {"properties": {"containers": {}}}}
        },
    }
}


@pytest.fixture
def schema():
    DEFAULT_SCHEMA_CACHE.clear()
    DEFAULT_SCHEMA_CACHE.load(DOCUMENT)
    yield
    DEFAULT_SCHEMA_CACHE.clear()


def test_only_unknown_fields_reported():
    with pytest.raises(SpecValidationError) as info:
        validate_spec_fields({"replicas": 1, "bogus": 2}, ["replicas"])
    assert [error.value for error in info.value.errors] == ["bogus"]
    assert info.value.errors[0].detail == DETAIL


def test_single_error_message():
    with pytest.raises(SpecValidationError) as info:
        validate_spec_fields({"foo": 1}, [])
    assert str(info.value) == 'spec[foo]: Invalid value: "foo": not allowed by OpenAPI schema'


def test_error_path():
    with pytest.raises(SpecValidationError) as info:
        validate_spec_fields({"foo": 1}, ["bar"])
    assert info.value.errors[0].path == "spec[foo]"


def test_multiple_errors_aggregate():
    with pytest.raises(SpecValidationError) as info:
        validate_spec_fields({"a": 1, "b": 2, "ok": 3}, ["ok"])
    message = str(info.value)
    assert message.startswith("[") and message.endswith("]")
    assert [error.value for error in info.value.errors] == ["a", "b"]
    assert all(str(error) in message for error in info.value.errors)


def test_is_value_error():
    with pytest.raises(ValueError):
        validate_spec_fields({"x": 1}, ["y"])


def test_field_error_str_uses_detail():
    error = FieldError("spec[z]", "z", DETAIL)
    assert str(error).endswith(DETAIL)


def test_from_schema_reports_unknown(schema):
    with pytest.raises(SpecValidationError) as info:
        validate_spec_from_schema({"replicas": 2, "paused": True}, "apps", "v1", "Deployment")
    assert [error.value for error in info.value.errors] == ["paused"]


def test_from_schema_core_group(schema):
    with pytest.raises(SpecValidationError) as info:
        validate_spec_from_schema({"containers": [], "bad": 1}, "", "v1", "Pod")
    assert [error.value for error in info.value.errors] == ["bad"]


def test_from_schema_unknown_kind(schema):
    with pytest.raises(OpenAPISchemaError, match="failed to extract spec fields"):
        validate_spec_from_schema({}, "apps", "v1", "Missing")