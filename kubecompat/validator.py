"""Checking a spec mapping against the fields an OpenAPI schema allows."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from kubecompat.openapi import (
    OpenAPISchemaError,
    build_gvk_key,
    extract_spec_fields_from_openapi,
)


@dataclass(frozen=True)
class FieldError:
    """One field whose value is not allowed."""

    path: str
    value: Any
    detail: str

    def __str__(self) -> str:
        shown = json.dumps(self.value) if isinstance(self.value, str) else repr(self.value)
        return f"{self.path}: Invalid value: {shown}: {self.detail}"


class SpecValidationError(ValueError):
    """A spec holds fields the schema does not allow."""

    def __init__(self, errors: Iterable[FieldError]) -> None:
        self.errors = tuple(errors)
        if len(self.errors) == 1:
            message = str(self.errors[0])
        else:
            message = "[" + ", ".join(str(error) for error in self.errors) + "]"
        super().__init__(message)


def validate_spec_fields(spec: Mapping[str, Any], valid_fields: Iterable[str]) -> None:
    """Raise SpecValidationError if any key of ``spec`` is not among ``valid_fields``."""
    allowed = set(valid_fields)
    errors = [
        FieldError(f"spec[{key}]", key, "not allowed by OpenAPI schema")
        for key in spec
        if key not in allowed
    ]
    if errors:
        raise SpecValidationError(errors)


def validate_spec_from_schema(
    spec: Mapping[str, Any], group: str, version: str, kind: str
) -> None:
    """Validate ``spec`` keys against the shared OpenAPI document's definition."""
    try:
        fields = extract_spec_fields_from_openapi(build_gvk_key(group, version, kind))
    except OpenAPISchemaError as exc:
        raise OpenAPISchemaError(f"failed to extract spec fields: {exc}") from exc
    validate_spec_fields(spec, fields)