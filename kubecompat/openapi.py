"""Fetching the server's OpenAPI document and reading spec fields from it."""

from __future__ import annotations

import json
import threading
import urllib.error
import urllib.request
from typing import Any


class OpenAPISchemaError(Exception):
    """The OpenAPI document could not be fetched or lacks the requested data."""


class OpenAPISchemaError_Base:  # pragma: no cover - placeholder name guard
    pass


del OpenAPISchemaError_Base


class OpenAPISchemaCache:
    """Holds an OpenAPI v2 document fetched at most once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._document: dict[str, Any] | None = None
        self._done = False

    def fetch(self, api_server: str, token: str) -> dict[str, Any] | None:
        """Fetch ``/openapi/v2`` on the first call; later calls return the cached document."""
        with self._lock:
            if self._done:
                return self._document
            self._done = True
            url = f"{api_server.removesuffix('/')}/openapi/v2"
            request = urllib.request.Request(
                url,
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
                method="GET",
            )
            try:
                with urllib.request.urlopen(request) as response:
                    body = response.read()
            except urllib.error.HTTPError as exc:
                with exc:
                    body = exc.read()
            except (urllib.error.URLError, OSError, ValueError) as exc:
                raise OpenAPISchemaError(str(exc)) from exc

            try:
                document = json.loads(body)
            except (ValueError, UnicodeDecodeError) as exc:
                raise OpenAPISchemaError(f"invalid OpenAPI document: {exc}") from exc
            if document is not None and not isinstance(document, dict):
                raise OpenAPISchemaError("invalid OpenAPI document: expected a JSON object")
            self._document = document
            return document

    def load(self, document: dict[str, Any] | None) -> None:
        """Use the given document instead of fetching one."""
        with self._lock:
            self._document = document
            self._done = True

    def clear(self) -> None:
        """Forget the cached document so the next fetch goes to the server."""
        with self._lock:
            self._document = None
            self._done = False

    def extract_spec_fields(self, gvk: str) -> list[str]:
        """Return the property names of ``.spec`` for the given definition key."""
        document = self._document
        definitions = document.get("definitions") if isinstance(document, dict) else None
        if not isinstance(definitions, dict):
            raise OpenAPISchemaError("OpenAPI: no definitions found")
        schema = definitions.get(gvk)
        if not isinstance(schema, dict):
            raise OpenAPISchemaError(f"GVK {gvk} not found in schema")
        properties = schema.get("properties")
        if not isinstance(properties, dict) or "spec" not in properties:
            raise OpenAPISchemaError(f".spec not found in schema for {gvk}")
        spec = properties["spec"]
        spec_fields = spec.get("properties") if isinstance(spec, dict) else None
        if not isinstance(spec_fields, dict):
            raise OpenAPISchemaError(f".spec has no sub-properties in {gvk}")
        return list(spec_fields)


DEFAULT_SCHEMA_CACHE = OpenAPISchemaCache()


def fetch_openapi_schema(api_server: str, token: str) -> dict[str, Any] | None:
    """Fetch the OpenAPI document into the shared cache."""
    return DEFAULT_SCHEMA_CACHE.fetch(api_server, token)


def extract_spec_fields_from_openapi(gvk: str) -> list[str]:
    """Read ``.spec`` field names from the shared cache."""
    return DEFAULT_SCHEMA_CACHE.extract_spec_fields(gvk)


def build_gvk_key(group: str, version: str, kind: str) -> str:
    """Build the OpenAPI definition key for a built-in kind."""
    if group == "" or group == "core":
        group = "core"
    return f"io.k8s.api.{group}.{version}.{kind}"