"""YAML encoding and decoding of plain data."""

from __future__ import annotations

import dataclasses
from typing import Any

import yaml


def _plain(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _plain(dataclasses.asdict(obj))
    if isinstance(obj, dict):
        return {key: _plain(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_plain(item) for item in obj]
    return obj


def marshal_to_yaml(obj: Any) -> bytes:
    """Encode an object as YAML with keys in sorted order."""
    try:
        text = yaml.safe_dump(
            _plain(obj), default_flow_style=False, sort_keys=True, allow_unicode=True
        )
    except yaml.YAMLError as exc:
        raise TypeError(f"cannot encode value as YAML: {exc}") from exc
    return text.encode("utf-8")


def unmarshal_from_yaml(data: bytes | str) -> Any:
    """Decode YAML bytes or text into plain Python data."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    try:
        return yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid YAML: {exc}") from exc