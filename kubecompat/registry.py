"""Registry of resource kinds and the API group/versions that serve them."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

import yaml


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with one of its versions."""

    group: str = ""
    version: str = ""

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


@dataclass(frozen=True)
class GroupVersionResource:
    """An API group, version and the plural resource name served there."""

    group: str = ""
    version: str = ""
    resource: str = ""

    def group_version(self) -> GroupVersion:
        return GroupVersion(self.group, self.version)


def parse_group_version(text: str) -> GroupVersion:
    """Parse ``group/version`` or a bare ``version`` string."""
    if not text or text == "/":
        return GroupVersion()
    parts = text.split("/")
    if len(parts) == 1:
        return GroupVersion("", text)
    if len(parts) == 2:
        return GroupVersion(parts[0], parts[1])
    raise ValueError(f"unexpected GroupVersion string: {text}")


_KNOWN_KIND_GVRS: dict[str, list[GroupVersion]] = {
    "Deployment": [
        GroupVersion("apps", "v1"),
        GroupVersion("apps", "v1beta2"),
        GroupVersion("extensions", "v1beta1"),
    ],
    "StatefulSet": [GroupVersion("apps", "v1")],
    "DaemonSet": [GroupVersion("apps", "v1")],
    "Job": [GroupVersion("batch", "v1")],
    "CronJob": [GroupVersion("batch", "v1")],
}


def register_kind(kind: str, group_versions: Iterable[GroupVersion] | None) -> None:
    """Register (or replace) the preferred group/versions for a kind."""
    _KNOWN_KIND_GVRS[kind] = list(group_versions or [])


def known_kinds() -> dict[str, list[GroupVersion]]:
    """Return a copy of the kind to group/version registry."""
    return {kind: list(gvs) for kind, gvs in _KNOWN_KIND_GVRS.items()}


def _string_field(entry: dict[str, Any], name: str) -> str:
    value = entry.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"failed to parse yaml: field {name!r} must be a string")
    return value


def load_kind_gvr_from_file(file_path: str | Path) -> None:
    """Load kind to group/version mappings from a YAML file and register them."""
    raw = Path(file_path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse yaml: {exc}") from exc
    if data is None:
        return
    if not isinstance(data, dict):
        raise ValueError("failed to parse yaml: expected a mapping of kinds")

    parsed: dict[str, list[GroupVersion]] = {}
    for kind, entries in data.items():
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise ValueError(f"failed to parse yaml: entries for {kind} must be a list")
        group_versions = []
        for entry in entries:
            if entry is None:
                entry = {}
            if not isinstance(entry, dict):
                raise ValueError(f"failed to parse yaml: entry for {kind} must be a mapping")
            group_versions.append(
                GroupVersion(_string_field(entry, "group"), _string_field(entry, "version"))
            )
        parsed[str(kind)] = group_versions

    for kind, group_versions in parsed.items():
        register_kind(kind, group_versions)