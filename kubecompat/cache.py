"""Thread-safe cache of kind to group/version/resource mappings."""

from __future__ import annotations

import threading
from typing import Any, Iterable, Mapping

from kubecompat.registry import GroupVersion, GroupVersionResource, parse_group_version


class GVRCache:
    """Maps kinds to the group/version/resource the server offers for them.

    ``refresh`` takes a discovery client whose ``server_preferred_resources()``
    returns API resource lists shaped like the discovery JSON:
    ``{"groupVersion": "apps/v1", "resources": [{"name": ..., "kind": ...}]}``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, GroupVersionResource] = {}
        self._loaded = False

    def get(self, kind: str) -> GroupVersionResource | None:
        with self._lock:
            return self._items.get(kind)

    def set(self, kind: str, gvr: GroupVersionResource) -> None:
        with self._lock:
            self._items[kind] = gvr

    def refresh(
        self,
        discovery: Any,
        known_kinds: Mapping[str, Iterable[GroupVersion]],
    ) -> None:
        """Query discovery and record the first available group/version per kind."""
        with self._lock:
            resource_lists = discovery.server_preferred_resources()
            possible: dict[GroupVersion, str] = {}
            for resource_list in resource_lists:
                try:
                    gv = parse_group_version(resource_list.get("groupVersion", ""))
                except ValueError:
                    gv = GroupVersion()
                for resource in resource_list.get("resources") or []:
                    possible[gv] = resource["name"]
            for kind, group_versions in known_kinds.items():
                for gv in group_versions:
                    if gv in possible:
                        self._items[kind] = GroupVersionResource(
                            gv.group, gv.version, possible[gv]
                        )
                        break
            self._loaded = True

    def loaded(self) -> bool:
        """Whether a refresh has completed."""
        with self._lock:
            return self._loaded


GLOBAL_GVR_CACHE = GVRCache()