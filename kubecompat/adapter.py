"""A kind-agnostic adapter over workload resources served by a cluster API."""

from __future__ import annotations

import copy
import enum
import json
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Protocol

from kubecompat.registry import GroupVersion, GroupVersionResource, parse_group_version


class EventType(str, enum.Enum):
    """Kinds of change reported by a watch."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


class ResourceNotFoundError(LookupError):
    """The requested object does not exist on the server."""


class UnsupportedKindError(ValueError):
    """The kind is not handled, or the server offers no usable version of it."""


class ResourceClient(Protocol):
    """Namespaced access to one resource type."""

    def get(self, name: str) -> dict[str, Any]: ...

    def create(self, obj: dict[str, Any]) -> Any: ...

    def update(self, obj: dict[str, Any]) -> Any: ...

    def delete(self, name: str) -> Any: ...

    def list(self) -> Iterable[dict[str, Any]]: ...

    def watch(self) -> Iterable[tuple[str, Any]]: ...


class _NamespaceableResource(Protocol):
    def namespace(self, namespace: str) -> ResourceClient: ...


class DynamicClient(Protocol):
    """Client that reaches any resource by its group/version/resource."""

    def resource(self, gvr: GroupVersionResource) -> _NamespaceableResource: ...


class DiscoveryClient(Protocol):
    """Client that lists the resources a server prefers for each group/version."""

    def server_preferred_resources(self) -> Iterable[Mapping[str, Any]]: ...


@dataclass
class CompatibleEngine:
    """A workload described independently of its controller kind."""

    name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    replicas: int = 0
    image: str = ""
    api_versions: list[str] = field(default_factory=list)
    kind: str = ""
    spec: dict[str, Any] = field(default_factory=dict)
    status: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    spec_patch: dict[str, Any] = field(default_factory=dict)


SUPPORTED_KINDS = frozenset({"Deployment", "StatefulSet", "DaemonSet", "Job", "CronJob"})

_PREFERRED_GROUP_VERSIONS: dict[str, tuple[GroupVersion, ...]] = {
    "Deployment": (
        GroupVersion("apps", "v1"),
        GroupVersion("apps", "v1beta2"),
        GroupVersion("extensions", "v1beta1"),
    ),
    "StatefulSet": (GroupVersion("apps", "v1"),),
    "DaemonSet": (GroupVersion("apps", "v1"),),
    "Job": (GroupVersion("batch", "v1"),),
    "CronJob": (GroupVersion("batch", "v1"),),
}


def select_gvr(discovery: DiscoveryClient, kind: str) -> GroupVersionResource:
    """Pick the most preferred group/version the server offers for ``kind``."""
    possible: dict[GroupVersion, str] = {}
    for resource_list in discovery.server_preferred_resources():
        try:
            gv = parse_group_version(resource_list.get("groupVersion", ""))
        except ValueError:
            continue
        for resource in resource_list.get("resources") or []:
            if resource.get("kind") == kind:
                possible[gv] = resource["name"]

    for gv in _PREFERRED_GROUP_VERSIONS.get(kind, ()):
        if gv in possible:
            return GroupVersionResource(gv.group, gv.version, possible[gv])
    raise UnsupportedKindError(f"no supported {kind} version found")


def _labels(engine: CompatibleEngine) -> dict[str, str] | None:
    return None if engine.labels is None else dict(engine.labels)


def _pod_template(engine: CompatibleEngine) -> dict[str, Any]:
    return {
        "metadata": {"labels": _labels(engine)},
        "spec": {"containers": [{"name": "main", "image": engine.image}]},
    }


def to_unstructured(group_version: GroupVersion, engine: CompatibleEngine) -> dict[str, Any]:
    """Build the API object for ``engine`` under the given group/version."""
    obj: dict[str, Any] = {
        "apiVersion": f"{group_version.group}/{group_version.version}",
        "kind": engine.kind,
        "metadata": {"name": engine.name, "labels": _labels(engine)},
    }

    if engine.kind in ("Deployment", "StatefulSet", "DaemonSet"):
        obj["spec"] = {
            "replicas": engine.replicas,
            "selector": {"matchLabels": _labels(engine)},
            "template": _pod_template(engine),
        }
    elif engine.kind == "Job":
        obj["spec"] = {"template": _pod_template(engine), "backoffLimit": 4}
    elif engine.kind == "CronJob":
        obj["spec"] = {
            "schedule": "*/1 * * * *",
            "jobTemplate": {"spec": {"template": _pod_template(engine)}},
        }

    if engine.spec_patch:
        spec = obj.setdefault("spec", {})
        for key, value in engine.spec_patch.items():
            spec[key] = copy.deepcopy(value)
    return obj


def _nested(obj: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(obj, dict) or key not in obj:
            return None
        obj = obj[key]
    return obj


def _nested_string(obj: Any, *path: str) -> str:
    value = _nested(obj, *path)
    return value if isinstance(value, str) else ""


def _nested_string_map(obj: Any, *path: str) -> dict[str, str]:
    value = _nested(obj, *path)
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        return {}
    return dict(value)


def _nested_int(obj: Any, *path: str) -> int:
    value = _nested(obj, *path)
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def _nested_map(obj: Any, *path: str) -> dict[str, Any]:
    value = _nested(obj, *path)
    return copy.deepcopy(value) if isinstance(value, dict) else {}


def _nested_list(obj: Any, *path: str) -> list[Any]:
    value = _nested(obj, *path)
    return copy.deepcopy(value) if isinstance(value, list) else []


def _nested_string_list(obj: Any, *path: str) -> list[str]:
    value = _nested(obj, *path)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return []
    return list(value)


def from_unstructured(
    group_version: GroupVersion, kind: str, obj: Mapping[str, Any]
) -> CompatibleEngine:
    """Read the common workload fields out of an API object."""
    containers = _nested_list(obj, "spec", "template", "spec", "containers")
    image = ""
    if containers and isinstance(containers[0], dict):
        first_image = containers[0].get("image")
        if isinstance(first_image, str):
            image = first_image

    return CompatibleEngine(
        name=_nested_string(obj, "metadata", "name"),
        labels=_nested_string_map(obj, "metadata", "labels"),
        replicas=_nested_int(obj, "spec", "replicas"),
        image=image,
        kind=kind,
        api_versions=_nested_string_list(obj, "apiVersion"),
        spec=_nested_map(obj, "spec"),
        status=_nested_map(obj, "status"),
        metadata={
            "annotations": _nested_string_map(obj, "metadata", "annotations"),
            "ownerReferences": _nested_list(obj, "metadata", "ownerReferences"),
            "creationTimestamp": _nested_string(obj, "metadata", "creationTimestamp"),
        },
    )


class CompatibleEngineAdapter:
    """Create, read, change and watch workloads of one kind through a dynamic client."""

    def __init__(self, dynamic: DynamicClient, gvr: GroupVersionResource, kind: str) -> None:
        self.dynamic = dynamic
        self.gvr = gvr
        self.kind = kind

    def _resource(self, namespace: str) -> ResourceClient:
        return self.dynamic.resource(self.gvr).namespace(namespace)

    @staticmethod
    def _merge_into(existing: dict[str, Any], desired: dict[str, Any]) -> None:
        existing["spec"] = desired.get("spec")
        existing.setdefault("metadata", {})["labels"] = desired["metadata"]["labels"]

    def create(self, namespace: str, engine: CompatibleEngine) -> None:
        """Create the workload, or update spec and labels if it already exists."""
        desired = to_unstructured(self.gvr.group_version(), engine)
        resource = self._resource(namespace)
        try:
            existing = resource.get(engine.name)
        except Exception:  # any lookup failure means the object is created afresh
            resource.create(desired)
            return
        self._merge_into(existing, desired)
        resource.update(existing)

    def update(self, namespace: str, engine: CompatibleEngine) -> None:
        """Replace spec and labels of an existing workload."""
        desired = to_unstructured(self.gvr.group_version(), engine)
        resource = self._resource(namespace)
        existing = resource.get(engine.name)
        self._merge_into(existing, desired)
        resource.update(existing)

    def get(self, namespace: str, name: str) -> CompatibleEngine:
        obj = self._resource(namespace).get(name)
        return from_unstructured(self.gvr.group_version(), self.kind, obj)

    def delete(self, namespace: str, name: str) -> None:
        self._resource(namespace).delete(name)

    def list(self, namespace: str) -> list[CompatibleEngine]:
        gv = self.gvr.group_version()
        return [
            from_unstructured(gv, self.kind, item)
            for item in self._resource(namespace).list()
            if isinstance(item, dict)
        ]

    def patch(self, namespace: str, name: str, patch: Mapping[str, Any]) -> None:
        """Replace top-level fields of the stored object with those in ``patch``."""
        resource = self._resource(namespace)
        obj = resource.get(name)
        obj.update(patch)
        resource.update(obj)

    def watch(
        self,
        namespace: str,
        on_event: Callable[[EventType, CompatibleEngine], None],
        stop: threading.Event | None = None,
    ) -> threading.Thread:
        """Start a background thread that reports events until ``stop`` is set or the watch ends."""
        watcher = self._resource(namespace).watch()
        stop = stop or threading.Event()
        gv = self.gvr.group_version()

        def run() -> None:
            try:
                for event_type, obj in watcher:
                    if stop.is_set():
                        return
                    if isinstance(obj, dict):
                        on_event(EventType(event_type), from_unstructured(gv, self.kind, obj))
            finally:
                close = getattr(watcher, "stop", None)
                if callable(close):
                    close()

        thread = threading.Thread(target=run, name=f"watch-{self.kind}", daemon=True)
        thread.start()
        return thread

    def export_yaml(self, namespace: str, name: str) -> str:
        """Return the stored object as indented JSON text."""
        obj = self._resource(namespace).get(name)
        return json.dumps(obj, indent=2, sort_keys=True, ensure_ascii=False)


def new_compatible_engine_adapter(
    discovery: DiscoveryClient, dynamic: DynamicClient, kind: str
) -> CompatibleEngineAdapter:
    """Build an adapter bound to the best group/version the server offers for ``kind``."""
    return CompatibleEngineAdapter(dynamic, select_gvr(discovery, kind), kind)


def create_adapter(
    discovery: DiscoveryClient, dynamic: DynamicClient, kind: str
) -> CompatibleEngineAdapter:
    """Build an adapter for one of the supported workload kinds."""
    if kind not in SUPPORTED_KINDS:
        raise UnsupportedKindError(f"unsupported kind: {kind}")
    return new_compatible_engine_adapter(discovery, dynamic, kind)