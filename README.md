# kubecompat

kubecompat handles Kubernetes workload kinds (Deployment, StatefulSet,
DaemonSet, Job and CronJob) through one shared model,
`kubecompat.adapter.CompatibleEngine`. It works out which API group and
version a cluster serves for a kind. The same code can then run against
clusters of different ages.

## Installation

```
pip install kubecompat
```

To run the test suite:

```
pip install "kubecompat[test]"
pytest
```

## What you supply

kubecompat has no HTTP transport or kubeconfig handling of its own. It does
not talk to a cluster's resource endpoints. You pass in two client objects:

- A **discovery client**. Its `server_preferred_resources()` returns
  resource lists shaped like the discovery JSON:
  `{"groupVersion": "apps/v1", "resources": [{"name": "deployments", "kind": "Deployment"}]}`.
- A **dynamic client**. `dynamic.resource(gvr).namespace(ns)` returns an
  object that provides the following on plain dictionaries:
  - `get(name)`
  - `create(obj)`
  - `update(obj)`
  - `delete(name)`
  - `list()`
  - `watch()`, which yields `(event_type, obj)` pairs.

The `DiscoveryClient`, `DynamicClient` and `ResourceClient` protocols in
`kubecompat.adapter` describe these shapes.

The package also has no command-line interface.

## Choosing a group and version

`select_gvr(discovery, kind)` collects the resources whose `kind` matches. It
then tries the candidates for that kind in order of preference. For a
Deployment the order is `apps/v1`, then `apps/v1beta2`, then
`extensions/v1beta1`. The other four kinds use `apps/v1` or `batch/v1`. If
none of the candidates is offered, it raises `UnsupportedKindError`.

```python
from kubecompat.adapter import create_adapter, CompatibleEngine

adapter = create_adapter(discovery, dynamic, "Deployment")

adapter.create("default", CompatibleEngine(
    name="web",
    kind="Deployment",
    labels={"app": "web"},
    replicas=3,
    image="nginx:1.27",
))

engine = adapter.get("default", "web")
print(engine.replicas, engine.image)
```

`create_adapter` raises `UnsupportedKindError` for any kind outside the five
it supports. `new_compatible_engine_adapter` does the same group/version
selection but does not check the kind first.

## Adapter operations

`CompatibleEngineAdapter` offers these operations:

- **`create(namespace, engine)`** builds the object with `to_unstructured`.
  If `get` on the dynamic client fails, it creates the object. Otherwise it
  replaces the existing object's `spec` and `metadata.labels`, then updates
  it.
- **`update(namespace, engine)`** does the same replacement, but requires the
  object to exist.
- **`get`** and **`list`** turn stored objects into `CompatibleEngine` values
  with `from_unstructured`. `list` skips items that are not dictionaries.
- **`delete(namespace, name)`** passes the call straight through to the
  dynamic client.
- **`patch(namespace, name, patch)`** replaces top-level fields of the stored
  object with the ones in `patch`.
- **`watch(namespace, on_event, stop=None)`** starts a daemon thread and
  returns it. The thread calls `on_event(EventType, CompatibleEngine)` for
  each event. It stops when the `threading.Event` `stop` is set or when the
  watch ends.
- **`export_yaml(namespace, name)`** returns the stored object as JSON text,
  indented by two spaces, with keys sorted.

`to_unstructured` fills in a different spec for each kind:

- **Deployment, StatefulSet and DaemonSet** get `replicas`, a label selector
  and a pod template.
- **Job** gets a pod template and `backoffLimit: 4`.
- **CronJob** gets the schedule `*/1 * * * *` and a job template.

Each pod template has one container named `main`. Entries in
`engine.spec_patch` are then written over the top-level keys of `spec`.

## Registering more kinds

`kubecompat.registry` keeps a registry of kinds and their candidate
`GroupVersion` values:

- `register_kind(kind, group_versions)` adds a kind or replaces its entry.
- `known_kinds()` returns a copy of the registry.

Candidates can also be loaded from a YAML file that maps each kind to a list
of `group`/`version` entries:

```yaml
Ingress:
  - group: networking.k8s.io
    version: v1
```

```python
from kubecompat.registry import load_kind_gvr_from_file, known_kinds

load_kind_gvr_from_file("kinds.yaml")
print(known_kinds()["Ingress"])
```

If the file is malformed, it raises `ValueError`. `parse_group_version` turns
`"apps/v1"` or `"v1"` into a `GroupVersion`.

## Caching resource lookups

`kubecompat.cache.GVRCache` is a thread-safe map from kind to
`GroupVersionResource`:

- `get(kind)` returns the stored value, or `None` when the kind is not in
  the cache.
- `set(kind, gvr)` stores a value.
- `refresh(discovery, known_kinds())` fills the cache from a discovery
  client.
- `loaded()` reports whether a refresh has completed.

A shared instance is available as `GLOBAL_GVR_CACHE`.

## YAML helpers

`kubecompat.codec.marshal_to_yaml(obj)` returns YAML bytes with keys sorted.
Dataclasses are turned into mappings first.
`unmarshal_from_yaml(data)` accepts either bytes or text.

## Validating specs against OpenAPI

```python
from kubecompat.openapi import fetch_openapi_schema
from kubecompat.validator import validate_spec_from_schema, SpecValidationError

fetch_openapi_schema("https://cluster.example.com:6443", "token")
try:
    validate_spec_from_schema({"replicas": 2, "bogus": 1}, "apps", "v1", "Deployment")
except SpecValidationError as err:
    for problem in err.errors:
        print(problem)
```

`fetch_openapi_schema` sends a bearer-token GET to `/openapi/v2`. It does this
once and keeps the document in a shared `OpenAPISchemaCache`. Later calls
return the cached document.

You can work with an `OpenAPISchemaCache` directly:

- `load(document)` supplies a document without a request.
- `clear()` forgets the cached document.

`build_gvk_key(group, version, kind)` gives keys such as
`io.k8s.api.apps.v1.Deployment`. An empty group becomes `core`.

Any top-level spec field that the definition does not list is reported as a
`FieldError` in `SpecValidationError.errors`. A missing document, definition
or `.spec` section raises `OpenAPISchemaError`. To check against a list of
field names you already have, use `validate_spec_fields(spec, valid_fields)`.