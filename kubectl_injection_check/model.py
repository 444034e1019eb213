import json
import sys
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Union

import yaml

from kubectl_injection_check.constants import KNOWN_KINDS, NAMESPACE_KIND, POD_KIND

# ----------------------------
# Parsing utilities
# ----------------------------


def load_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_documents(path: str) -> list[Any]:
    """
    Load every document from a JSON or YAML file.
    YAML files may hold several documents separated by '---'.
    """
    if path.endswith(".json"):
        return [load_json(path)]

    with open(path, encoding="utf-8") as f:
        return [doc for doc in yaml.safe_load_all(f) if doc is not None]


def normalize_items(doc: Any) -> list[dict[str, Any]]:
    """
    Flatten a document into a list of Kubernetes objects.
    Accepts a single object, a plain list, or a 'kind: List' wrapper.
    """
    if isinstance(doc, list):
        items = doc
    elif isinstance(doc, dict) and str(doc.get("kind") or "").endswith("List"):
        items = doc.get("items") or []
    else:
        items = [doc]

    for item in items:
        if not isinstance(item, dict):
            raise ValueError(f"Expected a Kubernetes object mapping, got {type(item).__name__}")
    return items


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def get_metadata(obj: dict[str, Any]) -> dict[str, Any]:
    return _mapping(obj.get("metadata"), f"{obj.get('kind')} metadata")


def _frozen(mapping: Any, where: str) -> Mapping[str, str]:
    # Unquoted YAML scalars arrive as non-strings. `false` still reads as
    # "False", but a float like `1.10` has already lost its text as 1.1.
    values = {}
    for k, v in _mapping(mapping, where).items():
        if v is not None and not isinstance(v, str):
            print(
                f"[WARNING] {where}: {k} is {type(v).__name__} {v!r}, "
                f"quote it in the manifest to keep its exact value",
                file=sys.stderr,
            )
        values[str(k)] = "" if v is None else str(v)
    return MappingProxyType(values)


# ----------------------------
# Typed resource views
# ----------------------------


@dataclass(frozen=True)
class Container:
    name: str
    image: str = ""


@dataclass(frozen=True)
class NamespaceView:
    name: str
    labels: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PodView:
    name: str
    namespace: str
    labels: Mapping[str, str] = field(default_factory=dict)
    annotations: Mapping[str, str] = field(default_factory=dict)
    containers: tuple[Container, ...] = ()


@dataclass(frozen=True)
class Resource:
    """
    A snapshot entry: identity, metadata maps and the typed view of its body.
    """

    kind: str
    full_name: str
    labels: Mapping[str, str]
    annotations: Mapping[str, str]
    view: Union[NamespaceView, PodView]

    @property
    def pod(self) -> PodView:
        if not isinstance(self.view, PodView):
            raise TypeError(f"{self.kind} {self.full_name} is not a Pod")
        return self.view

    @property
    def namespace(self) -> NamespaceView:
        if not isinstance(self.view, NamespaceView):
            raise TypeError(f"{self.kind} {self.full_name} is not a Namespace")
        return self.view


def _parse_containers(pod_name: str, spec: dict[str, Any]) -> tuple[Container, ...]:
    raw = spec.get("containers") or []
    if not isinstance(raw, list):
        raise ValueError(f"Pod {pod_name}: spec.containers must be a list")

    containers = []
    for c in raw:
        if not isinstance(c, dict):
            raise ValueError(f"Pod {pod_name}: container entries must be mappings")
        containers.append(Container(name=c.get("name", ""), image=c.get("image") or ""))
    return tuple(containers)


def resource_from_manifest(obj: dict[str, Any]) -> Resource:
    """
    Resolve a raw Namespace or Pod manifest into a Resource.
    Raises ValueError for unsupported kinds, missing names or wrongly
    shaped metadata and spec.
    """
    kind = obj.get("kind")
    if kind not in KNOWN_KINDS:
        raise ValueError(f"Unsupported kind {kind!r}, expected one of {list(KNOWN_KINDS)}")

    meta = get_metadata(obj)
    name = meta.get("name")
    if not name:
        raise ValueError(f"{kind} is missing metadata.name")
    if not isinstance(name, str):
        raise ValueError(f"{kind} metadata.name must be a string")

    labels = _frozen(meta.get("labels"), f"{kind} {name}: metadata.labels")
    annotations = _frozen(meta.get("annotations"), f"{kind} {name}: metadata.annotations")

    if kind == NAMESPACE_KIND:
        return Resource(
            kind=kind,
            full_name=name,
            labels=labels,
            annotations=annotations,
            view=NamespaceView(name=name, labels=labels),
        )

    namespace = meta.get("namespace") or "default"
    pod = PodView(
        name=name,
        namespace=namespace,
        labels=labels,
        annotations=annotations,
        containers=_parse_containers(name, _mapping(obj.get("spec"), f"Pod {name}: spec")),
    )
    return Resource(
        kind=POD_KIND,
        full_name=f"{namespace}/{name}",
        labels=labels,
        annotations=annotations,
        view=pod,
    )
