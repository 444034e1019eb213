import os
from collections.abc import Iterable, Iterator
from typing import Any

from kubectl_injection_check.constants import KNOWN_KINDS
from kubectl_injection_check.model import (
    Resource,
    load_documents,
    normalize_items,
    resource_from_manifest,
)

SNAPSHOT_EXTENSIONS = (".json", ".yaml", ".yml")


class ClusterSnapshot:
    """
    Immutable, point-in-time view of the Namespaces and Pods under analysis.
    Iteration order is the order the objects were loaded in.
    """

    def __init__(self, resources: Iterable[Resource] = ()):
        by_kind: dict[str, list[Resource]] = {kind: [] for kind in KNOWN_KINDS}
        for r in resources:
            by_kind.setdefault(r.kind, []).append(r)
        self._by_kind = {kind: tuple(items) for kind, items in by_kind.items()}

    @classmethod
    def from_objects(cls, objects: Iterable[dict[str, Any]]) -> "ClusterSnapshot":
        """
        Build a snapshot from raw manifests. Objects of other kinds are skipped.
        """
        return cls(
            resource_from_manifest(obj)
            for obj in objects
            if obj.get("kind") in KNOWN_KINDS
        )

    def resources(self, kind: str) -> Iterator[Resource]:
        """
        Fresh iterator over every resource of the given kind.
        Unknown kinds yield nothing.
        """
        return iter(self._by_kind.get(kind, ()))

    def count(self, kind: str) -> int:
        return len(self._by_kind.get(kind, ()))

    def __len__(self) -> int:
        return sum(len(items) for items in self._by_kind.values())


def _expand_paths(paths: Iterable[str]) -> list[str]:
    files: list[str] = []
    for path in paths:
        if os.path.isdir(path):
            for f in sorted(os.listdir(path)):
                if f.endswith(SNAPSHOT_EXTENSIONS):
                    files.append(os.path.join(path, f))
        elif os.path.exists(path):
            files.append(path)
        else:
            raise FileNotFoundError(f"Snapshot path not found: {path}")
    return files


def load_snapshot(paths: Iterable[str]) -> ClusterSnapshot:
    """
    Load Namespaces and Pods from JSON/YAML files or directories of them.
    """
    objects: list[dict[str, Any]] = []
    for file in _expand_paths(paths):
        for doc in load_documents(file):
            objects.extend(normalize_items(doc))
    return ClusterSnapshot.from_objects(objects)
