from collections.abc import Callable, Iterable, Iterator

from kubectl_injection_check.constants import DEFAULT_SYSTEM_NAMESPACES
from kubectl_injection_check.messages import Diagnostic
from kubectl_injection_check.model import Resource
from kubectl_injection_check.snapshot import ClusterSnapshot


def system_namespace_predicate(
    namespaces: Iterable[str] = DEFAULT_SYSTEM_NAMESPACES,
) -> Callable[[str], bool]:
    reserved = frozenset(namespaces)
    return lambda ns: ns in reserved


class AnalysisContext:
    """
    What one analyzer sees during a run: read access to the snapshot, the
    system-namespace predicate, and an append-only diagnostic sink.
    """

    def __init__(
        self,
        snapshot: ClusterSnapshot,
        is_system_namespace: Callable[[str], bool] | None = None,
    ):
        self.snapshot = snapshot
        self.is_system_namespace = is_system_namespace or system_namespace_predicate()
        self.diagnostics: list[Diagnostic] = []

    def resources(self, kind: str) -> Iterator[Resource]:
        return self.snapshot.resources(kind)

    def report(self, kind: str, diagnostic: Diagnostic) -> None:
        if diagnostic.resource.kind != kind:
            raise ValueError(
                f"{diagnostic.code} reported under {kind} "
                f"but concerns {diagnostic.origin()}"
            )
        self.diagnostics.append(diagnostic)
