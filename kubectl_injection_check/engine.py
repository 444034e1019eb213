import os
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from fnmatch import fnmatchcase

from kubectl_injection_check.constants import DEFAULT_SYSTEM_NAMESPACES, KNOWN_KINDS
from kubectl_injection_check.context import AnalysisContext, system_namespace_predicate
from kubectl_injection_check.loader import load_analyzers, load_plugins
from kubectl_injection_check.messages import Diagnostic
from kubectl_injection_check.rules.base_rule import Analyzer
from kubectl_injection_check.snapshot import ClusterSnapshot

_DEFAULT_ANALYZERS = None


def get_default_analyzers() -> list[Analyzer]:
    global _DEFAULT_ANALYZERS
    if _DEFAULT_ANALYZERS is None:
        rules_path = os.path.join(os.path.dirname(__file__), "rules")
        plugin_path = os.path.join(os.path.dirname(__file__), "plugins")
        _DEFAULT_ANALYZERS = load_analyzers(rules_path) + load_plugins(plugin_path)
    return _DEFAULT_ANALYZERS


def debug(msg: str) -> None:
    print(f"[DEBUG] {msg}", file=sys.stderr)


# ----------------------------
# Suppression
# ----------------------------


@dataclass(frozen=True)
class Suppression:
    """
    Drops diagnostics whose code and resource match the given patterns.
    The resource pattern matches either the full name ('ns/pod') or the
    kind-qualified origin ('Pod ns/pod'); shell wildcards are allowed.
    """

    code: str
    resource: str

    def matches(self, diagnostic: Diagnostic) -> bool:
        if not fnmatchcase(diagnostic.code, self.code):
            return False
        return fnmatchcase(diagnostic.resource.full_name, self.resource) or fnmatchcase(
            diagnostic.origin(), self.resource
        )


def parse_suppression(entry: str) -> Suppression:
    code, sep, resource = entry.partition("=")
    code, resource = code.strip(), resource.strip()
    if not sep or not code or not resource:
        raise ValueError(
            f"Invalid suppression {entry!r}, expected CODE=RESOURCE (e.g. IST0102=default)"
        )
    return Suppression(code=code, resource=resource)


def apply_suppressions(
    diagnostics: list[Diagnostic], suppressions: Iterable[Suppression]
) -> tuple[list[Diagnostic], list[Diagnostic]]:
    """
    Returns:
    - kept: diagnostics no suppression matched, in original order
    - dropped: the suppressed ones
    """
    suppressions = list(suppressions)
    kept: list[Diagnostic] = []
    dropped: list[Diagnostic] = []
    for d in diagnostics:
        if any(s.matches(d) for s in suppressions):
            dropped.append(d)
        else:
            kept.append(d)
    return kept, dropped


# ----------------------------
# Analysis engine
# ----------------------------


def analyze_snapshot(
    snapshot: ClusterSnapshot,
    analyzers: list[Analyzer] | None = None,
    system_namespaces: Iterable[str] = DEFAULT_SYSTEM_NAMESPACES,
    suppressions: Iterable[Suppression] | None = None,
    verbose: bool = False,
) -> list[Diagnostic]:
    """
    Runs every analyzer over the snapshot and collects its diagnostics.

    - Each analyzer gets a fresh context; nothing carries over between runs
    - Diagnostics keep emission order, analyzers run in the given order
    - Suppressed diagnostics are dropped last
    """
    analyzers = analyzers if analyzers is not None else get_default_analyzers()
    is_system_namespace = system_namespace_predicate(system_namespaces)

    if verbose:
        debug(
            f"Snapshot has {len(snapshot)} resources "
            f"({', '.join(f'{k}={snapshot.count(k)}' for k in KNOWN_KINDS)})"
        )

    diagnostics: list[Diagnostic] = []
    for analyzer in analyzers:
        ctx = AnalysisContext(snapshot, is_system_namespace=is_system_namespace)
        analyzer.analyze(ctx)
        if verbose:
            debug(
                f"Analyzer '{analyzer.name}' reported {len(ctx.diagnostics)} diagnostics"
            )
        diagnostics.extend(ctx.diagnostics)

    if suppressions:
        diagnostics, dropped = apply_suppressions(diagnostics, suppressions)
        if verbose and dropped:
            debug(f"Suppressed {len(dropped)} diagnostics")

    return diagnostics
