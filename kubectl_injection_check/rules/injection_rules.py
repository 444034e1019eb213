from kubectl_injection_check.constants import (
    CONTROL_PLANE_APP,
    CONTROL_PLANE_APP_LABEL,
    INJECTION_ENABLE_VALUE,
    INJECTION_LABEL,
    MESH_SYSTEM_NAMESPACE,
    NAMESPACE_KIND,
    POD_KIND,
    PROXY_CONTAINER_NAME,
    REVISION_LABEL,
    SIDECAR_INJECT_ANNOTATION,
)
from kubectl_injection_check.context import AnalysisContext
from kubectl_injection_check.messages import (
    namespace_invalid_injector_revision,
    namespace_multiple_injection_labels,
    namespace_not_injected,
    pod_missing_proxy,
)
from kubectl_injection_check.model import PodView
from kubectl_injection_check.rules.base_rule import Analyzer


def is_control_plane(pod: PodView) -> bool:
    if pod.namespace != MESH_SYSTEM_NAMESPACE:
        return False
    return pod.labels.get(CONTROL_PLANE_APP_LABEL) == CONTROL_PLANE_APP


def proxy_image(pod: PodView) -> str:
    for container in pod.containers:
        if container.name == PROXY_CONTAINER_NAME:
            return container.image
    return ""


class InjectionAnalyzer(Analyzer):
    """
    Checks conditions related to Istio sidecar injection.

    Three passes, each completed before the next starts:
      1. collect the revisions of running control plane pods
      2. classify namespaces by their injection labels
      3. flag pods in injected namespaces that lack the proxy container
    """

    name = "injection.Analyzer"
    description = "Checks conditions related to Istio sidecar injection"
    inputs = [NAMESPACE_KIND, POD_KIND]

    def analyze(self, ctx: AnalysisContext) -> None:
        revisions = self.control_plane_revisions(ctx)
        injected = self.injected_namespaces(ctx, revisions)
        self.check_pods(ctx, injected)

    def control_plane_revisions(self, ctx: AnalysisContext) -> tuple[str, ...]:
        # Unlabeled control plane pods serve the default revision, which is
        # not tracked by name.
        revisions: dict[str, None] = {}
        for r in ctx.resources(POD_KIND):
            pod = r.pod
            if not is_control_plane(pod):
                continue
            if REVISION_LABEL in pod.labels:
                revisions.setdefault(pod.labels[REVISION_LABEL], None)
        return tuple(revisions)

    def injected_namespaces(
        self, ctx: AnalysisContext, revisions: tuple[str, ...]
    ) -> set[str]:
        injected: set[str] = set()

        for r in ctx.resources(NAMESPACE_KIND):
            namespace = r.namespace
            ns = namespace.name
            if ctx.is_system_namespace(ns):
                continue

            legacy = namespace.labels.get(INJECTION_LABEL, "")
            has_revision = REVISION_LABEL in namespace.labels

            if not legacy and not has_revision:
                ctx.report(NAMESPACE_KIND, namespace_not_injected(r, ns))
                continue

            if has_revision:
                # Legacy and revision labels are mutually exclusive,
                # whatever their values.
                if legacy:
                    ctx.report(
                        NAMESPACE_KIND, namespace_multiple_injection_labels(r, ns)
                    )
                    continue
                revision = namespace.labels[REVISION_LABEL]
                if revision not in revisions:
                    ctx.report(
                        NAMESPACE_KIND,
                        namespace_invalid_injector_revision(
                            r, ns, revision, ", ".join(revisions)
                        ),
                    )
                    continue
            elif legacy != INJECTION_ENABLE_VALUE:
                # Any other legacy value is a deliberate opt-out.
                continue

            injected.add(ns)

        return injected

    def check_pods(self, ctx: AnalysisContext, injected: set[str]) -> None:
        for r in ctx.resources(POD_KIND):
            pod = r.pod
            if pod.namespace not in injected:
                continue

            # Explicit per-pod opt-out wins over namespace policy
            if pod.annotations.get(SIDECAR_INJECT_ANNOTATION, "").lower() == "false":
                continue

            if not proxy_image(pod):
                ctx.report(POD_KIND, pod_missing_proxy(r))
