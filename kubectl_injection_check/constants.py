# Injection is assumed to be enabled through the istio-injection=enabled or
# istio.io/rev namespace labels. Mutating webhook configurations can in theory
# do the same, but that setup is rare and not checked here.

INJECTION_LABEL = "istio-injection"
INJECTION_ENABLE_VALUE = "enabled"
REVISION_LABEL = "istio.io/rev"

SIDECAR_INJECT_ANNOTATION = "sidecar.istio.io/inject"
PROXY_CONTAINER_NAME = "istio-proxy"

# Control plane pods look like:
#   app: istiod
#   istio: pilot
#   istio.io/rev: canary
# Any pod in the mesh system namespace with app=istiod counts.
MESH_SYSTEM_NAMESPACE = "istio-system"
CONTROL_PLANE_APP_LABEL = "app"
CONTROL_PLANE_APP = "istiod"

NAMESPACE_KIND = "Namespace"
POD_KIND = "Pod"
KNOWN_KINDS = (NAMESPACE_KIND, POD_KIND)

DEFAULT_SYSTEM_NAMESPACES = frozenset(
    {
        "kube-system",
        "kube-public",
        "kube-node-lease",
        "local-path-storage",
    }
)

LEVELS = ("Info", "Warning", "Error")
