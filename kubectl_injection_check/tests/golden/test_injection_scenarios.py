import os

from kubectl_injection_check.engine import analyze_snapshot
from kubectl_injection_check.snapshot import ClusterSnapshot, load_snapshot

HERE = os.path.dirname(__file__)
FIXTURES = os.path.abspath(os.path.join(HERE, "..", "fixtures"))


def summarize(diagnostics):
    return [(d.code, d.origin()) for d in diagnostics]


def test_canary_namespace_with_proxy_is_clean():
    snapshot = ClusterSnapshot.from_objects(
        [
            {
                "kind": "Pod",
                "metadata": {
                    "name": "istiod-canary",
                    "namespace": "istio-system",
                    "labels": {"app": "istiod", "istio.io/rev": "canary"},
                },
                "spec": {"containers": [{"name": "discovery", "image": "pilot"}]},
            },
            {
                "kind": "Namespace",
                "metadata": {"name": "ns1", "labels": {"istio.io/rev": "canary"}},
            },
            {
                "kind": "Pod",
                "metadata": {"name": "web", "namespace": "ns1"},
                "spec": {
                    "containers": [
                        {"name": "web", "image": "example/web:v1"},
                        {"name": "istio-proxy", "image": "docker.io/istio/proxyv2:1.8.0"},
                    ]
                },
            },
        ]
    )

    assert analyze_snapshot(snapshot) == []


def test_unlabeled_namespace_pods_are_never_checked():
    snapshot = ClusterSnapshot.from_objects(
        [
            {"kind": "Namespace", "metadata": {"name": "ns2"}},
            {
                "kind": "Pod",
                "metadata": {"name": "ledger", "namespace": "ns2"},
                "spec": {"containers": [{"name": "ledger", "image": "ledger:v1"}]},
            },
        ]
    )

    diagnostics = analyze_snapshot(snapshot)

    assert summarize(diagnostics) == [("IST0102", "Namespace ns2")]
    assert diagnostics[0].level == "Info"


def test_pod_opt_out_in_enabled_namespace():
    snapshot = ClusterSnapshot.from_objects(
        [
            {
                "kind": "Namespace",
                "metadata": {"name": "ns3", "labels": {"istio-injection": "enabled"}},
            },
            {
                "kind": "Pod",
                "metadata": {
                    "name": "batch",
                    "namespace": "ns3",
                    "annotations": {"sidecar.istio.io/inject": "false"},
                },
                "spec": {"containers": [{"name": "batch", "image": "batch:v1"}]},
            },
        ]
    )

    assert analyze_snapshot(snapshot) == []


def test_enabled_namespace_pod_without_proxy():
    snapshot = ClusterSnapshot.from_objects(
        [
            {
                "kind": "Namespace",
                "metadata": {"name": "ns4", "labels": {"istio-injection": "enabled"}},
            },
            {
                "kind": "Pod",
                "metadata": {"name": "details", "namespace": "ns4"},
                "spec": {"containers": [{"name": "details", "image": "details:v1"}]},
            },
        ]
    )

    diagnostics = analyze_snapshot(snapshot)

    assert summarize(diagnostics) == [("IST0103", "Pod ns4/details")]
    assert diagnostics[0].level == "Warning"


def test_full_cluster_snapshot():
    snapshot = load_snapshot([os.path.join(FIXTURES, "cluster_snapshot.json")])

    diagnostics = analyze_snapshot(snapshot)

    assert summarize(diagnostics) == [
        ("IST0102", "Namespace ns2"),
        ("IST0123", "Namespace ns5"),
        ("IST0127", "Namespace ns6"),
        ("IST0103", "Pod ns4/details"),
        ("IST0103", "Pod ns4/ratings"),
    ]
    invalid = diagnostics[2]
    assert invalid.args == ("ns6", "stable", "canary")
    assert "stable" in invalid.message
    assert "canary" in invalid.message


def test_multi_document_yaml_snapshot():
    snapshot = load_snapshot([os.path.join(FIXTURES, "canary_rollout.yaml")])

    diagnostics = analyze_snapshot(snapshot)

    # migrate opts out with an unquoted YAML boolean
    assert summarize(diagnostics) == [("IST0103", "Pod shop/frontend")]
