import pytest

from kubectl_injection_check.engine import get_default_analyzers
from kubectl_injection_check.loader import (
    load_analyzers,
    load_plugins,
    validate_analyzer,
    validate_analyzers,
)
from kubectl_injection_check.rules.base_rule import Analyzer


class NoInputsAnalyzer(Analyzer):
    name = "NoInputs"
    inputs = []


class UnknownKindAnalyzer(Analyzer):
    name = "UnknownKind"
    inputs = ["Pod", "MutatingWebhookConfiguration"]


class UnnamedAnalyzer(Analyzer):
    name = ""
    inputs = ["Pod"]


class NamespaceOnlyAnalyzer(Analyzer):
    name = "NamespaceOnly"
    inputs = ["Namespace"]

    def analyze(self, ctx):
        pass


@pytest.mark.parametrize(
    "analyzer", [NoInputsAnalyzer(), UnknownKindAnalyzer(), UnnamedAnalyzer()]
)
def test_invalid_metadata_is_rejected(analyzer):
    with pytest.raises(ValueError):
        validate_analyzer(analyzer)


def test_duplicate_names_are_rejected():
    with pytest.raises(ValueError):
        validate_analyzers([NamespaceOnlyAnalyzer(), NamespaceOnlyAnalyzer()])


def test_valid_analyzer_passes():
    validate_analyzer(NamespaceOnlyAnalyzer())


def test_base_analyze_is_abstract():
    with pytest.raises(NotImplementedError):
        Analyzer().analyze(None)


def test_default_analyzers_are_discovered():
    names = [a.name for a in load_analyzers()]
    assert names == ["injection.Analyzer"]
    assert [a.name for a in get_default_analyzers()] == names


def test_plugins_folder_is_optional(tmp_path):
    assert load_plugins(None) == []
    assert load_plugins(str(tmp_path / "absent")) == []


def test_plugins_are_loaded(tmp_path):
    (tmp_path / "extra.py").write_text(
        "from kubectl_injection_check.rules.base_rule import Analyzer\n"
        "\n"
        "\n"
        "class ExtraAnalyzer(Analyzer):\n"
        "    name = 'extra.Analyzer'\n"
        "    inputs = ['Pod']\n"
        "\n"
        "    def analyze(self, ctx):\n"
        "        pass\n"
    )

    [plugin] = load_plugins(str(tmp_path))

    assert plugin.name == "extra.Analyzer"
    assert isinstance(plugin, Analyzer)
