import glob
import importlib.util
import os

from kubectl_injection_check.constants import KNOWN_KINDS
from kubectl_injection_check.rules.base_rule import Analyzer

# ----------------------------
# Dynamic Analyzer Loader
# ----------------------------


def validate_analyzer(analyzer: Analyzer):
    required_fields = ["name", "inputs", "analyze"]
    for field in required_fields:
        if not hasattr(analyzer, field):
            raise ValueError(f"Analyzer {analyzer} missing required field '{field}'")

    if not isinstance(analyzer.name, str) or not analyzer.name:
        raise ValueError("Analyzer.name must be a non-empty string")
    if not callable(analyzer.analyze):
        raise ValueError(f"Analyzer {analyzer.name}.analyze must be callable")
    if not isinstance(analyzer.inputs, list) or not analyzer.inputs:
        raise ValueError(f"Analyzer {analyzer.name}.inputs must be a non-empty list")

    unknown = set(analyzer.inputs) - set(KNOWN_KINDS)
    if unknown:
        raise ValueError(
            f"Analyzer {analyzer.name}.inputs has unknown kinds: {sorted(unknown)}"
        )


def validate_analyzers(analyzers: list[Analyzer]) -> None:
    seen: set[str] = set()
    for analyzer in analyzers:
        validate_analyzer(analyzer)
        if analyzer.name in seen:
            raise ValueError(f"Duplicate analyzer name '{analyzer.name}'")
        seen.add(analyzer.name)


def load_analyzers(rule_folder=None) -> list[Analyzer]:
    if rule_folder is None:
        rule_folder = os.path.join(os.path.dirname(__file__), "rules")

    analyzers: list[Analyzer] = []

    for file in sorted(glob.glob(os.path.join(rule_folder, "*.py"))):
        if os.path.basename(file) in ("base_rule.py", "__init__.py"):
            continue
        module_name = os.path.splitext(os.path.basename(file))[0]
        spec = importlib.util.spec_from_file_location(module_name, file)
        if spec is None or spec.loader is None:
            continue
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        for attr in dir(module):
            cls = getattr(module, attr)
            if (
                isinstance(cls, type)
                and issubclass(cls, Analyzer)
                and cls is not Analyzer
                and cls.__module__ == module.__name__
            ):
                analyzers.append(cls())

    # ---- CONTRACT VALIDATION ----
    validate_analyzers(analyzers)

    return analyzers


def load_plugins(plugin_folder=None) -> list[Analyzer]:
    if plugin_folder is None or not os.path.exists(plugin_folder):
        return []
    return load_analyzers(plugin_folder)
