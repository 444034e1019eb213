from dataclasses import dataclass, field
from typing import Any

import yaml

from kubectl_injection_check.constants import DEFAULT_SYSTEM_NAMESPACES, LEVELS
from kubectl_injection_check.output import OUTPUT_FORMATS

ALLOWED_KEYS = {"system_namespaces", "suppress", "format", "failure_threshold"}


@dataclass
class Settings:
    system_namespaces: set[str] = field(
        default_factory=lambda: set(DEFAULT_SYSTEM_NAMESPACES)
    )
    suppress: list[str] = field(default_factory=list)
    format: str = "text"
    failure_threshold: str = "Warning"


def _string_list(spec: dict[str, Any], key: str) -> list[str]:
    value = spec.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Config '{key}' must be a list of strings")
    return value


def build_settings(spec: Any) -> Settings:
    """
    Validate a parsed config document. An empty document yields defaults.
    """
    settings = Settings()
    if not spec:
        return settings
    if not isinstance(spec, dict):
        raise ValueError("Config must be a mapping")

    unknown = set(spec) - ALLOWED_KEYS
    if unknown:
        raise ValueError(f"Config has invalid keys: {sorted(unknown)}")

    if "system_namespaces" in spec:
        settings.system_namespaces = set(_string_list(spec, "system_namespaces"))
    settings.suppress = _string_list(spec, "suppress")

    if "format" in spec:
        if spec["format"] not in OUTPUT_FORMATS:
            raise ValueError(f"Config 'format' must be one of {list(OUTPUT_FORMATS)}")
        settings.format = spec["format"]

    if "failure_threshold" in spec:
        if spec["failure_threshold"] not in LEVELS:
            raise ValueError(f"Config 'failure_threshold' must be one of {list(LEVELS)}")
        settings.failure_threshold = spec["failure_threshold"]

    return settings


def load_settings(path: str | None) -> Settings:
    if path is None:
        return Settings()
    with open(path, encoding="utf-8") as f:
        return build_settings(yaml.safe_load(f))
