import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from kubectl_injection_check.constants import LEVELS
from kubectl_injection_check.model import Resource

CATALOGUE_PATH = os.path.join(os.path.dirname(__file__), "messages.yaml")

_MESSAGE_TYPES: dict[str, "MessageType"] | None = None


@dataclass(frozen=True)
class MessageType:
    """
    Catalogue entry describing one kind of diagnostic.
    """

    code: str
    name: str
    level: str
    template: str
    description: str = ""
    args: tuple[str, ...] = ()


@dataclass(frozen=True)
class Diagnostic:
    """
    A reported finding: the message type, the resource it concerns and the
    positional arguments used to render its text.
    """

    type: MessageType
    resource: Resource
    args: tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if len(self.args) != len(self.type.args):
            raise TypeError(
                f"{self.type.name} takes {len(self.type.args)} arguments "
                f"({', '.join(self.type.args)}), got {len(self.args)}"
            )

    @property
    def code(self) -> str:
        return self.type.code

    @property
    def level(self) -> str:
        return self.type.level

    @property
    def message(self) -> str:
        return self.type.template.format(*self.args)

    def origin(self) -> str:
        return f"{self.resource.kind} {self.resource.full_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "level": self.level,
            "name": self.type.name,
            "origin": self.origin(),
            "message": self.message,
            "args": list(self.args),
        }


def build_message_types(spec: Any) -> dict[str, MessageType]:
    """
    Validate a parsed catalogue (a list of dicts) and index it by name.
    """
    if not isinstance(spec, list):
        raise ValueError("Message catalogue must be a list of entries")

    types: dict[str, MessageType] = {}
    for entry in spec:
        if not isinstance(entry, dict):
            raise ValueError("Each message catalogue entry must be a dict")
        for key in ("name", "code", "level", "template"):
            if not entry.get(key):
                raise ValueError(f"Message entry {entry.get('name', entry)} missing '{key}'")
        if entry["level"] not in LEVELS:
            raise ValueError(
                f"Message {entry['name']} has invalid level {entry['level']!r}"
            )
        if entry["name"] in types:
            raise ValueError(f"Duplicate message name {entry['name']}")

        types[entry["name"]] = MessageType(
            code=entry["code"],
            name=entry["name"],
            level=entry["level"],
            template=entry["template"],
            description=entry.get("description", ""),
            args=tuple(entry.get("args") or ()),
        )
    return types


def load_message_types(path: str = CATALOGUE_PATH) -> dict[str, MessageType]:
    with open(path, encoding="utf-8") as f:
        return build_message_types(yaml.safe_load(f))


def get_message_type(name: str) -> MessageType:
    global _MESSAGE_TYPES
    if _MESSAGE_TYPES is None:
        _MESSAGE_TYPES = load_message_types()
    return _MESSAGE_TYPES[name]


# ----------------------------
# Diagnostic constructors
# ----------------------------


def namespace_not_injected(r: Resource, namespace: str) -> Diagnostic:
    return Diagnostic(get_message_type("NamespaceNotInjected"), r, (namespace,))


def namespace_multiple_injection_labels(r: Resource, namespace: str) -> Diagnostic:
    return Diagnostic(
        get_message_type("NamespaceMultipleInjectionLabels"), r, (namespace,)
    )


def namespace_invalid_injector_revision(
    r: Resource, namespace: str, revision: str, known_revisions: str
) -> Diagnostic:
    return Diagnostic(
        get_message_type("NamespaceInvalidInjectorRevision"),
        r,
        (namespace, revision, known_revisions),
    )


def pod_missing_proxy(r: Resource) -> Diagnostic:
    return Diagnostic(get_message_type("PodMissingProxy"), r)
