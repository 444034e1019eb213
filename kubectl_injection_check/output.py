import json

import yaml

from kubectl_injection_check.messages import Diagnostic

# ----------------------------
# Output formatting
# ----------------------------

OUTPUT_FORMATS = ("text", "json", "yaml")


def format_diagnostic(d: Diagnostic) -> str:
    return f"{d.level} [{d.code}] ({d.origin()}) {d.message}"


def render_diagnostics(diagnostics: list[Diagnostic], fmt: str = "text") -> str:
    """
    Render diagnostics in emission order.
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format {fmt!r}, expected one of {list(OUTPUT_FORMATS)}")

    if fmt == "json":
        return json.dumps([d.to_dict() for d in diagnostics], indent=2)

    if fmt == "yaml":
        return yaml.safe_dump([d.to_dict() for d in diagnostics], sort_keys=False)

    if not diagnostics:
        return "No validation issues found."
    return "\n".join(format_diagnostic(d) for d in diagnostics)


def output_diagnostics(diagnostics: list[Diagnostic], fmt: str = "text") -> None:
    print(render_diagnostics(diagnostics, fmt))
