import argparse
import sys

import yaml

from kubectl_injection_check.config import load_settings
from kubectl_injection_check.constants import LEVELS
from kubectl_injection_check.engine import (
    analyze_snapshot,
    debug,
    get_default_analyzers,
    parse_suppression,
)
from kubectl_injection_check.messages import Diagnostic
from kubectl_injection_check.output import OUTPUT_FORMATS, output_diagnostics
from kubectl_injection_check.snapshot import load_snapshot

EXIT_OK = 0
EXIT_ISSUES = 1
EXIT_USAGE = 2


def exceeds_threshold(diagnostics: list[Diagnostic], threshold: str) -> bool:
    limit = LEVELS.index(threshold)
    return any(LEVELS.index(d.level) >= limit for d in diagnostics)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubectl-check-injection",
        description="Check Istio sidecar injection configuration in a cluster snapshot",
    )

    parser.add_argument(
        "paths",
        nargs="+",
        help="Namespace/Pod manifests (JSON or YAML files, or directories of them)",
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (text, json, yaml)",
    )
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument(
        "--system-namespace",
        action="append",
        default=[],
        help="Extra namespace to exclude from injection checks (repeatable)",
    )
    parser.add_argument(
        "--suppress",
        action="append",
        default=[],
        help="Suppress diagnostics, CODE=RESOURCE, e.g. IST0102=default (repeatable)",
    )
    parser.add_argument(
        "--failure-threshold",
        choices=LEVELS,
        default=None,
        help="Lowest level that makes the command exit non-zero",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
        suppressions = [
            parse_suppression(s) for s in settings.suppress + args.suppress
        ]
        system_namespaces = settings.system_namespaces | set(args.system_namespace)
        snapshot = load_snapshot(args.paths)
        analyzers = get_default_analyzers()
    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.verbose:
        debug(f"Loaded {len(analyzers)} analyzers")
        for a in analyzers:
            debug(f"  - {a.name} (inputs={', '.join(a.inputs)})")
        debug(f"System namespaces: {sorted(system_namespaces)}")

    diagnostics = analyze_snapshot(
        snapshot,
        analyzers=analyzers,
        system_namespaces=system_namespaces,
        suppressions=suppressions,
        verbose=args.verbose,
    )

    output_diagnostics(diagnostics, args.format or settings.format)

    threshold = args.failure_threshold or settings.failure_threshold
    return EXIT_ISSUES if exceeds_threshold(diagnostics, threshold) else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
