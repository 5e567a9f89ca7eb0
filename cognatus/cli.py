#!/usr/bin/env python3
"""CLI for the Cognatus research server.

Usage:
    cognatus serve                      # Run the MCP server on stdio
    cognatus analyze 4.1 3.9 5.2 4.8    # Print a statistical report
    cognatus stages                     # Show the stage transition table
"""

import argparse
import sys

from cognatus.analysis import AnalysisType, build_report, format_report
from cognatus.config import ConfigurationError, Settings
from cognatus.errors import CognatusError
from cognatus.workflow import STAGE_TRANSITIONS


def serve(settings: Settings) -> int:
    from cognatus.server import main as run_server_main

    run_server_main(settings)
    return 0


def analyze(values: list[str], analysis_type: str, settings: Settings) -> int:
    try:
        report = build_report(values, AnalysisType(analysis_type), settings.confidence_level)
    except CognatusError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    print(format_report(report))
    return 0


def stages() -> int:
    print(f"{'From':<22} Allowed to")
    print("-" * 60)
    for stage, allowed in STAGE_TRANSITIONS.items():
        targets = ", ".join(s.value for s in allowed) or "(terminal)"
        print(f"{stage.value:<22} {targets}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cognatus",
        description="Guided scientific-method research with lightweight statistics",
    )
    parser.add_argument("--log-level", help="Override COGNATUS_LOG_LEVEL")
    parser.add_argument(
        "--confidence",
        type=float,
        help="Confidence level for intervals (0.90, 0.95 or 0.99)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Run the MCP server on stdio")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze data points")
    analyze_parser.add_argument("values", nargs="+", help="Data points; numbers are extracted from each")
    analyze_parser.add_argument(
        "--type",
        dest="analysis_type",
        choices=[t.value for t in AnalysisType],
        default=AnalysisType.COMPREHENSIVE.value,
    )

    subparsers.add_parser("stages", help="Show the stage transition table")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env(log_level=args.log_level, confidence_level=args.confidence)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.command == "serve":
        return serve(settings)
    if args.command == "analyze":
        return analyze(args.values, args.analysis_type, settings)
    return stages()


if __name__ == "__main__":
    sys.exit(main())
