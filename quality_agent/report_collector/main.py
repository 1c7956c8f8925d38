#!/usr/bin/env python3
"""
Main entry point for the report collector
Produces the report artifact consumed by the quality checker
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config.agent_config import setup_logging
from ..errors import ReportUnavailable
from .adapters import (
    DEFAULT_OUTPUT_PATH,
    DEFAULT_PACKAGES,
    collect_mocha_reports,
    configure_mocha_reporters,
    normalize_karma_report,
    read_json_file,
    write_report
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Normalize test runner results into the quality checker report")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: INFO)")
    subparsers = parser.add_subparsers(dest="runner", required=True)

    karma = subparsers.add_parser("karma", help="Normalize a karma JSON reporter result")
    karma.add_argument("--input", default="karma-result.json", help="Karma result file (default: karma-result.json)")
    karma.add_argument("--output", default=DEFAULT_OUTPUT_PATH, help=f"Report file (default: {DEFAULT_OUTPUT_PATH})")

    mocha = subparsers.add_parser("mocha", help="Collect mocha JSON reporter results of a monorepo")
    mocha.add_argument("--root", default=".", help="Monorepo root (default: current directory)")
    mocha.add_argument("--packages", nargs="+", default=list(DEFAULT_PACKAGES),
                       help="Package directories to scan (default: services facades packages)")
    mocha.add_argument("--output", default=DEFAULT_OUTPUT_PATH, help=f"Report file (default: {DEFAULT_OUTPUT_PATH})")

    update_mocha = subparsers.add_parser("update-mocha", help="Switch mocha configurations to the JSON reporter")
    update_mocha.add_argument("--root", default=".", help="Monorepo root (default: current directory)")
    update_mocha.add_argument("--packages", nargs="+", default=list(DEFAULT_PACKAGES),
                              help="Package directories to scan (default: services facades packages)")

    return parser


async def main(argv: Optional[List[str]] = None):
    """Main function for report collector"""
    args = build_parser().parse_args(argv)

    # Setup logging
    setup_logging(level=args.log_level)

    try:
        if args.runner == "karma":
            report = normalize_karma_report(read_json_file(Path(args.input)))
            write_report(report, args.output)
        elif args.runner == "mocha":
            report = collect_mocha_reports(Path(args.root), args.packages)
            write_report(report, args.output)
        else:
            configure_mocha_reporters(Path(args.root), args.packages)
            return
    except ReportUnavailable as e:
        logger.error(f"Failed to collect report: {e.message}")
        print(f"❌ Error: {e.message}")
        sys.exit(1)

    print(f"📄 Report saved to: {args.output} ({len(report)} entries)")


__all__ = ["build_parser", "main"]
