#!/usr/bin/env python3
"""
Main entry point for Quality Checker Agent
Dispatches to specific workflow packages
"""

import argparse
import asyncio

from .quality_checker.main import main as quality_checker_main
from .report_collector.main import main as report_collector_main
from .unit_test_generator.main import main as unit_test_generator_main


def main():
    """Main dispatcher function"""
    parser = argparse.ArgumentParser(
        description="Quality Checker Agent - Test Quality Assessment and Generation for Pull Requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Available workflows:
  quality-checker   Assess the unit tests of a pull request and publish the result
  collect-report    Normalize karma or mocha results into the report artifact
  generate-tests    Write unit tests for the ticket and open a pull request with them

Examples:
  python -m quality_agent collect-report karma --input karma-result.json
  python -m quality_agent collect-report mocha --packages services facades
  python -m quality_agent quality-checker --output quality-report.txt --fail-on-error
  python -m quality_agent generate-tests --fail-on-error
        """
    )

    parser.add_argument(
        "workflow",
        choices=["quality-checker", "collect-report", "generate-tests"],
        help="Workflow to execute"
    )

    # Parse only the workflow argument, pass the rest to the specific workflow
    args, remaining_args = parser.parse_known_args()

    # Dispatch to the appropriate workflow
    if args.workflow == "quality-checker":
        asyncio.run(quality_checker_main(remaining_args))
    elif args.workflow == "collect-report":
        asyncio.run(report_collector_main(remaining_args))
    elif args.workflow == "generate-tests":
        asyncio.run(unit_test_generator_main(remaining_args))
    else:
        parser.error(f"Unknown workflow: {args.workflow}")


if __name__ == "__main__":
    main()
