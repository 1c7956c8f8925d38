#!/usr/bin/env python3
"""
Main entry point for Quality Checker workflow
Assesses the unit tests of a pull request and publishes the result
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config.agent_config import get_agent_config, load_environment_files, setup_logging
from ..errors import ConfigurationError
from .workflow import create_quality_checker

logger = logging.getLogger(__name__)


def is_error_response(response: str) -> bool:
    return response.startswith("❌")


async def run_quality_checker() -> str:
    """Load configuration and run the workflow once; always returns a message"""
    try:
        config = get_agent_config()
    except ConfigurationError as e:
        response = str(e)
        logger.error(response)
        return response

    masked_key = config.masked_api_key()
    print(f"🔑 OpenRouter API Key (last 10 chars): {masked_key}")
    logger.info(f"OpenRouter API Key verification: {masked_key}")

    workflow = create_quality_checker(config)
    return await workflow.run()


async def main(argv: Optional[List[str]] = None):
    """Main function for quality checker"""
    parser = argparse.ArgumentParser(description="Assess pull request unit tests against the ticket and project documentation")
    parser.add_argument("--output", default="quality-report.txt",
                        help="File the result message is written to (default: quality-report.txt)")
    parser.add_argument("--fail-on-error", action="store_true",
                        help="Exit with status 1 when the run ends with an error message")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: INFO)")

    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(level=args.log_level)
    load_environment_files()

    print("Running quality check...")
    response = await run_quality_checker()

    Path(args.output).write_text(response, encoding="utf-8")
    print(f"📄 Result saved to: {args.output}")

    if is_error_response(response):
        print(response)
        if args.fail_on_error:
            sys.exit(1)
    else:
        print("✅ Quality check completed successfully!")


__all__ = ["main", "run_quality_checker", "is_error_response"]
