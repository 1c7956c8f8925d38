#!/usr/bin/env python3
"""
Main entry point for Unit Test Generator workflow
Generates unit tests for the ticket of a pull request and opens a pull request with them
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config.agent_config import (
    TEST_GENERATOR_REQUIRED_VARIABLES,
    get_agent_config,
    load_environment_files,
    setup_logging
)
from ..errors import ConfigurationError
from ..quality_checker.main import is_error_response
from .workflow import create_unit_test_generator

logger = logging.getLogger(__name__)


async def run_unit_test_generator() -> str:
    """Load configuration and run the workflow once; always returns a message"""
    try:
        config = get_agent_config(TEST_GENERATOR_REQUIRED_VARIABLES)
    except ConfigurationError as e:
        response = str(e)
        logger.error(response)
        return response

    workflow = create_unit_test_generator(config)
    return await workflow.run()


async def main(argv: Optional[List[str]] = None):
    """Main function for unit test generator"""
    parser = argparse.ArgumentParser(description="Generate unit tests for the ticket of a pull request")
    parser.add_argument("--output", default="test-generation-result.txt",
                        help="File the result message is written to (default: test-generation-result.txt)")
    parser.add_argument("--fail-on-error", action="store_true",
                        help="Exit with status 1 when the run ends with an error message")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: INFO)")

    args = parser.parse_args(argv)

    setup_logging(level=args.log_level)
    load_environment_files()

    print("Starting AI-powered unit test generation...")
    response = await run_unit_test_generator()

    Path(args.output).write_text(response, encoding="utf-8")
    print(response)

    if is_error_response(response) and args.fail_on_error:
        sys.exit(1)


__all__ = ["main", "run_unit_test_generator"]
