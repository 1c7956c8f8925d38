"""
Test runner report adapters
Normalize Karma and Mocha results into the report artifact read by the quality checker:
a JSON object mapping each test file (or suite) to its test descriptions
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ..errors import ReportUnavailable

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = "coverage/ut-results.json"
DEFAULT_PACKAGES = ("services", "facades", "packages")
BROWSER_ERRORS_KEY = "__BROWSER_ERRORS__"
MOCHA_RESULTS_FILE = "test-results.json"
MOCHA_CONFIG_FILE = ".mocharc.json"

# Mocha configuration writing JSON results next to each package
MOCHA_REPORTER_CONFIG = {
    "exit": True,
    "recursive": True,
    "require": "source-map-support/register",
    "reporter": "json",
    "reporter-option": [f"output={MOCHA_RESULTS_FILE}"]
}


def read_json_file(path: Path) -> Any:
    if not path.exists():
        raise ReportUnavailable("Report File Not Found.")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ReportUnavailable(f"Report file {path} is not valid JSON: {e}")


def normalize_karma_report(data: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Normalize a karma JSON reporter result

    Args:
        data: Karma result, suite name -> {test description: result}

    Returns:
        Dict[str, List[str]]: Suite name -> test descriptions

    Raises:
        ReportUnavailable: If the result holds no suites
    """
    if not isinstance(data, dict):
        raise ReportUnavailable("Report not generated.")

    output: Dict[str, List[str]] = {}
    for suite, tests in data.items():
        if suite.upper() == BROWSER_ERRORS_KEY:
            continue
        descriptions = output.setdefault(suite.strip(), [])
        if isinstance(tests, dict):
            descriptions.extend(tests.keys())

    if not output:
        raise ReportUnavailable("Report not generated.")
    return output


def collect_mocha_reports(root: Path, packages: Sequence[str] = DEFAULT_PACKAGES) -> Dict[str, List[str]]:
    """
    Collect mocha JSON reporter results of every package of a monorepo

    Reads <root>/<package>/<item>/test-results.json, groups test titles by the
    name of their test file and removes each result file once it is read.

    Args:
        root: Monorepo root
        packages: Package directories to scan

    Returns:
        Dict[str, List[str]]: Test file name -> full test titles
    """
    all_tests: Dict[str, List[str]] = {}
    for package in packages:
        package_path = root / package
        if not package_path.is_dir():
            logger.warning(f"Package directory not found: {package_path}")
            continue

        for item in sorted(package_path.iterdir()):
            results_path = item / MOCHA_RESULTS_FILE
            if not results_path.is_file():
                continue

            data = read_json_file(results_path)
            for test in data.get("tests") or []:
                file_name = str(test.get("file", "")).split("/")[-1]
                all_tests.setdefault(file_name, []).append(test.get("fullTitle", ""))
            results_path.unlink()
            logger.debug(f"Collected {results_path}")

    logger.info(f"Collected mocha results for {len(all_tests)} test files")
    return all_tests


def configure_mocha_reporters(root: Path, packages: Sequence[str] = DEFAULT_PACKAGES) -> List[Path]:
    """
    Point every package's mocha configuration at the JSON reporter

    Only items that already have a package.json and a .mocharc.json are touched.

    Returns:
        List[Path]: Rewritten configuration files
    """
    updated: List[Path] = []
    for package in packages:
        package_path = root / package
        if not package_path.is_dir():
            logger.warning(f"Package directory not found: {package_path}")
            continue

        for item in sorted(package_path.iterdir()):
            config_path = item / MOCHA_CONFIG_FILE
            if (item / "package.json").is_file() and config_path.is_file():
                config_path.write_text(json.dumps(MOCHA_REPORTER_CONFIG), encoding="utf-8")
                updated.append(config_path)

    logger.info(f"Configured JSON reporter in {len(updated)} mocha configurations")
    return updated


def write_report(report: Dict[str, List[str]], output_path: str = DEFAULT_OUTPUT_PATH) -> Path:
    """Write the normalized report, creating parent directories"""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Report written to {path}")
    return path


__all__ = [
    "DEFAULT_OUTPUT_PATH",
    "DEFAULT_PACKAGES",
    "MOCHA_REPORTER_CONFIG",
    "collect_mocha_reports",
    "configure_mocha_reporters",
    "normalize_karma_report",
    "read_json_file",
    "write_report"
]
