"""
Report filter
Narrows the test report to the files touched by the pull request
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ..errors import ReportUnavailable

logger = logging.getLogger(__name__)


def read_report(raw_report_path: str) -> str:
    """Read the raw report artifact byte-exact, raising ReportUnavailable when it cannot be read"""
    try:
        # read_text() would translate CRLF line endings
        return Path(raw_report_path).read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReportUnavailable(f"Cannot read report file {raw_report_path}: {e}")


def normalize_changed_path(path: str, source_root: str, build_root: str, source_extension: str) -> str:
    """Map a changed source path onto the build path used as report key"""
    needle = path.replace(source_root, build_root, 1) if source_root else path
    return needle.replace(source_extension, "", 1) if source_extension else needle


def select_entries(report: Dict[str, Any], needles: Sequence[str]) -> Dict[str, Any]:
    """
    Keep the report entries whose key contains any needle, keyed by file name.
    Entries sharing a file name overwrite each other in report order.
    """
    result: Dict[str, Any] = {}
    for file_key, value in report.items():
        if any(needle in file_key for needle in needles):
            file_name = file_key.split("/")[-1] or file_key
            result[file_name] = value
    return result


def filter_report(changed_files: Sequence[str],
                  raw_report_path: str,
                  source_root: str = "src",
                  build_root: str = "dist",
                  source_extension: str = ".ts") -> str:
    """
    Filter the report artifact down to the changed files

    Args:
        changed_files: Paths changed by the pull request
        raw_report_path: Path of the JSON report artifact
        source_root: Directory token replaced in changed paths
        build_root: Directory token used by report keys
        source_extension: Extension removed from changed paths

    Returns:
        str: JSON text of the filtered report, or the raw report content when
             there is nothing to filter by or nothing matched

    Raises:
        ReportUnavailable: If the report cannot be read, or cannot be parsed while filtering
    """
    raw_content = read_report(raw_report_path)

    needles: List[str] = [
        normalize_changed_path(path, source_root, build_root, source_extension)
        for path in changed_files
    ]
    if not needles:
        logger.info("No changed files, using the full report")
        return raw_content

    try:
        report = json.loads(raw_content)
    except json.JSONDecodeError as e:
        raise ReportUnavailable(f"Report file {raw_report_path} is not valid JSON: {e}")
    if not isinstance(report, dict):
        raise ReportUnavailable(f"Report file {raw_report_path} does not contain a JSON object")

    result = select_entries(report, needles)
    if not result:
        # Fail-open: never hand out an empty report silently
        logger.warning(f"None of the {len(needles)} changed files matched the report, using the full report")
        return raw_content

    logger.info(f"Filtered report from {len(report)} to {len(result)} entries")
    return json.dumps(result, indent=2, ensure_ascii=False)


__all__ = ["filter_report", "normalize_changed_path", "read_report", "select_entries"]
