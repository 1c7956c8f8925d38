"""
Quality Checker Workflow Package
Assesses the unit tests of a pull request against its ticket and project documentation
"""

from .workflow import QualityCheckerWorkflow, create_quality_checker
from .models import QualityCheckerState
from .aggregator import ModelResponseAggregator, parse_summary
from .publisher import Publisher
from .prompt_builder import build_prompt, write_debug_prompt
from .report_filter import filter_report, normalize_changed_path

__all__ = [
    "QualityCheckerWorkflow",
    "QualityCheckerState",
    "ModelResponseAggregator",
    "Publisher",
    "build_prompt",
    "create_quality_checker",
    "filter_report",
    "normalize_changed_path",
    "parse_summary",
    "write_debug_prompt"
]
