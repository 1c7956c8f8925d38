"""
Quality Checker Agent - Test Quality Assessment for Pull Requests
"""

from .quality_checker import QualityCheckerWorkflow, create_quality_checker
from .report_collector import collect_mocha_reports, normalize_karma_report

__all__ = [
    "QualityCheckerWorkflow",
    "collect_mocha_reports",
    "create_quality_checker",
    "normalize_karma_report"
]
