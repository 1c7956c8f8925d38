"""
Report Collector Package
Normalizes Karma and Mocha results into the report artifact read by the quality checker
"""

from .adapters import (
    collect_mocha_reports,
    configure_mocha_reporters,
    normalize_karma_report,
    write_report
)

__all__ = ["collect_mocha_reports", "configure_mocha_reporters", "normalize_karma_report", "write_report"]
