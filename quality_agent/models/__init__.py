"""
Data models package for Quality Checker Agent
"""

from .quality_models import *

__all__ = [
    "TicketModel", "TicketDetailsModel", "ModelSummary", "ParsedSummary", "UnparseableSummary", "SummaryResult",
    "ModelRun", "AggregateResult", "PageReference", "PublishMetadata", "PublishOutcome",
    "StepOk", "StepRecovered", "StepFatal", "StepResult", "StepRecord",
]
