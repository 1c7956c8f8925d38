from typing import List, Optional
from dataclasses import dataclass, field

from quality_agent.errors import ErrorInfo
from quality_agent.models.quality_models import AggregateResult, PublishOutcome, StepRecord, TicketModel


@dataclass
class QualityCheckerState:
    """State for the Quality Checker workflow"""
    # Step 1: Ticket
    ticket_id: str = ""
    ticket: Optional[TicketModel] = None

    # Step 2-3: Project documentation, indexed for grounding
    project_document: str = ""

    # Step 4: Report narrowed to the changed files
    changed_files: List[str] = field(default_factory=list)
    report_content: str = ""

    # Step 5: Prompt
    prompt: str = ""

    # Step 6-7: Model responses and publishing
    aggregate: Optional[AggregateResult] = None
    publish_outcome: Optional[PublishOutcome] = None

    # Step bookkeeping
    steps: List[StepRecord] = field(default_factory=list)
    fatal_error: Optional[ErrorInfo] = None
    fatal_message: str = ""

    @property
    def failed(self) -> bool:
        return self.fatal_error is not None
