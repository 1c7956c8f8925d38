"""
Quality Checker Data Models
Data structures shared by the report, prompt, aggregation and publishing steps
"""

from dataclasses import dataclass, field
from typing import Generic, List, Literal, Optional, Tuple, TypeVar, Union
from pydantic import BaseModel, Field

from ..errors import ErrorInfo

T = TypeVar("T")


class TicketModel(BaseModel):
    """Ticket fetched once per run from the ticket tracker"""
    model_config = {"frozen": True}

    id: str = Field(..., description="Ticket key (e.g. 'PROJ-123')")
    title: str = Field(..., description="Ticket summary line")


class TicketDetailsModel(TicketModel):
    """Ticket with the fields test generation works from"""
    description: str = Field(default="", description="Plain-text ticket description")
    acceptance_criteria: Tuple[str, ...] = Field(default=(), description="Criteria lines found in the description")
    issue_type: str = Field(default="Story", description="Issue type name")
    priority: str = Field(default="Medium", description="Priority name")


class ModelSummary(BaseModel):
    """Structured summary the summarization prompt asks each model for"""
    summary: str = Field(..., description="Short quality assessment")
    score: Union[int, float] = Field(..., description="Quality score given by the model")


@dataclass(frozen=True)
class ParsedSummary:
    summary: str
    score: Union[int, float]
    kind: Literal["parsed"] = "parsed"


@dataclass(frozen=True)
class UnparseableSummary:
    raw: str
    reason: str
    kind: Literal["unparseable"] = "unparseable"


SummaryResult = Union[ParsedSummary, UnparseableSummary]


@dataclass(frozen=True)
class ModelRun:
    """Output of one configured model"""
    model_name: str
    verbose_response: str
    summary: SummaryResult


@dataclass
class AggregateResult:
    """Combined verbose and summary output across all configured models"""
    full_response: str = ""
    summary_response: str = ""
    model_runs: List[ModelRun] = field(default_factory=list)


@dataclass(frozen=True)
class PageReference:
    """Documentation page created for a run"""
    page_id: str
    page_title: str
    url: str


@dataclass(frozen=True)
class PublishMetadata:
    repo_name: str
    use_for: str
    change_request_link: str
    timestamp: str


@dataclass
class PublishOutcome:
    comment_body: str
    comment_url: Optional[str] = None
    page: Optional[PageReference] = None
    documentation_error: Optional[ErrorInfo] = None


# Step results make the fatal / recoverable policy of each step explicit
@dataclass(frozen=True)
class StepOk(Generic[T]):
    value: T


@dataclass(frozen=True)
class StepRecovered(Generic[T]):
    value: T
    warning: ErrorInfo


@dataclass(frozen=True)
class StepFatal:
    error: ErrorInfo


StepResult = Union[StepOk, StepRecovered, StepFatal]


@dataclass(frozen=True)
class StepRecord:
    """Outcome of one workflow step, kept in the workflow state"""
    step: str
    status: Literal["ok", "recovered", "fatal"]
    detail: str = ""

    @classmethod
    def from_result(cls, step: str, result: StepResult) -> "StepRecord":
        if isinstance(result, StepRecovered):
            return cls(step=step, status="recovered", detail=result.warning.describe())
        if isinstance(result, StepFatal):
            return cls(step=step, status="fatal", detail=result.error.describe())
        return cls(step=step, status="ok")


__all__ = [
    "TicketModel", "TicketDetailsModel", "ModelSummary", "ParsedSummary", "UnparseableSummary", "SummaryResult",
    "ModelRun", "AggregateResult", "PageReference", "PublishMetadata", "PublishOutcome",
    "StepOk", "StepRecovered", "StepFatal", "StepResult", "StepRecord",
]
