from typing import Dict, List, Optional
from dataclasses import dataclass, field

from quality_agent.errors import ErrorInfo
from quality_agent.models.quality_models import StepRecord, TicketDetailsModel

FRAMEWORK_REACT = "React"
FRAMEWORK_ANGULAR = "Angular"
FRAMEWORK_LOOPBACK = "Loopback"
FRAMEWORK_UNKNOWN = "Unknown"


@dataclass
class ProjectContext:
    """What the workspace reveals about the project under test"""
    framework: str = FRAMEWORK_UNKNOWN
    testing_framework: str = "jest"
    project_structure: List[str] = field(default_factory=list)
    dependencies: Dict[str, str] = field(default_factory=dict)
    existing_patterns: List[str] = field(default_factory=list)


@dataclass
class GeneratedTestFile:
    """One test file extracted from a model response"""
    file_name: str
    content: str
    framework: str
    coverage: List[str] = field(default_factory=list)
    model_name: str = ""


@dataclass
class UnitTestGeneratorState:
    """State for the Unit Test Generator workflow"""
    # Step 1: Workspace analysis
    project_context: Optional[ProjectContext] = None

    # Step 2: Ticket
    ticket_id: str = ""
    ticket: Optional[TicketDetailsModel] = None

    # Step 3-4: Documentation and prompt
    documentation: str = ""
    prompt: str = ""

    # Step 5-6: Generated and written test files
    generated_tests: List[GeneratedTestFile] = field(default_factory=list)
    written_files: List[str] = field(default_factory=list)

    # Step 7-8: Pull request and summary comment
    pull_request_url: Optional[str] = None
    summary_message: str = ""

    # Step bookkeeping
    steps: List[StepRecord] = field(default_factory=list)
    fatal_error: Optional[ErrorInfo] = None
    fatal_message: str = ""

    @property
    def failed(self) -> bool:
        return self.fatal_error is not None
