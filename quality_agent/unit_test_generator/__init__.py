"""
Unit Test Generator Workflow Package
Writes unit tests for a ticket with the configured models and opens a pull request with them
"""

from .workflow import UnitTestGeneratorWorkflow, create_unit_test_generator
from .models import GeneratedTestFile, ProjectContext, UnitTestGeneratorState
from .acceptance_criteria import extract_acceptance_criteria
from .generated_tests import parse_generated_tests, write_generated_tests
from .project_context import detect_project_context

__all__ = [
    "UnitTestGeneratorWorkflow",
    "UnitTestGeneratorState",
    "GeneratedTestFile",
    "ProjectContext",
    "create_unit_test_generator",
    "detect_project_context",
    "extract_acceptance_criteria",
    "parse_generated_tests",
    "write_generated_tests"
]
