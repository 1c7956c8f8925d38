"""
Prompts for Unit Test Generator workflow
"""

import json
from pathlib import Path
from typing import Sequence

from quality_agent.models.quality_models import TicketDetailsModel

from .models import FRAMEWORK_ANGULAR, FRAMEWORK_LOOPBACK, FRAMEWORK_REACT, GeneratedTestFile, ProjectContext

# Identifies this agent's test generation comment on the pull request
COMMENT_MARKER = "AI Test Generation Complete"

FRAMEWORK_INSTRUCTIONS = {
    FRAMEWORK_REACT: """
Generate comprehensive React unit tests using {testing_framework}.
Follow the patterns identified in the existing codebase.
Include:
- Component rendering tests
- Props validation
- User interaction tests (clicks, forms)
- State management tests
- Error boundary tests
- Accessibility tests
Use @testing-library/react best practices.
""",
    FRAMEWORK_ANGULAR: """
Generate comprehensive Angular unit tests using {testing_framework}.
Follow Angular testing best practices with TestBed.
Include:
- Component initialization tests
- Service injection and mocking
- Input/Output testing
- Form validation tests
- HTTP interceptor tests
- Route guard tests
Use Jasmine matchers and Angular testing utilities.
""",
    FRAMEWORK_LOOPBACK: """
Generate comprehensive Loopback unit tests.
Follow Loopback 4 testing patterns.
Include:
- Controller endpoint tests
- Repository operation tests
- Service business logic tests
- Model validation tests
- Authentication/authorization tests
- Error handling tests
Use Loopback testing utilities and sinon for mocking.
""",
}


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


class UnitTestGeneratorPrompts:
    """Collection of prompts and messages for the unit test generator workflow"""

    @staticmethod
    def generation_prompt(context: ProjectContext, ticket: TicketDetailsModel, documentation: str) -> str:
        """Test generation prompt with project, ticket and documentation sections"""
        prompt = f"""
# AI Test Generation Task

## Project Context
Framework: {context.framework}
Testing Framework: {context.testing_framework}
Project Structure: {json.dumps(context.project_structure, indent=2)}
Existing Test Patterns: {', '.join(context.existing_patterns)}

## JIRA Requirements
Ticket ID: {ticket.id}
Title: {ticket.title}
Type: {ticket.issue_type}
Priority: {ticket.priority}
Description: {ticket.description}
Acceptance Criteria:
{_bullets(ticket.acceptance_criteria)}

## Project Documentation
{documentation}

## Task
"""
        instructions = FRAMEWORK_INSTRUCTIONS.get(context.framework)
        if instructions:
            prompt += instructions.format(testing_framework=context.testing_framework)

        prompt += """
Generate complete, runnable test files with all necessary imports and setup.
Ensure tests cover all acceptance criteria from the JIRA ticket.
Include positive, negative, and edge case scenarios.
Put each test file in its own fenced code block whose first line is a comment
of the form "// File: <file name>".
"""
        return prompt

    @staticmethod
    def file_header(test: GeneratedTestFile, generated_at: str) -> str:
        """Header comment written above every generated test file"""
        return f"""/**
 * AI-Generated Unit Tests
 * Framework: {test.framework}
 * Coverage: {', '.join(test.coverage)}
 * Generated: {generated_at}
 *
 * Please review and modify as needed before merging
 */

"""

    @staticmethod
    def branch_name(ticket_id: str) -> str:
        return f"test/{ticket_id}-generated-tests"

    @staticmethod
    def commit_message(ticket: TicketDetailsModel, written_files: Sequence[str]) -> str:
        names = [Path(path).name for path in written_files]
        return f"""Add AI-generated tests for {ticket.id}: {ticket.title}

Generated {len(names)} test files:
{_bullets(names)}

Acceptance Criteria Covered:
{_bullets(ticket.acceptance_criteria)}"""

    @staticmethod
    def pull_request_title(ticket_id: str) -> str:
        return f"test: Add unit tests for {ticket_id}"

    @staticmethod
    def pull_request_body(ticket: TicketDetailsModel, written_files: Sequence[str], jira_url: str) -> str:
        names = [f"`{Path(path).name}`" for path in written_files]
        return f"""## AI-Generated Unit Tests for {ticket.id}

### Summary
This PR contains AI-generated unit tests for JIRA ticket **{ticket.id}: {ticket.title}**

### Generated Files
{_bullets(names)}

### Coverage
- Business logic validation
- Error scenarios
- Edge cases
- Acceptance criteria validation

### Review Checklist
- [ ] Tests compile without errors
- [ ] Tests run successfully
- [ ] Test assertions are meaningful
- [ ] Coverage meets requirements
- [ ] No duplicate tests
- [ ] Follows project testing patterns

### JIRA Ticket
[{ticket.id}]({jira_url.rstrip('/')}/browse/{ticket.id})

---
*Generated with AI Test Generation Pipeline*"""

    @staticmethod
    def summary_message(ticket_id: str,
                        framework: str,
                        tests: Sequence[GeneratedTestFile],
                        pull_request_url: str) -> str:
        """Pull request comment posted when generation completes"""
        coverage = "\n".join(f"- {test.file_name}: {', '.join(test.coverage)}" for test in tests)
        return f"""
## ✅ {COMMENT_MARKER}

**JIRA Ticket:** {ticket_id}
**Framework:** {framework}
**Tests Generated:** {len(tests)} files
**Pull Request:** {pull_request_url}

### Coverage Summary:
{coverage}

### Next Steps:
1. Review the generated tests in the PR
2. Run tests locally to verify
3. Make any necessary adjustments
4. Merge when ready
"""


__all__ = ["COMMENT_MARKER", "FRAMEWORK_INSTRUCTIONS", "UnitTestGeneratorPrompts"]
