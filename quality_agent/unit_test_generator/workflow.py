"""
Unit Test Generator Workflow for Quality Checker Agent
LangGraph workflow that writes unit tests for a ticket, commits them to a new branch,
opens a pull request and reports the result on the originating pull request
"""

import dataclasses
import logging
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Callable, List, Optional

# LangGraph imports
from langgraph.graph import StateGraph, END

# Agent imports
from ..clients import (
    ConfluenceClient,
    GitHubClient,
    JiraClient,
    create_input_confluence_client,
    create_project_document_source
)
from ..config.agent_config import AgentConfig
from ..errors import (
    SOURCE_CONFLUENCE,
    SOURCE_DOCUMENTS,
    SOURCE_GITHUB,
    SOURCE_JIRA,
    SOURCE_OPENROUTER,
    SOURCE_PROJECT,
    ConfigurationError,
    ErrorInfo,
    ErrorKind,
    NoTestsGenerated,
    QualityAgentError,
    log_error_info,
    normalize_error
)
from ..llm.llm_client import QualityLLMClient
from ..models.quality_models import (
    StepFatal,
    StepOk,
    StepRecord,
    StepRecovered,
    StepResult,
    TicketDetailsModel
)
from ..quality_checker.prompt_builder import write_debug_prompt
from .acceptance_criteria import extract_acceptance_criteria
from .generated_tests import parse_generated_tests, write_generated_tests
from .models import GeneratedTestFile, UnitTestGeneratorState
from .project_context import detect_project_context
from .prompts import COMMENT_MARKER, UnitTestGeneratorPrompts as prompts

logger = logging.getLogger(__name__)

ADDITIONAL_DOCS_SEPARATOR = "\n\n--- Additional Documentation ---\n\n"
SEARCH_LIMIT = 5


class UnitTestGeneratorWorkflow:
    """
    LangGraph workflow for AI unit test generation

    Steps:
    1. Detect Project - Read package.json, the source tree and existing tests
    2. Fetch Ticket - Resolve the ticket and fetch its details and acceptance criteria
    3. Fetch Documentation - Read the project document and search related pages
    4. Build Prompt - Assemble the framework specific generation prompt
    5. Generate Tests - Ask every configured model for test files
    6. Write Tests - Write the test files below a review header
    7. Open Pull Request - Commit the files to a new branch and open a pull request
    8. Publish Summary - Post the generation summary on the pull request
    """

    def __init__(self,
                 config: AgentConfig,
                 llm_client: Optional[QualityLLMClient] = None,
                 jira_client: Optional[JiraClient] = None,
                 github_client: Optional[GitHubClient] = None,
                 document_source=None,
                 search_client: Optional[ConfluenceClient] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize Unit Test Generator workflow

        Args:
            config: Agent configuration
            llm_client: Optional model gateway
            jira_client: Optional ticket tracker client
            github_client: Optional version-control host client
            document_source: Optional project documentation source
            search_client: Optional client searching related documentation pages
            clock: Optional function returning the current time
        """
        self.config = config
        self.llm_client = llm_client or QualityLLMClient(config)
        self.github_client = github_client or GitHubClient(config)
        self.jira_client = jira_client or JiraClient(config, github_client=self.github_client)
        self.document_source = document_source or create_project_document_source(config)
        self.search_client = search_client or create_input_confluence_client(config)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.workflow = self._build_workflow()

        logger.info("Initialized Unit Test Generator Workflow")
        logger.info(f"Models: {', '.join(config.model_names)}")
        logger.info(f"Project root: {config.project_root}")

    def _build_workflow(self) -> StateGraph:
        """Build the LangGraph workflow; any fatal step ends the run"""
        workflow = StateGraph(UnitTestGeneratorState)

        steps = [
            ("detect_project", self._detect_project),
            ("fetch_ticket", self._fetch_ticket),
            ("fetch_documentation", self._fetch_documentation),
            ("build_prompt", self._build_prompt),
            ("generate_tests", self._generate_tests),
            ("write_tests", self._write_tests),
            ("open_pull_request", self._open_pull_request),
            ("publish_summary", self._publish_summary),
        ]
        for name, node in steps:
            workflow.add_node(name, node)

        workflow.set_entry_point(steps[0][0])
        for (name, _), (next_name, _) in zip(steps, steps[1:]):
            workflow.add_conditional_edges(name, self._route_after_step, {
                "continue": next_name,
                "end": END
            })
        workflow.add_edge(steps[-1][0], END)

        return workflow

    def _route_after_step(self, state: UnitTestGeneratorState) -> str:
        return "end" if state.failed else "continue"

    async def execute(self) -> UnitTestGeneratorState:
        """
        Execute the workflow once

        Returns:
            UnitTestGeneratorState: Final state with step records and results
        """
        initial_state = UnitTestGeneratorState()
        app = self.workflow.compile()
        final_state = await app.ainvoke(initial_state)

        if isinstance(final_state, dict):
            final_state = dataclasses.replace(initial_state, **final_state)

        logger.info(f"Unit Test Generator finished for PR #{self.config.github_issue_number}")
        return final_state

    async def run(self) -> str:
        """
        Run the workflow and turn its outcome into one message

        Returns:
            str: Summary message on success, otherwise the error message
        """
        try:
            state = await self.execute()
            if state.failed and state.fatal_error.kind == ErrorKind.CONFIGURATION:
                raise ConfigurationError(state.fatal_message, state.fatal_error)
            if state.failed:
                raise QualityAgentError(state.fatal_message, state.fatal_error)
        except ConfigurationError as e:
            response = str(e)
            logger.error(response)
            return response
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or e.__class__.__name__
            response = f"❌ Test generation failed: {message}"
            logger.error(response)
            return response

        logger.info("Test generation completed successfully!")
        return state.summary_message

    def _record(self, state: UnitTestGeneratorState, step: str, result: StepResult, exc: Optional[Exception] = None) -> Any:
        """Record a step result; a fatal result ends the run"""
        state.steps.append(StepRecord.from_result(step, result))
        if isinstance(result, StepFatal):
            log_error_info(result.error, f"Step {step} failed")
            state.fatal_error = result.error
            state.fatal_message = getattr(exc, "message", None) or result.error.message
            return None
        if isinstance(result, StepRecovered):
            log_error_info(result.warning, f"Step {step} recovered")
        return result.value

    async def _detect_project(self, state: UnitTestGeneratorState) -> UnitTestGeneratorState:
        """Step 1: Detect the framework and the existing test idioms"""
        logger.info("Step 1: Detecting project framework...")
        try:
            context = detect_project_context(self.config.project_root)
        except OSError as e:
            self._record(state, "detect_project", StepFatal(normalize_error(e, SOURCE_PROJECT)), e)
            return state

        state.project_context = self._record(state, "detect_project", StepOk(context))
        logger.info(f"✅ Detected framework: {context.framework} ({context.testing_framework})")
        return state

    async def _fetch_ticket(self, state: UnitTestGeneratorState) -> UnitTestGeneratorState:
        """Step 2: Resolve the ticket; missing details fall back to an empty ticket"""
        logger.info("Step 2: Fetching ticket details...")
        try:
            state.ticket_id = await self.jira_client.get_ticket_id()
        except Exception as e:
            self._record(state, "fetch_ticket", StepFatal(normalize_error(e, SOURCE_JIRA)), e)
            return state

        try:
            details = await self.jira_client.get_ticket_details(state.ticket_id)
        except Exception as e:
            fallback = TicketDetailsModel(id=state.ticket_id, title="")
            state.ticket = self._record(state, "fetch_ticket", StepRecovered(fallback, normalize_error(e, SOURCE_JIRA)))
            return state

        criteria = tuple(extract_acceptance_criteria(details.description))
        ticket = details.model_copy(update={"acceptance_criteria": criteria})
        state.ticket = self._record(state, "fetch_ticket", StepOk(ticket))
        logger.info(f"✅ Processing ticket: {ticket.id} - {ticket.title} ({len(criteria)} acceptance criteria)")
        return state

    async def _fetch_documentation(self, state: UnitTestGeneratorState) -> UnitTestGeneratorState:
        """Step 3: Combine the project document with related pages; failures leave gaps"""
        logger.info("Step 3: Fetching project documentation...")
        warnings: List[ErrorInfo] = []

        try:
            documentation = await self.document_source.get_project_document()
        except Exception as e:
            documentation = ""
            warnings.append(normalize_error(e, SOURCE_DOCUMENTS))

        if self.search_client is not None:
            project_key = state.ticket_id.split("-")[0]
            cql = f'type = page AND (text ~ "{state.ticket_id}" OR text ~ "{project_key}")'
            try:
                related = await self.search_client.search_text(cql, limit=SEARCH_LIMIT)
            except Exception as e:
                warnings.append(normalize_error(e, SOURCE_CONFLUENCE))
            else:
                if related:
                    documentation += ADDITIONAL_DOCS_SEPARATOR + related

        result: StepResult = StepRecovered(documentation, warnings[0]) if warnings else StepOk(documentation)
        state.documentation = self._record(state, "fetch_documentation", result)
        logger.info(f"✅ Documentation collected ({len(state.documentation)} characters)")
        return state

    async def _build_prompt(self, state: UnitTestGeneratorState) -> UnitTestGeneratorState:
        """Step 4: Build the generation prompt and keep a copy for debugging"""
        logger.info("Step 4: Building AI prompt for test generation...")
        prompt = prompts.generation_prompt(state.project_context, state.ticket, state.documentation)
        write_debug_prompt(prompt, self.config.test_prompt_debug_path)
        state.prompt = self._record(state, "build_prompt", StepOk(prompt))
        return state

    async def _generate_tests(self, state: UnitTestGeneratorState) -> UnitTestGeneratorState:
        """Step 5: Ask every model for tests; a failing model is skipped"""
        logger.info("Step 5: Generating unit tests with AI...")
        try:
            await self.llm_client.add_document(self.config.test_index_key, state.prompt)
        except Exception as e:
            self._record(state, "generate_tests", StepFatal(normalize_error(e, SOURCE_DOCUMENTS)), e)
            return state

        framework = state.project_context.framework
        tests: List[GeneratedTestFile] = []
        warning: Optional[ErrorInfo] = None
        for model_name in self.config.model_names:
            logger.info(f"🤖 Generating tests with model: {model_name}")
            try:
                response = await self.llm_client.generate(model_name, self.config.test_index_key, state.prompt)
            except Exception as e:
                info = normalize_error(e, SOURCE_OPENROUTER)
                log_error_info(info, f"Error generating tests with {model_name}")
                warning = warning or info
                continue
            parsed = parse_generated_tests(response, framework, model_name=model_name)
            logger.info(f"Model {model_name} returned {len(parsed)} test files")
            tests.extend(parsed)

        if not tests:
            error = NoTestsGenerated()
            self._record(state, "generate_tests", StepFatal(normalize_error(error, SOURCE_OPENROUTER)), error)
            return state

        result: StepResult = StepRecovered(tests, warning) if warning else StepOk(tests)
        state.generated_tests = self._record(state, "generate_tests", result)
        logger.info(f"✅ Generated {len(tests)} test files")
        return state

    async def _write_tests(self, state: UnitTestGeneratorState) -> UnitTestGeneratorState:
        """Step 6: Write the generated tests into the workspace"""
        logger.info("Step 6: Writing generated tests to files...")
        output_dir = Path(self.config.project_root) / self.config.generated_tests_dir
        try:
            written = write_generated_tests(state.generated_tests, str(output_dir), self.clock().isoformat())
        except OSError as e:
            self._record(state, "write_tests", StepFatal(normalize_error(e, SOURCE_PROJECT)), e)
            return state

        state.written_files = self._record(state, "write_tests", StepOk(written))
        return state

    async def _open_pull_request(self, state: UnitTestGeneratorState) -> UnitTestGeneratorState:
        """Step 7: Commit the test files to a new branch and open a pull request"""
        if not self.config.create_test_pull_request:
            logger.info("Step 7: Pull request creation disabled (CREATE_TEST_PULL_REQUEST)")
            self._record(state, "open_pull_request", StepOk(None))
            return state

        logger.info("Step 7: Creating pull request with generated tests...")
        ticket = state.ticket
        branch = prompts.branch_name(ticket.id)
        message = prompts.commit_message(ticket, state.written_files)
        try:
            base_sha = await self.github_client.get_branch_sha(self.config.github_base_branch)
            await self.github_client.create_branch(branch, base_sha)
            for path in state.written_files:
                repo_path = str(PurePosixPath(Path(self.config.generated_tests_dir).as_posix()) / Path(path).name)
                content = Path(path).read_text(encoding="utf-8")
                await self.github_client.put_file(repo_path, content, message, branch)
            pull_request = await self.github_client.create_pull_request(
                title=prompts.pull_request_title(ticket.id),
                head=branch,
                base=self.config.github_base_branch,
                body=prompts.pull_request_body(ticket, state.written_files, self.config.jira_url)
            )
        except Exception as e:
            self._record(state, "open_pull_request", StepFatal(normalize_error(e, SOURCE_GITHUB)), e)
            return state

        state.pull_request_url = self._record(state, "open_pull_request", StepOk(pull_request.get("html_url", "")))
        logger.info(f"✅ Pull request: {state.pull_request_url}")
        return state

    async def _publish_summary(self, state: UnitTestGeneratorState) -> UnitTestGeneratorState:
        """Step 8: Post the generation summary on the originating pull request"""
        logger.info("Step 8: Publishing test generation summary...")
        summary = prompts.summary_message(
            state.ticket_id,
            state.project_context.framework,
            state.generated_tests,
            state.pull_request_url or "not created"
        )
        try:
            await self.github_client.create_or_update_comment(summary, marker=COMMENT_MARKER)
        except Exception as e:
            self._record(state, "publish_summary", StepFatal(normalize_error(e, SOURCE_GITHUB)), e)
            return state

        state.summary_message = self._record(state, "publish_summary", StepOk(summary))
        return state


def create_unit_test_generator(config: AgentConfig, llm_client: Optional[QualityLLMClient] = None) -> UnitTestGeneratorWorkflow:
    """
    Factory function to create Unit Test Generator workflow

    Args:
        config: Agent configuration
        llm_client: Optional LLM client

    Returns:
        UnitTestGeneratorWorkflow: Configured workflow
    """
    return UnitTestGeneratorWorkflow(config=config, llm_client=llm_client)


# Export main classes
__all__ = ["UnitTestGeneratorWorkflow", "UnitTestGeneratorState", "create_unit_test_generator"]
