"""
Quality Checker Workflow for Quality Checker Agent
Main LangGraph workflow that assesses the unit tests of a pull request against its ticket
and publishes the assessment to Confluence and the pull request comments
"""

import dataclasses
import logging
from datetime import datetime
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

# LangGraph imports
from langgraph.graph import StateGraph, END

# Agent imports
from ..clients import (
    GitHubClient,
    JiraClient,
    create_output_confluence_client,
    create_project_document_source
)
from ..config.agent_config import AgentConfig
from ..errors import (
    SOURCE_DOCUMENTS,
    SOURCE_GITHUB,
    SOURCE_JIRA,
    SOURCE_OPENROUTER,
    SOURCE_REPORT,
    ConfigurationError,
    ErrorKind,
    QualityAgentError,
    ReportUnavailable,
    log_error_info,
    normalize_error
)
from ..llm.llm_client import QualityLLMClient
from ..models.quality_models import (
    PublishMetadata,
    StepFatal,
    StepOk,
    StepRecord,
    StepRecovered,
    StepResult
)
from .aggregator import ModelResponseAggregator
from .models import QualityCheckerState
from .prompt_builder import build_prompt, write_debug_prompt
from .prompts import QualityCheckerPrompts as prompts, load_prompt
from .publisher import Publisher
from .report_filter import filter_report

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%m/%d/%Y, %I:%M:%S %p"


class QualityCheckerWorkflow:
    """
    LangGraph workflow for the test quality check of a pull request

    Steps:
    1. Fetch Ticket - Resolve the ticket of the pull request and fetch its title
    2. Fetch Project Document - Read the project documentation
    3. Index Document - Add the documentation to the grounding index
    4. Filter Report - Narrow the test report to the changed files
    5. Build Prompt - Substitute ticket title and report into the prompt template
    6. Aggregate Responses - Call every configured model and summarize each answer
    7. Publish - Create the Confluence page and post the pull request comment
    """

    def __init__(self,
                 config: AgentConfig,
                 llm_client: Optional[QualityLLMClient] = None,
                 jira_client: Optional[JiraClient] = None,
                 github_client: Optional[GitHubClient] = None,
                 documentation_client=None,
                 document_source=None,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize Quality Checker workflow

        Args:
            config: Agent configuration
            llm_client: Optional model gateway
            jira_client: Optional ticket tracker client
            github_client: Optional version-control host client
            documentation_client: Optional client creating report pages
            document_source: Optional project documentation source
            clock: Optional function returning the current time (report timezone)
        """
        self.config = config
        self.llm_client = llm_client or QualityLLMClient(config)
        self.github_client = github_client or GitHubClient(config)
        self.jira_client = jira_client or JiraClient(config, github_client=self.github_client)
        self.documentation_client = documentation_client or create_output_confluence_client(config)
        self.document_source = document_source or create_project_document_source(config)
        self.clock = clock or (lambda: datetime.now(ZoneInfo(config.report_timezone)))

        self.workflow = self._build_workflow()

        logger.info("Initialized Quality Checker Workflow")
        logger.info(f"Models: {', '.join(config.model_names)}")
        logger.info(f"Report file: {config.report_file_path}")

    def _build_workflow(self) -> StateGraph:
        """Build the LangGraph workflow; any fatal step ends the run"""
        workflow = StateGraph(QualityCheckerState)

        steps = [
            ("fetch_ticket", self._fetch_ticket),
            ("fetch_project_document", self._fetch_project_document),
            ("index_document", self._index_document),
            ("filter_report", self._filter_report),
            ("build_prompt", self._build_prompt),
            ("aggregate_responses", self._aggregate_responses),
            ("publish", self._publish),
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

    def _route_after_step(self, state: QualityCheckerState) -> str:
        return "end" if state.failed else "continue"

    async def execute(self) -> QualityCheckerState:
        """
        Execute the workflow once

        Returns:
            QualityCheckerState: Final state with step records and results
        """
        initial_state = QualityCheckerState()
        app = self.workflow.compile()
        final_state = await app.ainvoke(initial_state)

        if isinstance(final_state, dict):
            final_state = dataclasses.replace(initial_state, **final_state)

        logger.info(f"Quality Checker finished for PR #{self.config.github_issue_number}")
        return final_state

    async def run(self) -> str:
        """
        Run the workflow and turn its outcome into one message

        Returns:
            str: Posted summary on success, otherwise the error message
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
            response = f"❌ Action failed: {message}"
            logger.error(response)
            return response

        if state.publish_outcome is not None:
            return state.publish_outcome.comment_body
        return state.aggregate.summary_response if state.aggregate else ""

    def _record(self, state: QualityCheckerState, step: str, result: StepResult, exc: Optional[Exception] = None) -> Any:
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

    async def _fetch_ticket(self, state: QualityCheckerState) -> QualityCheckerState:
        """Step 1: Resolve the ticket id and fetch the ticket title"""
        logger.info("Step 1: Fetching ticket...")
        try:
            state.ticket_id = await self.jira_client.get_ticket_id()
            ticket = await self.jira_client.get_ticket(state.ticket_id)
        except Exception as e:
            self._record(state, "fetch_ticket", StepFatal(normalize_error(e, SOURCE_JIRA)), e)
            return state

        state.ticket = self._record(state, "fetch_ticket", StepOk(ticket))
        logger.info(f"✅ Ticket {ticket.id}: {ticket.title}")
        return state

    async def _fetch_project_document(self, state: QualityCheckerState) -> QualityCheckerState:
        """Step 2: Read the project documentation"""
        logger.info("Step 2: Fetching project document...")
        try:
            document = await self.document_source.get_project_document()
        except Exception as e:
            self._record(state, "fetch_project_document", StepFatal(normalize_error(e, SOURCE_DOCUMENTS)), e)
            return state

        state.project_document = self._record(state, "fetch_project_document", StepOk(document))
        logger.info(f"✅ Project document fetched ({len(document)} characters)")
        return state

    async def _index_document(self, state: QualityCheckerState) -> QualityCheckerState:
        """Step 3: Add the project documentation to the grounding index"""
        logger.info("Step 3: Indexing project document...")
        try:
            await self.llm_client.add_document(self.config.index_key, state.project_document)
        except Exception as e:
            self._record(state, "index_document", StepFatal(normalize_error(e, SOURCE_DOCUMENTS)), e)
            return state

        self._record(state, "index_document", StepOk(self.config.index_key))
        return state

    async def _filter_report(self, state: QualityCheckerState) -> QualityCheckerState:
        """Step 4: Narrow the report to the changed files; failures leave the report empty"""
        logger.info("Step 4: Filtering report file...")
        try:
            state.changed_files = await self.github_client.get_changed_files()
        except Exception as e:
            info = normalize_error(e, SOURCE_GITHUB)
            state.report_content = self._record(state, "filter_report", StepRecovered("", info))
            return state

        try:
            report = filter_report(
                state.changed_files,
                self.config.report_file_path,
                source_root=self.config.report_source_root,
                build_root=self.config.report_build_root,
                source_extension=self.config.report_source_extension
            )
        except ReportUnavailable as e:
            state.report_content = self._record(
                state, "filter_report", StepRecovered("", normalize_error(e, SOURCE_REPORT))
            )
            return state

        state.report_content = self._record(state, "filter_report", StepOk(report))
        logger.info("✅ Report file parsed successfully")
        return state

    async def _build_prompt(self, state: QualityCheckerState) -> QualityCheckerState:
        """Step 5: Build the prompt and keep a copy for debugging"""
        logger.info("Step 5: Preparing user prompt...")
        try:
            template = load_prompt(self.config.user_prompt_path, prompts.user_prompt_template())
        except OSError as e:
            self._record(state, "build_prompt", StepFatal(normalize_error(e, SOURCE_DOCUMENTS)), e)
            return state

        prompt = build_prompt(template, state.ticket.title if state.ticket else "", state.report_content)
        write_debug_prompt(prompt, self.config.prompt_debug_path)
        state.prompt = self._record(state, "build_prompt", StepOk(prompt))
        logger.info("✅ Prompt prepared and saved")
        return state

    async def _aggregate_responses(self, state: QualityCheckerState) -> QualityCheckerState:
        """Step 6: Call every configured model"""
        logger.info("Step 6: Getting responses from the model gateway")
        logger.info(f"API URL: {self.config.open_router_api_url}")
        try:
            summarize_prompt = load_prompt(self.config.summarize_prompt_path, prompts.summarize_prompt())
            aggregator = ModelResponseAggregator(
                self.llm_client,
                summarize_prompt,
                summary_header=prompts.summary_header(self.config.jira_url_output),
                initial_delay=self.config.model_call_delay_seconds
            )
            aggregate = await aggregator.run(self.config.model_names, self.config.index_key, state.prompt)
        except Exception as e:
            self._record(state, "aggregate_responses", StepFatal(normalize_error(e, SOURCE_OPENROUTER)), e)
            return state

        state.aggregate = self._record(state, "aggregate_responses", StepOk(aggregate))
        return state

    async def _publish(self, state: QualityCheckerState) -> QualityCheckerState:
        """Step 7: Create the report page and post the pull request comment"""
        if not state.aggregate or not state.aggregate.full_response:
            logger.warning("No model response to publish")
            self._record(state, "publish", StepOk(None))
            return state

        logger.info("Step 7: Publishing results...")
        metadata = PublishMetadata(
            repo_name=self.config.github_repo,
            use_for=self.config.use_for,
            change_request_link=self.config.pull_request_url,
            timestamp=self.clock().strftime(TIMESTAMP_FORMAT)
        )
        publisher = Publisher(self.documentation_client, self.github_client)
        try:
            outcome = await publisher.publish(state.aggregate, metadata, ticket_id=state.ticket_id)
        except Exception as e:
            self._record(state, "publish", StepFatal(normalize_error(e, SOURCE_GITHUB)), e)
            return state

        result: StepResult = StepOk(outcome)
        if outcome.documentation_error is not None:
            result = StepRecovered(outcome, outcome.documentation_error)
        state.publish_outcome = self._record(state, "publish", result)
        return state


def create_quality_checker(config: AgentConfig, llm_client: Optional[QualityLLMClient] = None) -> QualityCheckerWorkflow:
    """
    Factory function to create Quality Checker workflow

    Args:
        config: Agent configuration
        llm_client: Optional LLM client

    Returns:
        QualityCheckerWorkflow: Configured workflow
    """
    return QualityCheckerWorkflow(config=config, llm_client=llm_client)


# Export main classes
__all__ = ["QualityCheckerWorkflow", "QualityCheckerState", "create_quality_checker"]
