"""
External service clients for Quality Checker Agent
"""

from typing import Optional

from ..config.agent_config import AgentConfig
from .confluence_client import ConfluenceClient
from .github_client import GitHubClient
from .jira_client import JiraClient, TICKET_KEY_PATTERN
from .project_document import ProjectDocumentSource


def create_output_confluence_client(config: AgentConfig) -> ConfluenceClient:
    """Confluence client for the space report pages are published to"""
    return ConfluenceClient(
        base_url=config.jira_url_output,
        email=config.jira_email_output,
        api_token=config.jira_api_token_output,
        space_key=config.jira_space_key_output,
        timeout=config.http_timeout
    )


def create_input_confluence_client(config: AgentConfig) -> Optional[ConfluenceClient]:
    """Confluence client of the ticket tracker site, None when no site is configured"""
    if not config.jira_url:
        return None
    return ConfluenceClient(
        base_url=config.jira_url,
        email=config.jira_email,
        api_token=config.jira_api_token,
        timeout=config.http_timeout
    )


def create_project_document_source(config: AgentConfig) -> ProjectDocumentSource:
    """Project documentation source, reading pages with the ticket tracker credentials"""
    confluence_client = create_input_confluence_client(config) if config.project_document_page_id else None
    return ProjectDocumentSource(
        document_path=config.project_document_path,
        page_id=config.project_document_page_id,
        confluence_client=confluence_client
    )


__all__ = [
    "ConfluenceClient",
    "GitHubClient",
    "JiraClient",
    "ProjectDocumentSource",
    "TICKET_KEY_PATTERN",
    "create_input_confluence_client",
    "create_output_confluence_client",
    "create_project_document_source"
]
