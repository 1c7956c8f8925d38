"""
Jira client for Quality Checker Agent
Resolves the ticket a pull request belongs to and fetches its title and details
"""

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from ..config.agent_config import AgentConfig
from ..models.quality_models import TicketDetailsModel, TicketModel
from .github_client import GitHubClient

logger = logging.getLogger(__name__)

TICKET_KEY_PATTERN = re.compile(r"\b[A-Z][A-Z0-9]+-\d+\b")

# Atlassian document nodes rendered inside a line of text
INLINE_NODES = {"text", "hardBreak", "mention", "emoji", "date", "status", "inlineCard"}


class JiraClient:
    """Jira REST API wrapper for the ticket tracker"""

    def __init__(self,
                 config: AgentConfig,
                 github_client: Optional[GitHubClient] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = config.jira_url.rstrip("/")
        self.ticket_id = config.jira_ticket_id
        self.timeout = config.http_timeout
        self._auth = (config.jira_email, config.jira_api_token)
        self._github_client = github_client
        self._transport = transport

    async def get_ticket_id(self) -> str:
        """
        Resolve the ticket key for this run

        The configured JIRA_TICKET_ID wins; otherwise the first key found in the
        pull request title, then in its head branch name, is used.
        """
        if self.ticket_id:
            return self.ticket_id
        if self._github_client is None:
            raise ValueError("JIRA_TICKET_ID is not set and no pull request is available to derive it from")

        pr_data = await self._github_client.get_pull_request()
        for candidate in (pr_data.get("title") or "", (pr_data.get("head") or {}).get("ref") or ""):
            match = TICKET_KEY_PATTERN.search(candidate.upper())
            if match:
                self.ticket_id = match.group(0)
                logger.info(f"Derived ticket {self.ticket_id} from pull request")
                return self.ticket_id

        raise ValueError("No ticket key found in the pull request title or branch name")

    async def _get_issue(self, ticket_id: str, fields: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(
                f"{self.base_url}/rest/api/3/issue/{ticket_id}",
                params={"fields": fields},
                headers={"Accept": "application/json"},
                auth=self._auth
            )
            response.raise_for_status()
            return response.json()

    async def get_ticket(self, ticket_id: str) -> TicketModel:
        """
        Fetch a ticket

        Args:
            ticket_id: Ticket key

        Returns:
            TicketModel: Ticket with its summary as title
        """
        issue = await self._get_issue(ticket_id, "summary")
        title = (issue.get("fields") or {}).get("summary") or ""
        return TicketModel(id=issue.get("key") or ticket_id, title=title)

    async def get_ticket_details(self, ticket_id: str) -> TicketDetailsModel:
        """
        Fetch a ticket with its description, issue type and priority

        Args:
            ticket_id: Ticket key

        Returns:
            TicketDetailsModel: Ticket details; acceptance criteria are left empty
        """
        issue = await self._get_issue(ticket_id, "summary,description,issuetype,priority")
        fields = issue.get("fields") or {}
        return TicketDetailsModel(
            id=issue.get("key") or ticket_id,
            title=fields.get("summary") or "",
            description=adf_to_text(fields.get("description")),
            issue_type=(fields.get("issuetype") or {}).get("name") or "Story",
            priority=(fields.get("priority") or {}).get("name") or "Medium"
        )


def _inline_text(node: Dict[str, Any]) -> str:
    node_type = node.get("type")
    if node_type == "text":
        return node.get("text") or ""
    if node_type == "hardBreak":
        return "\n"
    if node_type in INLINE_NODES:
        return (node.get("attrs") or {}).get("text") or ""
    return "".join(_inline_text(child) for child in node.get("content") or [])


def _block_lines(node: Dict[str, Any], prefix: str = "") -> List[str]:
    node_type = node.get("type")
    children = node.get("content") or []

    if node_type in ("bulletList", "orderedList", "taskList"):
        start = (node.get("attrs") or {}).get("order") or 1
        lines: List[str] = []
        for index, item in enumerate(children, start=start):
            if node_type == "orderedList":
                marker = f"{index}. "
            elif node_type == "taskList":
                marker = "- [x] " if (item.get("attrs") or {}).get("state") == "DONE" else "- [ ] "
            else:
                marker = "- "
            lines.extend(_block_lines(item, marker))
        return lines

    if all(child.get("type") in INLINE_NODES for child in children):
        text = _inline_text(node).strip()
        return [prefix + text] if text else []

    lines = []
    for child in children:
        lines.extend(_block_lines(child, prefix))
        # Only the first block of a list item carries its marker
        prefix = ""
    return lines


def adf_to_text(description: Any) -> str:
    """
    Render a ticket description as plain text, one block per line

    API v3 returns descriptions in Atlassian Document Format; list items are
    rendered with "- ", "1. " or "- [ ] " markers. Plain strings pass through.
    """
    if not description:
        return ""
    if isinstance(description, str):
        return description
    return "\n".join(_block_lines(description))


__all__ = ["JiraClient", "TICKET_KEY_PATTERN", "adf_to_text"]
