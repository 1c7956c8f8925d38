"""
Publisher
Pushes the aggregated result to the documentation system and the pull request comments
"""

import logging

from ..errors import (
    SOURCE_CONFLUENCE,
    SOURCE_GITHUB,
    CommentPublishFailure,
    DocumentationPublishFailure,
    log_error_info,
    normalize_error
)
from ..models.quality_models import AggregateResult, PageReference, PublishMetadata, PublishOutcome
from .prompts import COMMENT_MARKER

logger = logging.getLogger(__name__)


def prepare_page_body(full_response: str) -> str:
    """Remove markdown fences and turn newlines into HTML line breaks"""
    body = full_response.replace("```markdown", "").replace("```", "")
    return body.replace("\n", "<br />")


def page_header(metadata: PublishMetadata) -> str:
    return (
        f"<b>Date:-</b>{metadata.timestamp}<br />"
        f"<b>Repo:-</b>{metadata.repo_name}<br />"
        f'<b>PR:-</b><a href="{metadata.change_request_link}" target="_blank">Link</a><br />'
        f"<b>For:-</b>{metadata.use_for}<br />"
    )


def details_link(page: PageReference) -> str:
    return f'<br /><b>Details:-</b> <a target="_blank" href="{page.url}">link</a>'


def page_title(ticket_id: str, timestamp: str) -> str:
    # Titles must be unique within a Confluence space
    return f"{ticket_id} - Quality Report - {timestamp}"


class Publisher:
    """Creates the report page, then posts the summary comment linking to it"""

    def __init__(self, documentation_client, vcs_client):
        """
        Initialize publisher

        Args:
            documentation_client: Client with create_page(title, body)
            vcs_client: Client with create_or_update_comment(body, marker)
        """
        self.documentation_client = documentation_client
        self.vcs_client = vcs_client

    async def _create_page(self, aggregate: AggregateResult, metadata: PublishMetadata, ticket_id: str) -> PageReference:
        try:
            return await self.documentation_client.create_page(
                page_title(ticket_id, metadata.timestamp),
                page_header(metadata) + prepare_page_body(aggregate.full_response)
            )
        except Exception as e:
            info = normalize_error(e, SOURCE_CONFLUENCE)
            raise DocumentationPublishFailure(info.message, info) from e

    async def publish(self, aggregate: AggregateResult, metadata: PublishMetadata, *, ticket_id: str) -> PublishOutcome:
        """
        Publish an aggregate result

        A failed page creation is logged and the comment is posted without a
        Details link. A failed comment is fatal.

        Args:
            aggregate: Combined model responses
            metadata: Repository, pull request and timestamp shown on the page
            ticket_id: Ticket the page is created for

        Returns:
            PublishOutcome: Posted comment body, comment link and created page

        Raises:
            CommentPublishFailure: If the pull request comment cannot be posted
        """
        comment_body = aggregate.summary_response
        outcome = PublishOutcome(comment_body=comment_body)

        logger.info("📝 Creating documentation page...")
        try:
            page = await self._create_page(aggregate, metadata, ticket_id)
        except DocumentationPublishFailure as e:
            log_error_info(e.info, "Creating documentation page failed")
            outcome.documentation_error = e.info
        else:
            outcome.page = page
            comment_body += details_link(page)
            logger.info(f"✅ Documentation page created: {page.url}")

        logger.info("💬 Posting comment to pull request...")
        try:
            comment = await self.vcs_client.create_or_update_comment(comment_body, marker=COMMENT_MARKER)
        except Exception as e:
            info = normalize_error(e, SOURCE_GITHUB)
            log_error_info(info, "Posting pull request comment failed")
            raise CommentPublishFailure(info.message, info) from e

        outcome.comment_body = comment_body
        outcome.comment_url = (comment or {}).get("html_url")
        logger.info(f"✅ Comment posted: {outcome.comment_url or 'no link returned'}")
        return outcome


__all__ = ["Publisher", "details_link", "page_header", "page_title", "prepare_page_body"]
