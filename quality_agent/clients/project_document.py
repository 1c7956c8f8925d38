"""
Project documentation source
Reads the documentation that is indexed as context for the model calls
"""

import logging
from pathlib import Path
from typing import Optional

from .confluence_client import ConfluenceClient

logger = logging.getLogger(__name__)


class ProjectDocumentSource:
    """Reads project documentation from a local file or a Confluence page"""

    def __init__(self,
                 document_path: Optional[str] = None,
                 page_id: Optional[str] = None,
                 confluence_client: Optional[ConfluenceClient] = None):
        self.document_path = document_path
        self.page_id = page_id
        self.confluence_client = confluence_client

    async def get_project_document(self) -> str:
        """
        Fetch the project documentation

        A local file takes precedence over a Confluence page. When neither is
        configured the document is empty.
        """
        if self.document_path:
            logger.info(f"Reading project documentation from {self.document_path}")
            return Path(self.document_path).read_text(encoding="utf-8")

        if self.page_id and self.confluence_client is not None:
            logger.info(f"Fetching project documentation from Confluence page {self.page_id}")
            return await self.confluence_client.get_page_text(self.page_id)

        logger.warning("No project documentation configured (PROJECT_DOCUMENT_PATH or PROJECT_DOCUMENT_PAGE_ID)")
        return ""


__all__ = ["ProjectDocumentSource"]
