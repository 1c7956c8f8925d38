"""
Confluence client for Quality Checker Agent
Reads and searches project documentation pages and creates report pages
"""

import html
import logging
import re
from typing import Optional
from urllib.parse import quote

import httpx

from ..models.quality_models import PageReference

logger = logging.getLogger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]+>")


def storage_to_text(storage: str) -> str:
    """Strip storage-format markup from a page body"""
    text = _TAG_PATTERN.sub(" ", storage)
    return html.unescape(re.sub(r"[ \t]+", " ", text)).strip()


class ConfluenceClient:
    """Confluence REST API wrapper bound to one site and space"""

    def __init__(self,
                 base_url: str,
                 email: str,
                 api_token: str,
                 space_key: str = "",
                 timeout: Optional[float] = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.space_key = space_key
        self.timeout = timeout
        self._auth = (email, api_token)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            auth=self._auth,
            headers={"Accept": "application/json"},
            transport=self._transport
        )

    def page_url(self, page_id: str, page_title: str) -> str:
        return f"{self.base_url}/wiki/spaces/{self.space_key}/pages/{page_id}/{quote(page_title)}"

    async def get_page_text(self, page_id: str) -> str:
        """
        Fetch a page and return its body as plain text

        Args:
            page_id: Confluence page id

        Returns:
            str: Page body with markup removed
        """
        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}/wiki/rest/api/content/{page_id}",
                params={"expand": "body.storage"}
            )
            response.raise_for_status()
            page = response.json()

        return storage_to_text(_storage_value(page))

    async def search_text(self, cql: str, limit: int = 5) -> str:
        """
        Search pages with CQL and return their titles and bodies as plain text

        Args:
            cql: Confluence query
            limit: Maximum number of pages

        Returns:
            str: One section per page, empty when nothing matched
        """
        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}/wiki/rest/api/content/search",
                params={"cql": cql, "limit": limit, "expand": "body.storage"}
            )
            response.raise_for_status()
            results = response.json().get("results") or []

        logger.info(f"Confluence search returned {len(results)} pages")
        sections = [f"# {page.get('title', '')}\n{storage_to_text(_storage_value(page))}" for page in results]
        return "\n\n".join(sections)

    async def create_page(self, title: str, body: str) -> PageReference:
        """
        Create a page in the configured space

        Args:
            title: Page title (must be unique in the space)
            body: Page body in storage (XHTML) format

        Returns:
            PageReference: Id, title and link of the created page
        """
        payload = {
            "type": "page",
            "title": title,
            "space": {"key": self.space_key},
            "body": {"storage": {"value": body, "representation": "storage"}}
        }
        async with self._client() as client:
            response = await client.post(f"{self.base_url}/wiki/rest/api/content", json=payload)
            response.raise_for_status()
            page = response.json()

        page_id = str(page.get("id", ""))
        page_title = page.get("title") or title
        logger.info(f"Created documentation page {page_id}: {page_title}")
        return PageReference(page_id=page_id, page_title=page_title, url=self.page_url(page_id, page_title))


def _storage_value(page: dict) -> str:
    return ((page.get("body") or {}).get("storage") or {}).get("value") or ""


__all__ = ["ConfluenceClient", "storage_to_text"]
