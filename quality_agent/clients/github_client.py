"""
GitHub client for Quality Checker Agent
Reads pull request details and changed files, posts the summary comment,
and commits files to a new branch with a pull request
"""

import base64
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..config.agent_config import AgentConfig

logger = logging.getLogger(__name__)

PER_PAGE = 100


class GitHubClient:
    """GitHub REST API wrapper scoped to one pull request"""

    def __init__(self, config: AgentConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize GitHub client

        Args:
            config: Agent configuration (owner, repo, pull request number, token)
            transport: Optional httpx transport, used by tests
        """
        self.owner = config.github_owner
        self.repo = config.github_repo
        self.pr_number = config.github_issue_number
        self.api_url = config.github_api_url.rstrip("/")
        self.timeout = config.http_timeout
        self._token = config.github_token
        self._transport = transport

        if not self._token:
            logger.warning("GITHUB_TOKEN not found, requests will be unauthenticated")

    @property
    def pull_request_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/pull/{self.pr_number}"

    @property
    def _repo_url(self) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, headers=self._headers(), transport=self._transport)

    async def get_pull_request(self) -> Dict[str, Any]:
        """Fetch the pull request details"""
        async with self._client() as client:
            response = await client.get(f"{self._repo_url}/pulls/{self.pr_number}")
            response.raise_for_status()
            return response.json()

    async def get_changed_files(self) -> List[str]:
        """
        Fetch the paths of all files changed by the pull request

        Returns:
            List[str]: File paths in the order GitHub reports them
        """
        filenames: List[str] = []
        async with self._client() as client:
            page = 1
            while True:
                response = await client.get(
                    f"{self._repo_url}/pulls/{self.pr_number}/files",
                    params={"per_page": PER_PAGE, "page": page}
                )
                response.raise_for_status()
                files = response.json()
                filenames.extend(file_data.get("filename", "") for file_data in files)
                if len(files) < PER_PAGE:
                    break
                page += 1

        logger.info(f"Pull request #{self.pr_number} changes {len(filenames)} files")
        return [name for name in filenames if name]

    async def _find_comment(self, client: httpx.AsyncClient, marker: str) -> Optional[Dict[str, Any]]:
        found = None
        page = 1
        while True:
            response = await client.get(
                f"{self._repo_url}/issues/{self.pr_number}/comments",
                params={"per_page": PER_PAGE, "page": page}
            )
            response.raise_for_status()
            comments = response.json()
            for comment in comments:
                if marker in (comment.get("body") or ""):
                    found = comment
            if len(comments) < PER_PAGE:
                return found
            page += 1

    async def create_or_update_comment(self, body: str, marker: Optional[str] = None) -> Dict[str, Any]:
        """
        Post a comment on the pull request, updating an earlier one when possible

        Args:
            body: Comment body
            marker: Text identifying an earlier comment of this agent; the latest
                    comment containing it is updated instead of posting a new one

        Returns:
            Dict[str, Any]: The created or updated comment
        """
        async with self._client() as client:
            existing = await self._find_comment(client, marker) if marker else None
            if existing:
                response = await client.patch(
                    f"{self._repo_url}/issues/comments/{existing['id']}",
                    json={"body": body}
                )
            else:
                response = await client.post(
                    f"{self._repo_url}/issues/{self.pr_number}/comments",
                    json={"body": body}
                )
            response.raise_for_status()
            comment = response.json()

        action = "Updated" if existing else "Posted"
        logger.info(f"{action} comment on PR #{self.pr_number}: {comment.get('html_url', '')}")
        return comment

    async def get_branch_sha(self, branch: str) -> str:
        """Return the commit sha a branch points to"""
        async with self._client() as client:
            response = await client.get(f"{self._repo_url}/git/ref/heads/{branch}")
            response.raise_for_status()
            return response.json()["object"]["sha"]

    async def create_branch(self, branch: str, sha: str) -> bool:
        """
        Create a branch at a commit

        Returns:
            bool: False when the branch already exists
        """
        async with self._client() as client:
            response = await client.post(
                f"{self._repo_url}/git/refs",
                json={"ref": f"refs/heads/{branch}", "sha": sha}
            )
            if response.status_code == 422:
                logger.info(f"Branch {branch} already exists")
                return False
            response.raise_for_status()

        logger.info(f"Created branch {branch} at {sha[:7]}")
        return True

    async def put_file(self, path: str, content: str, message: str, branch: str) -> Dict[str, Any]:
        """
        Create or update a file on a branch with one commit

        Args:
            path: Repository path of the file
            content: New file content
            message: Commit message
            branch: Branch the commit is made on

        Returns:
            Dict[str, Any]: The contents API response
        """
        url = f"{self._repo_url}/contents/{quote(path)}"
        payload = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch
        }
        async with self._client() as client:
            existing = await client.get(url, params={"ref": branch})
            if existing.status_code == 200:
                payload["sha"] = existing.json().get("sha")
            elif existing.status_code != 404:
                existing.raise_for_status()

            response = await client.put(url, json=payload)
            response.raise_for_status()
            return response.json()

    async def create_pull_request(self, title: str, head: str, base: str, body: str) -> Dict[str, Any]:
        """Open a pull request from head into base"""
        async with self._client() as client:
            response = await client.post(
                f"{self._repo_url}/pulls",
                json={"title": title, "head": head, "base": base, "body": body}
            )
            response.raise_for_status()
            pull_request = response.json()

        logger.info(f"Opened pull request: {pull_request.get('html_url', '')}")
        return pull_request


__all__ = ["GitHubClient"]
