"""
GitHub API read operations (the source browser).

Provides the read-only calls the analysis pipeline needs:
- Repository metadata
- Recursive file tree
- File contents, fetched in rate-limit-friendly batches
- README and language statistics
"""

import asyncio
import base64
import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.services.github.cache import (
    cached_github_call,
    languages_cache,
    repo_details_cache,
    tree_cache,
)
from app.services.github.exceptions import GitHubAPIError
from app.services.github.helpers import handle_error_response
from app.services.github.http_client import get_github_client
from app.services.github.types import FileContent, GitHubRepo, RepoTree, TreeEntry

logger = logging.getLogger(__name__)


def _decode_content(data: dict[str, Any]) -> str | None:
    """Decode a base64 contents-API payload, or None for binary/non-UTF-8 data."""
    content_b64 = data.get("content")
    if not content_b64:
        return None
    try:
        return base64.b64decode(content_b64).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        return None


class GitHubReadOperations:
    """
    Read-only operations for the GitHub REST API.

    Uses the shared HTTP client for connection pooling. The core never
    retries these calls; a failed tree or metadata fetch propagates as
    GitHubAPIError, while individual file failures are reported per path.
    """

    BASE_URL = "https://api.github.com"
    API_VERSION = "2022-11-28"

    def __init__(
        self,
        token: str = "",
        batch_size: int = 5,
        batch_delay: float = 0.1,
        max_file_size: int = 100_000,
    ):
        self.token = token
        self.batch_size = max(1, batch_size)
        self.batch_delay = batch_delay
        self.max_file_size = max_file_size
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.API_VERSION,
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def _normalize_repo(self, data: dict[str, Any]) -> GitHubRepo:
        return GitHubRepo(
            github_id=data["id"],
            name=data["name"],
            full_name=data["full_name"],
            owner=data["owner"]["login"],
            description=data.get("description"),
            url=data["html_url"],
            default_branch=data.get("default_branch") or "main",
            language=data.get("language"),
            stars_count=data.get("stargazers_count", 0),
            forks_count=data.get("forks_count", 0),
        )

    @cached_github_call(repo_details_cache)
    async def get_repository(self, owner: str, repo: str) -> GitHubRepo:
        """Fetch repository metadata."""
        client = get_github_client()
        response = await client.get(
            f"{self.BASE_URL}/repos/{owner}/{repo}",
            headers=self._headers,
        )
        handle_error_response(response, f"{owner}/{repo}")
        return self._normalize_repo(response.json())

    @cached_github_call(tree_cache)
    async def list_tree(self, owner: str, repo: str, branch: str = "main") -> RepoTree:
        """
        Fetch the complete file tree using the Git Trees API with recursive=1.

        Returns:
            RepoTree whose entries keep GitHub's ordering
        """
        client = get_github_client()
        response = await client.get(
            f"{self.BASE_URL}/repos/{owner}/{repo}/git/trees/{quote(branch, safe='')}",
            headers=self._headers,
            params={"recursive": "1"},
        )
        handle_error_response(response, f"{owner}/{repo}")

        data = response.json()
        entries = [
            TreeEntry(path=item["path"], type=item["type"], size=item.get("size"))
            for item in data.get("tree", [])
        ]
        if data.get("truncated"):
            logger.warning(f"Tree for {owner}/{repo} was truncated by GitHub ({len(entries)} items)")

        return RepoTree(sha=data.get("sha", ""), entries=entries, truncated=data.get("truncated", False))

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        branch: str = "main",
    ) -> FileContent:
        """
        Fetch and decode one file.

        Missing, oversized, binary and non-file paths yield content=None
        rather than an error.
        """
        client = get_github_client()
        response = await client.get(
            f"{self.BASE_URL}/repos/{owner}/{repo}/contents/{quote(path)}",
            headers=self._headers,
            params={"ref": branch},
        )

        if response.status_code == 404:
            return FileContent(path=path, content=None, error="not found")

        handle_error_response(response, f"{owner}/{repo}")

        data = response.json()
        if not isinstance(data, dict) or data.get("type") != "file":
            return FileContent(path=path, content=None, error="not a file")

        size = data.get("size", 0)
        if size > self.max_file_size:
            return FileContent(path=path, content=None, size=size, error="too large")

        return FileContent(path=path, content=_decode_content(data), size=size)

    async def get_file_contents(
        self,
        owner: str,
        repo: str,
        paths: list[str],
        branch: str = "main",
    ) -> list[FileContent]:
        """
        Fetch many files in sequential batches with a pause between batches.

        One path failing never fails the batch: its entry carries
        content=None and the error text. Output order follows `paths`.
        """

        async def fetch_one(path: str) -> FileContent:
            try:
                return await self.get_file_content(owner, repo, path, branch)
            except (GitHubAPIError, httpx.HTTPError) as e:
                logger.warning(f"Failed to fetch {owner}/{repo}:{path}: {e}")
                return FileContent(path=path, content=None, error=str(e))

        results: list[FileContent] = []
        for start in range(0, len(paths), self.batch_size):
            if start > 0 and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)
            batch = paths[start : start + self.batch_size]
            results.extend(await asyncio.gather(*(fetch_one(p) for p in batch)))

        return results

    async def get_readme(self, owner: str, repo: str) -> str | None:
        """Fetch the repository README, or None if there is none."""
        client = get_github_client()
        response = await client.get(
            f"{self.BASE_URL}/repos/{owner}/{repo}/readme",
            headers=self._headers,
        )
        if response.status_code == 404:
            return None
        handle_error_response(response, f"{owner}/{repo}")
        return _decode_content(response.json())

    @cached_github_call(languages_cache)
    async def get_language_stats(self, owner: str, repo: str) -> dict[str, int]:
        """Fetch the language breakdown as {language: bytes}."""
        client = get_github_client()
        response = await client.get(
            f"{self.BASE_URL}/repos/{owner}/{repo}/languages",
            headers=self._headers,
            timeout=15.0,
        )
        handle_error_response(response, f"{owner}/{repo}")
        data: dict[str, int] = response.json()
        return dict(data or {})
