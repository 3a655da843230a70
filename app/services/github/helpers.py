"""
GitHub API helper utilities.

Rate limit inspection and translation of error responses into GitHubAPIError.
"""

import logging

import httpx

from app.services.github.exceptions import GitHubAPIError

logger = logging.getLogger(__name__)


class RateLimitInfo:
    """Rate limit information from GitHub API response."""

    def __init__(self, response: httpx.Response) -> None:
        self.remaining = response.headers.get("X-RateLimit-Remaining")
        self.reset = response.headers.get("X-RateLimit-Reset")

    @property
    def reset_timestamp(self) -> int | None:
        """Get reset timestamp as integer, or None if not available."""
        return int(self.reset) if self.reset else None

    @property
    def is_exhausted(self) -> bool:
        """Check if rate limit is exhausted."""
        return self.remaining is not None and int(self.remaining) == 0


def split_full_name(full_name: str) -> tuple[str, str]:
    """Split "owner/repo" into its parts.

    Raises:
        ValueError: If the name is not of the form owner/repo
    """
    parts = full_name.strip("/").split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Expected 'owner/repo', got {full_name!r}")
    return parts[0], parts[1]


def handle_error_response(response: httpx.Response, repo_name: str) -> None:
    """
    Raise GitHubAPIError for any non-200 response.

    Args:
        response: The HTTP response from GitHub API
        repo_name: Repository name for error context (format: "owner/repo")

    Raises:
        GitHubAPIError: For redirects, auth failures, rate limits, missing
            resources, and any other non-success status
    """
    if response.status_code == 200:
        return

    rate_info = RateLimitInfo(response)

    if response.status_code == 301:
        location = response.headers.get("Location", "")
        logger.info(f"Repository {repo_name} moved, Location: {location!r}")
        raise GitHubAPIError(f"Repository {repo_name} was moved or renamed", 301)
    elif response.status_code == 401:
        raise GitHubAPIError("Invalid or expired GitHub token", 401)
    elif response.status_code == 404:
        raise GitHubAPIError(f"Repository or resource not found: {repo_name}", 404)
    elif response.status_code in (403, 429):
        if rate_info.is_exhausted or response.status_code == 429:
            logger.warning(f"GitHub rate limit hit for {repo_name}, resets at {rate_info.reset}")
            raise GitHubAPIError(
                "GitHub API rate limit exceeded",
                response.status_code,
                rate_limit_reset=rate_info.reset_timestamp,
            )
        raise GitHubAPIError("GitHub API forbidden", 403)
    else:
        raise GitHubAPIError(f"GitHub API error: {response.status_code}", response.status_code)
