"""
GitHub source browser package.

Usage: `from app.services.github import GitHubReadOperations, get_source_browser`

Module structure:
- read_operations.py: tree, file, README and language reads
- http_client.py: shared pooled AsyncClient
- cache.py: TTL caches for slowly-changing reads
- helpers.py: rate limit handling and error translation
- types.py: response dataclasses
- exceptions.py: GitHubAPIError
"""

from app.config import settings
from app.services.github.cache import clear_all_caches as clear_github_caches
from app.services.github.exceptions import GitHubAPIError
from app.services.github.helpers import RateLimitInfo, handle_error_response, split_full_name
from app.services.github.http_client import close_github_client, get_github_client
from app.services.github.read_operations import GitHubReadOperations
from app.services.github.types import FileContent, GitHubRepo, RepoTree, TreeEntry


def get_source_browser() -> GitHubReadOperations:
    """Build a source browser from settings."""
    return GitHubReadOperations(
        token=settings.github_token,
        batch_size=settings.github_batch_size,
        batch_delay=settings.github_batch_delay_seconds,
        max_file_size=settings.github_max_file_size,
    )


__all__ = [
    "GitHubReadOperations",
    "get_source_browser",
    "close_github_client",
    "get_github_client",
    "clear_github_caches",
    "handle_error_response",
    "split_full_name",
    "RateLimitInfo",
    "GitHubAPIError",
    "FileContent",
    "GitHubRepo",
    "RepoTree",
    "TreeEntry",
]
