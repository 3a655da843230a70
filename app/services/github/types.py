"""Data types for GitHub source browser responses."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class GitHubRepo:
    """Normalized GitHub repository metadata."""

    github_id: int
    name: str
    full_name: str
    owner: str
    description: str | None
    url: str
    default_branch: str
    language: str | None
    stars_count: int
    forks_count: int

    def to_record(self) -> dict[str, Any]:
        """Fields as stored on the Repository model."""
        return {
            "github_id": self.github_id,
            "name": self.name,
            "full_name": self.full_name,
            "owner": self.owner,
            "description": self.description,
            "url": self.url,
            "default_branch": self.default_branch,
            "language": self.language,
            "stars_count": self.stars_count,
            "forks_count": self.forks_count,
        }


@dataclass
class TreeEntry:
    """Single item in a repository tree."""

    path: str
    type: str  # "blob" (file) or "tree" (directory)
    size: int | None = None  # Only set for blobs


@dataclass
class RepoTree:
    """Recursive file tree of a repository at one commit."""

    sha: str
    entries: list[TreeEntry] = field(default_factory=list)
    truncated: bool = False  # True if GitHub cut the listing short

    @property
    def blobs(self) -> list[TreeEntry]:
        return [entry for entry in self.entries if entry.type == "blob"]


@dataclass
class FileContent:
    """Decoded text of one file; content is None when it could not be fetched."""

    path: str
    content: str | None
    size: int | None = None
    error: str | None = None
