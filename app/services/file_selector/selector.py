"""
Deterministic selection of the files worth fetching for analysis.

High-priority matches come first in tree order, then recognized source
files in tree order up to the medium cap. Nothing under a noise directory
is ever returned, and the same tree always yields the same list.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

from app.services.file_selector.constants import (
    DEFAULT_MEDIUM_CAP,
    HIGH_PRIORITY_PATTERNS,
    NOISE_DIRECTORIES,
)
from app.services.syntax.languages import is_code_file

logger = logging.getLogger(__name__)


class TreeItem(Protocol):
    path: str
    type: str


def is_noise_path(path: str) -> bool:
    """True if any directory segment of the path is a noise directory."""
    segments = path.split("/")[:-1]
    return any(segment in NOISE_DIRECTORIES for segment in segments)


def is_high_priority(path: str) -> bool:
    return any(pattern.search(path) for pattern in HIGH_PRIORITY_PATTERNS)


def select_important_files(
    entries: Iterable[TreeItem],
    medium_cap: int = DEFAULT_MEDIUM_CAP,
    max_files: int | None = None,
) -> list[str]:
    """
    Pick a bounded, prioritized subset of blob paths from a tree.

    Args:
        entries: Tree entries in tree order (anything with `path` and `type`)
        medium_cap: Maximum number of medium-priority (plain source) files
        max_files: Optional final truncation applied after ordering

    Returns:
        Deduplicated paths: high-priority first, then capped medium-priority
    """
    high: list[str] = []
    medium: list[str] = []
    seen: set[str] = set()

    for entry in entries:
        path = entry.path
        if entry.type != "blob" or path in seen or is_noise_path(path):
            continue
        seen.add(path)

        if is_high_priority(path):
            high.append(path)
        elif is_code_file(path) and len(medium) < medium_cap:
            medium.append(path)

    selected = high + medium
    if max_files is not None:
        selected = selected[:max_files]

    logger.debug(f"Selected {len(high)} high-priority and {len(medium)} source files")
    return selected
