"""
File Selector package.

Module structure:
- selector.py: select_important_files and path classification helpers
- constants.py: priority patterns, noise directories, medium cap
"""

from app.services.file_selector.constants import (
    DEFAULT_MEDIUM_CAP,
    HIGH_PRIORITY_PATTERNS,
    NOISE_DIRECTORIES,
)
from app.services.file_selector.selector import (
    is_high_priority,
    is_noise_path,
    select_important_files,
)

__all__ = [
    "select_important_files",
    "is_high_priority",
    "is_noise_path",
    "DEFAULT_MEDIUM_CAP",
    "HIGH_PRIORITY_PATTERNS",
    "NOISE_DIRECTORIES",
]
