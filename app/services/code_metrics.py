"""
Code metrics for an analysis run.

Pure functions over data the pipeline has already fetched: no network,
no retries. Runs in a worker thread alongside syntax extraction.
"""

from collections.abc import Iterable, Mapping
from typing import Literal

from app.schemas.repository_analysis import CodeMetrics
from app.services.github.types import TreeEntry
from app.services.syntax.languages import detect_language, display_language, is_code_file

HIGH_FILE_COUNT = 50
HIGH_LINE_COUNT = 10_000
MEDIUM_FILE_COUNT = 20
MEDIUM_LINE_COUNT = 5_000


def classify_complexity(file_count: int, lines_of_code: int) -> Literal["low", "medium", "high"]:
    if file_count > HIGH_FILE_COUNT or lines_of_code > HIGH_LINE_COUNT:
        return "high"
    if file_count > MEDIUM_FILE_COUNT or lines_of_code > MEDIUM_LINE_COUNT:
        return "medium"
    return "low"


def maintainability_score(file_count: int) -> float:
    """10 for tiny repositories, dropping by one per ten code files, floored at 1."""
    return max(1.0, min(10.0, 10 - file_count / 10))


def count_lines(content: str) -> int:
    return len(content.split("\n"))


def compute_code_metrics(
    tree_entries: Iterable[TreeEntry],
    files: Mapping[str, str | None],
) -> CodeMetrics:
    """
    Metrics over the fetched files.

    Args:
        tree_entries: Full repository tree; only blobs are counted in total_files
        files: Fetched contents by path; None marks a file that could not be fetched

    Returns:
        CodeMetrics whose complexity and maintainability derive from the
        code-file count and total line count
    """
    code_files = {path: content for path, content in files.items() if content and is_code_file(path)}
    lines_of_code = sum(count_lines(content) for content in code_files.values())

    return CodeMetrics(
        total_files=sum(1 for entry in tree_entries if entry.type == "blob"),
        code_files=len(code_files),
        lines_of_code=lines_of_code,
        complexity=classify_complexity(len(code_files), lines_of_code),
        maintainability=maintainability_score(len(code_files)),
        languages=sorted({display_language(detect_language(path)) for path in code_files}),
    )
