"""Structure summarizer: architecture, patterns and directory roles."""

from collections.abc import Iterable, Mapping

from app.schemas.repository_analysis import DEFAULT_STRUCTURE, ProjectStructure
from app.services.llm import Message, StructuredGenerator
from app.services.summarizers.base import SummarizerOutcome, fetched_files, generate_or_default

MAX_DIRECTORIES = 20
MAX_KEY_FILES = 10
MAX_SAMPLES = 5
SAMPLE_CHARS = 500

SYSTEM_PROMPT = (
    "You are an expert software architect. You describe how a repository is "
    "organized and which architectural patterns it follows."
)


def top_level_directories(paths: Iterable[str], limit: int = MAX_DIRECTORIES) -> list[str]:
    """First path segments of nested paths, skipping dot-directories, in first-seen order."""
    seen: list[str] = []
    for path in paths:
        if "/" not in path:
            continue
        head = path.split("/", 1)[0]
        if head and not head.startswith(".") and head not in seen:
            seen.append(head)
            if len(seen) >= limit:
                break
    return seen


class StructureSummarizer:
    def __init__(self, generator: StructuredGenerator) -> None:
        self.generator = generator

    async def summarize(
        self,
        tree_paths: list[str],
        files: Mapping[str, str | None],
    ) -> SummarizerOutcome[ProjectStructure]:
        messages: list[Message] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": self._build_prompt(tree_paths, files)},
        ]
        return await generate_or_default(
            self.generator,
            messages,
            ProjectStructure,
            DEFAULT_STRUCTURE.model_copy(deep=True),
            label="Structure analysis",
        )

    def _build_prompt(self, tree_paths: list[str], files: Mapping[str, str | None]) -> str:
        available = fetched_files(files)
        sections = [
            "Analyze this repository's structure and describe its architecture.",
            "",
            "## Top-level Directories",
            "",
            *top_level_directories(tree_paths),
            "",
            "## Key Files",
            "",
            *[path for path, _ in available[:MAX_KEY_FILES]],
            "",
            "## Sample Code",
            "",
        ]
        for path, content in available[:MAX_SAMPLES]:
            sections.extend([f"{path}:", content[:SAMPLE_CHARS], ""])

        sections.extend(
            [
                "---",
                "",
                "## Task",
                "",
                "Describe:",
                "- architecture: the overall pattern (monolith, microservices, MVC, library, ...)",
                "- patterns: design patterns in use",
                "- directories: each important directory with its purpose and importance "
                "(high, medium, low)",
                "- entry_points: main application entry files",
                "- config_files: configuration files",
            ]
        )
        return "\n".join(sections)
