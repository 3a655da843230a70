"""Tech stack summarizer: languages, frameworks, databases and tooling."""

from collections.abc import Mapping

from app.schemas.repository_analysis import DEFAULT_TECH_STACK, TechStack
from app.services.llm import Message, StructuredGenerator
from app.services.summarizers.base import (
    SummarizerOutcome,
    fetched_files,
    format_file,
    generate_or_default,
)

PACKAGE_FILE_MARKERS = (
    "package.json",
    "requirements.txt",
    "pyproject.toml",
    "Gemfile",
    "composer.json",
    "pom.xml",
    "Cargo.toml",
    "go.mod",
)
CONFIG_FILE_MARKERS = ("config", ".env", "docker", "webpack", "vite")
CONFIG_CHARS = 1000

SYSTEM_PROMPT = "You are a tech stack analyst. You identify the technologies a codebase is built with."


class TechStackSummarizer:
    def __init__(self, generator: StructuredGenerator) -> None:
        self.generator = generator

    async def summarize(
        self,
        files: Mapping[str, str | None],
        language_stats: Mapping[str, int] | None = None,
    ) -> SummarizerOutcome[TechStack]:
        messages: list[Message] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": self._build_prompt(files, language_stats or {})},
        ]
        return await generate_or_default(
            self.generator,
            messages,
            TechStack,
            DEFAULT_TECH_STACK.model_copy(deep=True),
            label="Tech stack detection",
        )

    def _build_prompt(self, files: Mapping[str, str | None], language_stats: Mapping[str, int]) -> str:
        available = fetched_files(files)
        package_files = [(p, c) for p, c in available if any(m in p for m in PACKAGE_FILE_MARKERS)]
        config_files = [(p, c) for p, c in available if any(m in p.lower() for m in CONFIG_FILE_MARKERS)]

        sections = [
            "Identify the technology stack of this repository.",
            "",
            "## Languages (bytes)",
            "",
        ]
        sections.extend(f"{language}: {size}" for language, size in language_stats.items())
        sections.extend(["", "## Package Files", ""])
        for path, content in package_files:
            sections.extend(format_file(path, content))
        sections.extend(["## Config Files", ""])
        for path, content in config_files:
            sections.extend(format_file(path, content, limit=CONFIG_CHARS))

        sections.extend(
            [
                "---",
                "",
                "## Task",
                "",
                "Categorize the technologies into frontend, backend, database, tools",
                "(build tools, bundlers, CI), frameworks (major frameworks) and languages.",
                "Only list technologies that appear in the files above.",
            ]
        )
        return "\n".join(sections)
