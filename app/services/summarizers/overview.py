"""Overview summarizer: a short natural-language description of the repository."""

import logging

from app.schemas.repository_analysis import Feature, ProjectStructure, TechStack
from app.services.llm import GenerationError, Message, StructuredGenerator
from app.services.summarizers.base import SummarizerOutcome

logger = logging.getLogger(__name__)

README_CHARS = 4000

SYSTEM_PROMPT = "You are a technical writer. You write clear, informative repository summaries."


def default_overview(features: list[Feature], structure: ProjectStructure, tech_stack: TechStack) -> str:
    """Deterministic one-line summary used when generation fails."""
    languages = ", ".join(tech_stack.languages) if tech_stack.languages else "unknown languages"
    return (
        f"A {structure.architecture} repository with {len(features)} identified "
        f"feature{'s' if len(features) != 1 else ''}, written in {languages}."
    )


class OverviewSummarizer:
    def __init__(self, generator: StructuredGenerator) -> None:
        self.generator = generator

    async def summarize(
        self,
        features: list[Feature],
        structure: ProjectStructure,
        tech_stack: TechStack,
        readme: str | None = None,
    ) -> SummarizerOutcome[str]:
        messages: list[Message] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": self._build_prompt(features, structure, tech_stack, readme)},
        ]
        try:
            text = await self.generator.generate(messages)
        except GenerationError as e:
            logger.warning(f"Overview generation failed, using default: {e}")
            return SummarizerOutcome(
                value=default_overview(features, structure, tech_stack),
                ok=False,
                error=str(e),
            )

        if not text.strip():
            return SummarizerOutcome(value=default_overview(features, structure, tech_stack))
        return SummarizerOutcome(value=text.strip())

    def _build_prompt(
        self,
        features: list[Feature],
        structure: ProjectStructure,
        tech_stack: TechStack,
        readme: str | None,
    ) -> str:
        sections = ["Write a summary of this repository.", "", "## Features", ""]
        sections.extend(f"- {f.name}: {f.description}" for f in features)
        sections.extend(
            [
                "",
                f"**Architecture:** {structure.architecture}",
                f"**Tech stack:** {tech_stack.model_dump_json()}",
                "",
                "## README",
                "",
                (readme or "No README available")[:README_CHARS],
                "",
                "---",
                "",
                "Explain what the repository does, its main features, its technology stack",
                "and architecture, and how it is organized. Keep it under 500 words and write",
                "for developers deciding whether to reuse this code.",
            ]
        )
        return "\n".join(sections)
