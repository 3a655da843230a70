"""Feature summarizer: what the repository does, as a list of features."""

import logging
from collections.abc import Mapping

from app.schemas.repository_analysis import DEFAULT_FEATURES, Feature, FeatureList
from app.services.llm import Message, StructuredGenerator
from app.services.summarizers.base import (
    SummarizerOutcome,
    fetched_files,
    format_file,
    generate_or_default,
)

logger = logging.getLogger(__name__)

MAX_PROMPT_FILES = 20

SYSTEM_PROMPT = (
    "You are an expert code analyst. You identify the features a repository "
    "implements and describe them precisely."
)


class FeatureSummarizer:
    """Identify user-facing features from README and code."""

    def __init__(self, generator: StructuredGenerator) -> None:
        self.generator = generator

    async def summarize(
        self,
        files: Mapping[str, str | None],
        readme: str | None = None,
    ) -> SummarizerOutcome[list[Feature]]:
        messages: list[Message] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": self._build_prompt(files, readme)},
        ]
        outcome = await generate_or_default(
            self.generator,
            messages,
            FeatureList,
            FeatureList(features=list(DEFAULT_FEATURES)),
            label="Feature extraction",
        )
        if outcome.ok:
            logger.info(f"Identified {len(outcome.value.features)} features")
        return SummarizerOutcome(value=outcome.value.features, ok=outcome.ok, error=outcome.error)

    def _build_prompt(self, files: Mapping[str, str | None], readme: str | None) -> str:
        sections = [
            "Analyze this repository and identify the features and functionality it implements.",
            "",
            "## README",
            "",
            readme or "No README available",
            "",
            "## Code Files",
            "",
        ]
        for path, content in fetched_files(files)[:MAX_PROMPT_FILES]:
            sections.extend(format_file(path, content))

        sections.extend(
            [
                "---",
                "",
                "## Task",
                "",
                "Look for features such as:",
                "- Authentication systems",
                "- API endpoints and services",
                "- Database operations",
                "- UI components and pages",
                "- Testing setup",
                "- Deployment configuration",
                "- Third-party integrations",
                "",
                "For each feature give its name, a short description, the key files that",
                "implement it, its type (authentication, api, database, ui, testing,",
                "deployment, other), a brief technical description of the implementation,",
                "and the libraries it depends on.",
                "",
                "Only report features you can see in the code or README.",
            ]
        )
        return "\n".join(sections)
