"""Pattern generator: turns a code-search query into lexical search signals."""

import logging

from pydantic import ValidationError

from app.schemas.search import SearchFilters, SearchPatternSet
from app.services.llm import GenerationError, Message, StructuredGenerator
from app.services.search.constants import AVAILABLE_FRAMEWORKS, AVAILABLE_LANGUAGES

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a code search expert. You turn a natural-language request into the "
    "identifiers, paths and library names most likely to appear in matching code."
)


class PatternGenerationError(Exception):
    """No pattern set could be produced; the code-search path cannot continue."""

    def __init__(self, message: str, query: str):
        self.message = message
        self.query = query
        super().__init__(message)


class PatternGenerator:
    def __init__(
        self,
        generator: StructuredGenerator,
        languages: list[str] | None = None,
        frameworks: list[str] | None = None,
    ) -> None:
        self.generator = generator
        self.languages = languages or AVAILABLE_LANGUAGES
        self.frameworks = frameworks or AVAILABLE_FRAMEWORKS

    async def generate(self, query: str, filters: SearchFilters | None = None) -> SearchPatternSet:
        """
        Derive search patterns for a query.

        Raises:
            PatternGenerationError: The generator failed or returned an invalid set
        """
        messages: list[Message] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": self._build_prompt(query, filters)},
        ]
        try:
            patterns = await self.generator.generate(messages, SearchPatternSet)
        except (GenerationError, ValidationError) as e:
            raise PatternGenerationError(f"Failed to generate search patterns: {e}", query) from e

        logger.info(
            f"Generated patterns for '{query}': {len(patterns.search_terms)} terms, "
            f"{len(patterns.code_patterns)} code patterns"
        )
        return patterns

    def _build_prompt(self, query: str, filters: SearchFilters | None) -> str:
        sections = [
            f"Search request: {query}",
            "",
            f"Languages in the index: {', '.join(self.languages)}",
            f"Frameworks in the index: {', '.join(self.frameworks)}",
        ]
        if filters is not None:
            if filters.languages:
                sections.append(f"Restrict to languages: {', '.join(filters.languages)}")
            if filters.frameworks:
                sections.append(f"Restrict to frameworks: {', '.join(filters.frameworks)}")
            if filters.complexity:
                sections.append(f"Repository complexity: {filters.complexity}")

        sections.extend(
            [
                "",
                "Produce:",
                "- search_terms: 3-8 identifiers or keywords (function names, library names,",
                "  domain words) likely to appear in relevant code",
                "- file_patterns: path fragments where relevant code usually lives",
                "- code_patterns: code fragments such as call names, decorators or hooks",
                "- framework_hints: framework or package names related to the request",
                "",
                "Prefer lowercase, literal strings that could appear verbatim in source code.",
            ]
        )
        return "\n".join(sections)
