"""Natural-language replies: search summaries and non-search responses.

Every reply has a deterministic fallback, so a generation failure never
invalidates results that were already computed.
"""

import logging

from app.schemas.search import SearchPatternSet, SearchResult
from app.services.llm import GenerationError, Message, StructuredGenerator
from app.services.search.constants import CASUAL_FALLBACK_REPLY, HELP_FALLBACK_REPLY

logger = logging.getLogger(__name__)

ASSISTANT_PROMPT = (
    "You are a friendly assistant for a tool that searches analyzed code "
    "repositories. Keep replies short."
)


def fallback_summary(query: str, results: list[SearchResult], total: int) -> str:
    if not results:
        return f"No code matching '{query}' was found in the analyzed repositories."
    top = results[0]
    return (
        f"Found {total} relevant file{'s' if total != 1 else ''} for '{query}'. "
        f"Best match: {top.file.path} in {top.repository.full_name}."
    )


class ReplyWriter:
    def __init__(self, generator: StructuredGenerator) -> None:
        self.generator = generator

    async def casual_reply(self, query: str) -> str:
        return await self._text(
            [
                {"role": "system", "content": ASSISTANT_PROMPT},
                {
                    "role": "user",
                    "content": f"Reply briefly to this message and mention what you can search for: {query}",
                },
            ],
            CASUAL_FALLBACK_REPLY,
        )

    async def help_reply(self, query: str) -> str:
        return await self._text(
            [
                {"role": "system", "content": ASSISTANT_PROMPT},
                {
                    "role": "user",
                    "content": "\n".join(
                        [
                            f"The user asked: {query}",
                            "",
                            "Explain how to use the search: describe the code in plain language,",
                            "optionally filter by repository, language, framework or complexity,",
                            "and note that repositories must be analyzed before they can be searched.",
                        ]
                    ),
                },
            ],
            HELP_FALLBACK_REPLY,
        )

    async def search_summary(
        self,
        query: str,
        results: list[SearchResult],
        patterns: SearchPatternSet,
        total: int,
    ) -> str:
        if not results:
            return fallback_summary(query, results, total)

        sections = [
            f"Search request: {query}",
            f"Search terms: {', '.join(patterns.search_terms)}",
            f"Total relevant files: {total}",
            "",
            "Top results:",
        ]
        for result in results:
            names = ", ".join(m.name for m in result.matches[:5])
            sections.append(
                f"- {result.repository.full_name}/{result.file.path} "
                f"(score {result.overall_score:.0f}): {names}"
            )
        sections.extend(
            [
                "",
                "Summarize in a short paragraph where the relevant code lives and what it does.",
                "Mention the most useful files by path.",
            ]
        )
        return await self._text(
            [
                {"role": "system", "content": "You summarize code search results for developers."},
                {"role": "user", "content": "\n".join(sections)},
            ],
            fallback_summary(query, results, total),
        )

    async def _text(self, messages: list[Message], fallback: str) -> str:
        try:
            text = await self.generator.generate(messages)
        except GenerationError as e:
            logger.warning(f"Reply generation failed, using fallback: {e}")
            return fallback
        return text.strip() or fallback
