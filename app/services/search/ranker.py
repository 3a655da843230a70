"""
Ranker: blends heuristic match scores with a model-assisted re-score.

overall = 0.3 * average(match scores) + 0.7 * model score, or just the
average when the re-score fails for that file. Files are re-scored in
fixed-size concurrent batches, then sorted and truncated.
"""

import asyncio
import logging

from pydantic import ValidationError

from app.schemas.search import ModelScore, SearchPatternSet, SearchResult
from app.services.llm import GenerationError, Message, StructuredGenerator
from app.services.search.matcher import FileMatches

logger = logging.getLogger(__name__)

HEURISTIC_WEIGHT = 0.3
MODEL_WEIGHT = 0.7
MAX_MATCHES_IN_PROMPT = 10

SYSTEM_PROMPT = (
    "You rate how relevant a source file is to a code search request, "
    "given the elements a heuristic matcher found in it."
)


def blend_scores(heuristic_average: float, model_score: float) -> float:
    return HEURISTIC_WEIGHT * heuristic_average + MODEL_WEIGHT * model_score


class Ranker:
    def __init__(
        self,
        generator: StructuredGenerator,
        batch_size: int = 5,
        max_results: int = 50,
    ) -> None:
        self.generator = generator
        self.batch_size = max(1, batch_size)
        self.max_results = max_results

    async def rank(
        self,
        raw_results: list[FileMatches],
        query: str,
        patterns: SearchPatternSet,
    ) -> list[SearchResult]:
        """Score every file, best first, truncated to max_results."""
        scored: list[SearchResult] = []
        for start in range(0, len(raw_results), self.batch_size):
            batch = raw_results[start : start + self.batch_size]
            scored.extend(await asyncio.gather(*(self._score_file(r, query, patterns) for r in batch)))

        scored.sort(key=lambda r: r.overall_score, reverse=True)
        return scored[: self.max_results]

    async def _score_file(
        self,
        result: FileMatches,
        query: str,
        patterns: SearchPatternSet,
    ) -> SearchResult:
        average = result.average_score
        try:
            model_score = await self._model_score(result, query, patterns)
        except (GenerationError, ValidationError) as e:
            logger.warning(f"Re-score failed for {result.file.path}, using heuristic average: {e}")
            return SearchResult(
                repository=result.repository,
                file=result.file,
                matches=result.matches,
                overall_score=average,
            )

        matches = result.matches
        if model_score.explanation:
            matches = [m.model_copy(update={"explanation": model_score.explanation}) for m in matches]
        return SearchResult(
            repository=result.repository,
            file=result.file,
            matches=matches,
            overall_score=blend_scores(average, model_score.score),
        )

    async def _model_score(
        self,
        result: FileMatches,
        query: str,
        patterns: SearchPatternSet,
    ) -> ModelScore:
        sections = [
            f"Search request: {query}",
            f"Search terms: {', '.join(patterns.search_terms)}",
            "",
            f"Repository: {result.repository.full_name}",
            f"Description: {result.repository.description or 'None'}",
            f"File: {result.file.path} ({result.file.language})",
            "",
            "Matched elements:",
        ]
        for match in result.matches[:MAX_MATCHES_IN_PROMPT]:
            sections.append(
                f"- {match.type} {match.name} (lines {match.line_start}-{match.line_end}): {match.snippet}"
            )
        sections.extend(
            [
                "",
                "Give a relevance score from 0 to 100 and a one or two sentence explanation",
                "of what this file offers for the request.",
            ]
        )
        messages: list[Message] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "\n".join(sections)},
        ]
        return await self.generator.generate(messages, ModelScore)
