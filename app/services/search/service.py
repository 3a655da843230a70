"""
Search service: intent gating, pattern generation, matching and ranking.

Flow for one request:
1. Classify intent. Casual and help queries get a reply and stop here;
   the matcher is never touched for them.
2. Generate a pattern set (failure is fatal for the request)
3. Load candidate repositories (latest COMPLETED analysis with AST data)
4. Match stored syntax elements heuristically
5. Rank with the model-assisted re-score
6. Summarize the top results

Progress goes to an optional ProgressChannel of SearchEvents. When the
stream variant is used, the channel always ends with `complete` or `error`.
"""

import asyncio
import logging
import uuid as uuid_pkg
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain.analysis_operations import analysis_ops
from app.models.analysis import Analysis
from app.models.repository import Repository
from app.schemas.search import (
    IntentResult,
    RepositoryRef,
    SearchEvent,
    SearchPatternSet,
    SearchRequest,
    SearchResponse,
    SearchResult,
)
from app.services.llm import StructuredGenerator
from app.services.progress_channel import ProgressChannel
from app.services.search.intent import IntentClassifier
from app.services.search.matcher import ASTMatcher, FileMatches
from app.services.search.patterns import PatternGenerator
from app.services.search.ranker import Ranker
from app.services.search.replies import ReplyWriter
from app.services.search.text_search import simple_text_search

logger = logging.getLogger(__name__)

CODE_SEARCH_STEPS = 7


class SearchService:
    """Runs searches against stored analyses. Collaborators are injected."""

    def __init__(
        self,
        generator: StructuredGenerator,
        matcher: ASTMatcher | None = None,
        batch_size: int | None = None,
        max_results: int | None = None,
        summary_top_n: int | None = None,
    ) -> None:
        self.classifier = IntentClassifier(generator)
        self.pattern_generator = PatternGenerator(generator)
        self.matcher = matcher or ASTMatcher()
        self.ranker = Ranker(
            generator,
            batch_size=batch_size or settings.search_batch_size,
            max_results=max_results or settings.search_max_results,
        )
        self.replies = ReplyWriter(generator)
        self.summary_top_n = summary_top_n or settings.search_summary_top_n

    async def search(
        self,
        db: AsyncSession,
        request: SearchRequest,
        channel: ProgressChannel[SearchEvent] | None = None,
    ) -> SearchResponse:
        """
        Run one search.

        Raises:
            PatternGenerationError: Patterns could not be generated for a code search
        """
        query = request.query
        logger.info(f"Starting search for: '{query}'")
        self._emit(channel, "status", "Analyzing query intent...", {"step": 1, "total_steps": 2})

        intent = await self.classifier.classify(query)
        self._emit(
            channel,
            "intent",
            f"Detected intent: {intent.intent} ({intent.confidence}% confidence)",
            intent.model_dump(mode="json"),
        )

        if intent.intent == "casual_conversation":
            self._emit(channel, "status", "Generating friendly response...", {"step": 2, "total_steps": 2})
            reply = intent.suggested_response or await self.replies.casual_reply(query)
            return SearchResponse(query=query, summary=reply, intent=intent, response_type="casual_response")

        if intent.intent == "help_request":
            self._emit(channel, "status", "Generating help response...", {"step": 2, "total_steps": 2})
            reply = await self.replies.help_reply(query)
            return SearchResponse(query=query, summary=reply, intent=intent, response_type="help_response")

        return await self._code_search(db, request, intent, channel)

    async def _code_search(
        self,
        db: AsyncSession,
        request: SearchRequest,
        intent: IntentResult,
        channel: ProgressChannel[SearchEvent] | None,
    ) -> SearchResponse:
        query = request.query
        filters = request.filters

        self._emit(channel, "status", "Analyzing search query...", self._step(2))
        patterns = await self.pattern_generator.generate(query, filters)
        self._emit(
            channel,
            "patterns",
            f"Generated {len(patterns.search_terms)} search patterns",
            {"patterns": patterns.model_dump(mode="json")},
        )

        self._emit(channel, "status", "Finding relevant repositories...", self._step(3))
        candidates = await analysis_ops.list_searchable(
            db,
            repository_ids=request.repository_ids or None,
            languages=filters.languages or None,
            complexity=filters.complexity,
        )
        self._emit(
            channel,
            "repositories",
            f"Searching {len(candidates)} repositories",
            {
                "count": len(candidates),
                "repositories": [{"id": str(r.id), "full_name": r.full_name} for r, _ in candidates],
            },
        )

        self._emit(channel, "status", "Searching AST data...", self._step(4))
        raw_results = await asyncio.to_thread(self._match_all, candidates, query, patterns)
        self._emit(
            channel,
            "raw_results",
            f"Found {len(raw_results)} potential matches",
            {"count": len(raw_results)},
        )

        self._emit(channel, "status", "Scoring and ranking results...", self._step(5))
        results = await self.ranker.rank(raw_results, query, patterns)
        self._emit(
            channel,
            "scored_results",
            f"Scored and ranked {len(results)} results",
            {"count": len(results)},
        )

        self._emit(channel, "status", "Generating summary...", self._step(6))
        summary = await self.replies.search_summary(
            query, results[: self.summary_top_n], patterns, total=len(results)
        )
        self._emit(channel, "summary", "Generated summary", {"summary": summary})
        self._emit(channel, "status", "Search completed!", self._step(7))

        logger.info(f"Search for '{query}' returned {len(results)} results")
        return SearchResponse(
            query=query,
            results=results,
            total_found=len(results),
            search_patterns=patterns,
            summary=summary,
            intent=intent,
            response_type="code_search",
        )

    def _match_all(
        self,
        candidates: list[tuple[Repository, Analysis]],
        query: str,
        patterns: SearchPatternSet,
    ) -> list[FileMatches]:
        results: list[FileMatches] = []
        for repository, analysis in candidates:
            if not analysis.ast_data:
                continue
            ref = RepositoryRef(
                id=repository.id,
                full_name=repository.full_name,
                description=repository.description,
            )
            results.extend(self.matcher.match_repository(ref, analysis.ast_data, query, patterns))
        return results

    async def stream(
        self,
        db: AsyncSession,
        request: SearchRequest,
        channel: ProgressChannel[SearchEvent],
    ) -> None:
        """Run a search into `channel`, always closing it with `complete` or `error`."""
        channel.publish(SearchEvent(stage="connected", message="Search stream connected", query=request.query))
        try:
            response = await self.search(db, request, channel)
        except Exception as e:
            logger.error(f"Streaming search failed for '{request.query}': {e}")
            channel.close(
                SearchEvent(
                    stage="error",
                    message=str(e) or type(e).__name__,
                    data={"error": str(e) or type(e).__name__},
                    query=request.query,
                )
            )
            return
        except asyncio.CancelledError:
            channel.close(SearchEvent(stage="error", message="Search cancelled", query=request.query))
            raise

        channel.publish(
            SearchEvent(stage="results", message="Search results", data=response.model_dump(mode="json"))
        )
        channel.close(
            SearchEvent(
                stage="complete",
                message="Search completed successfully",
                data={"total_results": response.total_found},
            )
        )

    async def simple_search(
        self,
        db: AsyncSession,
        query: str,
        repository_ids: list[uuid_pkg.UUID] | None = None,
    ) -> list[SearchResult]:
        rows = await analysis_ops.list_with_searchable_content(db, repository_ids or None)
        return simple_text_search(rows, query)

    @staticmethod
    def _step(step: int) -> dict[str, Any]:
        return {"step": step, "total_steps": CODE_SEARCH_STEPS}

    @staticmethod
    def _emit(
        channel: ProgressChannel[SearchEvent] | None,
        stage: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        if channel is not None:
            channel.publish(SearchEvent(stage=stage, message=message, data=data))  # type: ignore[arg-type]
