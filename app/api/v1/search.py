"""Search API endpoints.

POST "" runs the whole search and returns one response; GET /stream runs
the same search as SSE. Streamed searches open their own session because
they outlive the request's dependencies.
"""

import asyncio
import logging
import uuid as uuid_pkg

import pydantic
from fastapi import APIRouter, Query

from app.api.deps import DbSession, Search
from app.api.sse import search_stream, sse_response
from app.config import settings
from app.core.database import async_session_maker
from app.core.exceptions import UpstreamError, ValidationError
from app.schemas.search import (
    Complexity,
    FiltersResponse,
    SearchEvent,
    SearchFilters,
    SearchRequest,
    SearchResponse,
    SimpleSearchResponse,
    SuggestionsResponse,
)
from app.services.progress_channel import ProgressChannel
from app.services.search import (
    AVAILABLE_FRAMEWORKS,
    AVAILABLE_LANGUAGES,
    COMPLEXITY_LEVELS,
    SEARCH_SUGGESTIONS,
    PatternGenerationError,
    SearchService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

# Strong references to streaming searches until they finish
_running_searches: set[asyncio.Task[None]] = set()


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_repository_ids(value: str | None) -> list[uuid_pkg.UUID]:
    try:
        return [uuid_pkg.UUID(part) for part in _split_csv(value)]
    except ValueError as e:
        raise ValidationError("repository_ids must be comma-separated UUIDs") from e


async def _run_streamed_search(
    service: SearchService,
    request: SearchRequest,
    channel: ProgressChannel[SearchEvent],
) -> None:
    async with async_session_maker() as session:
        await service.stream(session, request, channel)


@router.post("", response_model=SearchResponse)
async def search(request: SearchRequest, db: DbSession, service: Search):
    """
    Run a search.

    Casual and help messages get a reply with no results. Code searches
    return ranked file matches plus a summary.
    """
    try:
        return await service.search(db, request)
    except PatternGenerationError as e:
        logger.error(f"Search failed for '{e.query}': {e}")
        raise UpstreamError(f"Search failed for query '{e.query}': {e.message}") from e


@router.get("/stream")
async def stream_search(
    service: Search,
    query: str = Query(..., min_length=1, max_length=1000),
    repository_ids: str | None = Query(None, description="Comma-separated repository ids"),
    languages: str | None = Query(None, description="Comma-separated languages"),
    frameworks: str | None = Query(None, description="Comma-separated frameworks"),
    complexity: Complexity | None = Query(None),
):
    """Same search as POST, streamed as SSE. Ends with `complete` or `error`."""
    try:
        request = SearchRequest(
            query=query,
            repository_ids=_parse_repository_ids(repository_ids),
            filters=SearchFilters(
                languages=_split_csv(languages),
                frameworks=_split_csv(frameworks),
                complexity=complexity,
            ),
        )
    except pydantic.ValidationError as e:
        raise ValidationError("Query must not be blank") from e

    channel: ProgressChannel[SearchEvent] = ProgressChannel(maxsize=settings.progress_queue_size)
    task = asyncio.create_task(
        _run_streamed_search(service, request, channel),
        name=f"search-{request.query[:40]}",
    )
    _running_searches.add(task)
    task.add_done_callback(_running_searches.discard)
    return sse_response(search_stream(channel))


@router.get("/simple", response_model=SimpleSearchResponse)
async def simple_search(
    db: DbSession,
    service: Search,
    query: str = Query(..., min_length=1, max_length=1000),
    repository_ids: str | None = Query(None, description="Comma-separated repository ids"),
):
    """Keyword search over stored searchable indexes. No model calls."""
    results = await service.simple_search(db, query, _parse_repository_ids(repository_ids))
    return SimpleSearchResponse(query=query, results=results, total_found=len(results))


@router.get("/suggestions", response_model=SuggestionsResponse)
async def get_suggestions(
    q: str | None = Query(None),
    limit: int = Query(10, ge=1, le=50),
):
    """Example queries, optionally filtered by a substring."""
    suggestions = SEARCH_SUGGESTIONS
    if q:
        suggestions = [s for s in suggestions if q.lower() in s.lower()]
    return SuggestionsResponse(suggestions=suggestions[:limit], query=q or "")


@router.get("/filters", response_model=FiltersResponse)
async def get_filters():
    return FiltersResponse(
        languages=AVAILABLE_LANGUAGES,
        frameworks=AVAILABLE_FRAMEWORKS,
        complexity=COMPLEXITY_LEVELS,
    )
