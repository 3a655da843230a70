"""Repository API endpoints: saving GitHub repositories and running analyses.

Analyses run outside the request:
- POST /{id}/analyze hands the run to BackgroundTasks and returns at once
- GET /{id}/analyze/stream detaches the run as a task and streams its progress
Both go through the same single-flight guard, so a repository never has
two IN_PROGRESS analyses.
"""

import logging
import uuid as uuid_pkg

from fastapi import APIRouter, BackgroundTasks, Query, status

from app.api.deps import DbSession, GitHubReader, Parsers
from app.api.sse import analysis_stream, format_sse, sse_response
from app.config import settings
from app.core.exceptions import NotFoundError, UpstreamError
from app.domain import analysis_ops, repository_ops
from app.models.analysis import AnalysisListItem, AnalysisRead
from app.models.repository import Repository, RepositoryRead, RepositorySave
from app.schemas.analysis_progress import (
    AnalysisEvent,
    AnalysisStatusResponse,
    AnalysisTerminal,
    AnalyzeResponse,
)
from app.services.analysis import run_analysis_task, spawn_analysis_task, start_analysis
from app.services.github import GitHubAPIError
from app.services.progress_channel import ProgressChannel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/repositories", tags=["repositories"])


async def _get_repository_or_404(db: DbSession, repository_id: uuid_pkg.UUID) -> Repository:
    repo = await repository_ops.get(db, id=repository_id)
    if not repo:
        raise NotFoundError("Repository")
    return repo


@router.post("", response_model=RepositoryRead, status_code=status.HTTP_201_CREATED)
async def save_repository(data: RepositorySave, db: DbSession, github: GitHubReader):
    """
    Save a GitHub repository by owner/name.

    Saving an already-known repository refreshes its metadata (keyed on
    the GitHub id) and returns the existing record.
    """
    try:
        github_repo = await github.get_repository(data.owner, data.name)
    except GitHubAPIError as e:
        if e.is_not_found:
            raise NotFoundError(f"GitHub repository {data.owner}/{data.name}") from e
        logger.error(f"GitHub lookup failed for {data.owner}/{data.name}: {e}")
        raise UpstreamError(f"GitHub request failed: {e.message}") from e

    repo = await repository_ops.upsert_from_github(db, github_repo.to_record())
    logger.info(f"Saved repository {repo.full_name} ({repo.id})")
    return repo


@router.get("", response_model=list[RepositoryRead])
async def list_repositories(
    db: DbSession,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """List saved repositories, newest first."""
    return await repository_ops.list_all(db, skip=skip, limit=limit)


@router.get("/{repository_id}", response_model=RepositoryRead)
async def get_repository(repository_id: uuid_pkg.UUID, db: DbSession):
    return await _get_repository_or_404(db, repository_id)


@router.post("/{repository_id}/analyze", response_model=AnalyzeResponse)
async def analyze_repository(
    repository_id: uuid_pkg.UUID,
    background_tasks: BackgroundTasks,
    db: DbSession,
    parsers: Parsers,
):
    """
    Start an analysis in the background.

    Returns immediately with the analysis id. When an analysis is already
    running for this repository, its id is returned instead and nothing new
    is started.
    """
    repo = await _get_repository_or_404(db, repository_id)
    analysis, created = await start_analysis(db, repo.id)

    if not created:
        return AnalyzeResponse(
            status="already_analyzing",
            analysis_id=analysis.id,
            message="Analysis already in progress",
        )

    background_tasks.add_task(run_analysis_task, repo.id, analysis.id, parsers)
    return AnalyzeResponse(
        status="started",
        analysis_id=analysis.id,
        message="Analysis started",
    )


@router.get("/{repository_id}/analyze/stream")
async def stream_analysis(repository_id: uuid_pkg.UUID, db: DbSession, parsers: Parsers):
    """
    Start (or attach to) an analysis and stream its progress as SSE.

    The stream always ends with a terminal event. If another run already
    holds the repository, the stream says so and ends with IN_PROGRESS.
    """
    repo = await _get_repository_or_404(db, repository_id)
    analysis, created = await start_analysis(db, repo.id)
    channel: ProgressChannel[AnalysisEvent] = ProgressChannel(maxsize=settings.progress_queue_size)

    if not created:
        channel.close(
            AnalysisTerminal(
                status="IN_PROGRESS",
                analysis_id=analysis.id,
                message="Analysis already in progress",
            )
        )
        notice = AnalyzeResponse(
            status="already_analyzing",
            analysis_id=analysis.id,
            message="Analysis already in progress",
        )
        return sse_response(analysis_stream(channel, preamble=[format_sse("already_analyzing", notice)]))

    spawn_analysis_task(repo.id, analysis.id, parsers, channel)
    started = AnalyzeResponse(status="started", analysis_id=analysis.id, message="Analysis started")
    return sse_response(analysis_stream(channel, preamble=[format_sse("started", started)]))


@router.get("/{repository_id}/analysis", response_model=AnalysisRead)
async def get_latest_analysis(repository_id: uuid_pkg.UUID, db: DbSession):
    """Latest COMPLETED analysis with its full payload."""
    await _get_repository_or_404(db, repository_id)
    analysis = await analysis_ops.get_latest_completed(db, repository_id)
    if not analysis:
        raise NotFoundError("Analysis")
    return analysis


@router.get("/{repository_id}/analysis/status", response_model=AnalysisStatusResponse)
async def get_analysis_status(repository_id: uuid_pkg.UUID, db: DbSession):
    """Status of the most recent analysis, or NOT_STARTED."""
    await _get_repository_or_404(db, repository_id)
    analysis = await analysis_ops.get_latest(db, repository_id)
    if not analysis:
        return AnalysisStatusResponse(status="NOT_STARTED")

    return AnalysisStatusResponse(
        status=analysis.status,  # type: ignore[arg-type]
        analysis_id=analysis.id,
        started_at=analysis.started_at,
        completed_at=analysis.completed_at,
        error_message=analysis.error_message,
    )


@router.get("/{repository_id}/analyses", response_model=list[AnalysisListItem])
async def list_analyses(
    repository_id: uuid_pkg.UUID,
    db: DbSession,
    limit: int = Query(50, ge=1, le=200),
):
    await _get_repository_or_404(db, repository_id)
    return await analysis_ops.list_for_repository(db, repository_id, limit=limit)
