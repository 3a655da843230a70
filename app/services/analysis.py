"""
Analysis entry points.

`start_analysis` applies the single-flight guard inside the request's
session. `run_analysis_task` is the background runner: it builds an
AnalysisOrchestrator from settings and runs it against its own sessions,
since the request session is gone by the time it executes.
"""

import asyncio
import logging
import uuid as uuid_pkg

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import direct_session_maker
from app.domain.analysis_operations import analysis_ops
from app.models.analysis import Analysis
from app.schemas.analysis_progress import AnalysisEvent, AnalysisTerminal
from app.services.analysis_orchestrator import AnalysisOrchestrator
from app.services.github import get_source_browser
from app.services.llm import get_generator
from app.services.progress_channel import ProgressChannel
from app.services.syntax import ParserRegistry, StructuralExtractor

logger = logging.getLogger(__name__)

# Strong references to detached analysis tasks until they finish
_running_tasks: set[asyncio.Task[None]] = set()


async def start_analysis(db: AsyncSession, repository_id: uuid_pkg.UUID) -> tuple[Analysis, bool]:
    """
    Create an IN_PROGRESS analysis unless one is already running.

    Commits immediately so the background runner, which uses a different
    connection, can see the row.

    Returns:
        (analysis, created) - created is False for an existing run
    """
    analysis, created = await analysis_ops.start_or_get_in_progress(db, repository_id)
    await db.commit()
    if created:
        logger.info(f"Started analysis {analysis.id} for repository {repository_id}")
    else:
        logger.info(f"Analysis {analysis.id} already in progress for repository {repository_id}")
    return analysis, created


async def run_analysis_task(
    repository_id: uuid_pkg.UUID,
    analysis_id: uuid_pkg.UUID,
    parsers: ParserRegistry,
    channel: ProgressChannel[AnalysisEvent] | None = None,
) -> None:
    """
    Background task that runs the analysis and stores the result.

    Args:
        repository_id: Repository being analyzed
        analysis_id: The IN_PROGRESS analysis created by start_analysis
        parsers: Process-wide parser registry
        channel: Optional sink for progress events (SSE)
    """
    logger.info(f"Background analysis task started for analysis {analysis_id}")

    try:
        orchestrator = AnalysisOrchestrator(
            source_browser=get_source_browser(),
            generator=get_generator(),
            extractor=StructuralExtractor(parsers),
            channel=channel,
        )
    except Exception as e:
        logger.exception(f"Could not set up analysis {analysis_id}: {e}")
        if channel is not None:
            channel.close(
                AnalysisTerminal(
                    status="FAILED",
                    analysis_id=analysis_id,
                    message="Analysis failed",
                    error_message=str(e)[:500],
                )
            )
        async with direct_session_maker() as session:
            await analysis_ops.mark_failed(session, analysis_id, f"Analysis setup failed: {e}")
            await session.commit()
        raise

    await orchestrator.run(repository_id, analysis_id)


def _log_task_result(task: asyncio.Task[None]) -> None:
    _running_tasks.discard(task)
    if task.cancelled():
        logger.warning(f"Analysis task {task.get_name()} was cancelled")
        return
    error = task.exception()
    if error is not None:
        # Already logged and recorded as FAILED by the orchestrator
        logger.debug(f"Analysis task {task.get_name()} ended with {type(error).__name__}")


def spawn_analysis_task(
    repository_id: uuid_pkg.UUID,
    analysis_id: uuid_pkg.UUID,
    parsers: ParserRegistry,
    channel: ProgressChannel[AnalysisEvent] | None = None,
) -> asyncio.Task[None]:
    """Run an analysis detached from the caller, e.g. an SSE response that may disconnect."""
    task = asyncio.create_task(
        run_analysis_task(repository_id, analysis_id, parsers, channel),
        name=f"analysis-{analysis_id}",
    )
    _running_tasks.add(task)
    task.add_done_callback(_log_task_result)
    return task


async def cancel_running_analyses() -> None:
    """Cancel detached analyses and wait for each to record its FAILED state."""
    tasks = list(_running_tasks)
    if not tasks:
        return
    logger.info(f"Cancelling {len(tasks)} running analysis task(s)")
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
