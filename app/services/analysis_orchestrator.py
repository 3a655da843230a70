"""
Analysis Orchestrator: runs the nine analysis stages for one repository.

Stages (a progress event follows each):
1. Fetch the file tree
2. Select important files
3. Fetch selected contents, README and language stats
4. Feature summary           (local failure -> default)
5. Structure summary         (local failure -> default)
6. Tech stack summary        (local failure -> default)
7. Syntax artifacts + code metrics, concurrently in worker threads
8. Overview summary          (local failure -> default)
9. Persist the COMPLETED analysis and stamp the repository

Any other error marks the analysis FAILED (in a fresh session) and is
re-raised. The progress channel always receives exactly one terminal event.
"""

import asyncio
import logging
import uuid as uuid_pkg
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.core.database import direct_session_maker
from app.domain.analysis_operations import analysis_ops
from app.domain.repository_operations import repository_ops
from app.models.analysis import Analysis
from app.models.repository import Repository
from app.schemas.analysis_progress import (
    TOTAL_STAGES,
    AnalysisEvent,
    AnalysisProgress,
    AnalysisStage,
    AnalysisTerminal,
)
from app.schemas.repository_analysis import CodeMetrics, Feature, ProjectStructure, TechStack
from app.services.code_metrics import compute_code_metrics
from app.services.file_selector import select_important_files
from app.services.github import GitHubReadOperations, TreeEntry
from app.services.llm import StructuredGenerator
from app.services.progress_channel import ProgressChannel
from app.services.searchable_index import build_searchable_index
from app.services.summarizers import (
    FeatureSummarizer,
    OverviewSummarizer,
    StructureSummarizer,
    TechStackSummarizer,
)
from app.services.syntax import StructuralExtractor, build_ast_data

logger = logging.getLogger(__name__)

STAGE_NUMBERS: dict[str, int] = {
    "fetching_tree": 1,
    "selecting_files": 2,
    "fetching_files": 3,
    "extracting_features": 4,
    "analyzing_structure": 5,
    "detecting_tech_stack": 6,
    "extracting_syntax": 7,
    "summarizing": 8,
    "saving": 9,
}


class RepositoryNotFoundError(Exception):
    """The repository being analyzed no longer exists."""


class AnalysisOrchestrator:
    """
    Orchestrates one analysis run.

    Collaborators are injected so the orchestrator never reaches for
    process-wide state: the source browser, the structured generator, the
    structural extractor (holding the shared ParserRegistry) and an
    optional progress channel. Database work happens in short sessions
    from `session_maker`, since a run outlives any request session.
    """

    def __init__(
        self,
        source_browser: GitHubReadOperations,
        generator: StructuredGenerator,
        extractor: StructuralExtractor,
        channel: ProgressChannel[AnalysisEvent] | None = None,
        session_maker: sessionmaker = direct_session_maker,
        max_files: int | None = None,
        medium_cap: int | None = None,
    ) -> None:
        self.source_browser = source_browser
        self.extractor = extractor
        self.channel = channel
        self.session_maker = session_maker
        self.max_files = max_files if max_files is not None else settings.analysis_max_files
        self.medium_cap = medium_cap if medium_cap is not None else settings.selector_medium_cap

        self.feature_summarizer = FeatureSummarizer(generator)
        self.structure_summarizer = StructureSummarizer(generator)
        self.tech_stack_summarizer = TechStackSummarizer(generator)
        self.overview_summarizer = OverviewSummarizer(generator)

    async def run(self, repository_id: uuid_pkg.UUID, analysis_id: uuid_pkg.UUID) -> Analysis:
        """
        Run every stage and persist the result.

        Returns:
            The COMPLETED analysis

        Raises:
            Whatever stage-fatal error stopped the run, after the analysis
            has been marked FAILED
        """
        try:
            analysis = await self._run_stages(repository_id, analysis_id)
        except Exception as e:
            error_message = str(e) or type(e).__name__
            logger.exception(f"Analysis {analysis_id} failed: {error_message}")
            await self._mark_failed(analysis_id, error_message)
            self._close(
                AnalysisTerminal(
                    status="FAILED",
                    analysis_id=analysis_id,
                    message="Analysis failed",
                    error_message=error_message[:500],
                )
            )
            raise
        except asyncio.CancelledError:
            logger.warning(f"Analysis {analysis_id} interrupted")
            await asyncio.shield(self._mark_failed(analysis_id, "Analysis interrupted"))
            self._close(
                AnalysisTerminal(
                    status="FAILED",
                    analysis_id=analysis_id,
                    message="Analysis interrupted",
                    error_message="Analysis interrupted",
                )
            )
            raise

        self._close(
            AnalysisTerminal(
                status="COMPLETED",
                analysis_id=analysis.id,
                message="Analysis completed",
            )
        )
        return analysis

    async def _run_stages(self, repository_id: uuid_pkg.UUID, analysis_id: uuid_pkg.UUID) -> Analysis:
        repository = await self._load_repository(repository_id)
        owner, name, branch = repository.owner, repository.name, repository.default_branch
        logger.info(f"Starting analysis {analysis_id} for {repository.full_name}")

        # Stage 1
        tree = await self.source_browser.list_tree(owner, name, branch)
        blobs = tree.blobs
        self._progress("fetching_tree", f"Found {len(blobs)} files")

        # Stage 2
        selected = select_important_files(blobs, medium_cap=self.medium_cap, max_files=self.max_files)
        self._progress("selecting_files", f"Selected {len(selected)} important files")

        # Stage 3
        fetched = await self.source_browser.get_file_contents(owner, name, selected, branch)
        files: dict[str, str | None] = {item.path: item.content for item in fetched}
        readme, language_stats = await asyncio.gather(
            self.source_browser.get_readme(owner, name),
            self.source_browser.get_language_stats(owner, name),
        )
        fetched_count = sum(1 for content in files.values() if content is not None)
        self._progress("fetching_files", f"Fetched {fetched_count} of {len(selected)} files")

        # Stages 4-6: each falls back to its default instead of raising
        features_outcome = await self.feature_summarizer.summarize(files, readme)
        features: list[Feature] = features_outcome.value
        self._progress(
            "extracting_features",
            f"Identified {len(features)} features",
            degraded=not features_outcome.ok,
        )

        structure_outcome = await self.structure_summarizer.summarize([e.path for e in tree.entries], files)
        structure: ProjectStructure = structure_outcome.value
        self._progress(
            "analyzing_structure",
            f"Architecture: {structure.architecture}",
            degraded=not structure_outcome.ok,
        )

        tech_outcome = await self.tech_stack_summarizer.summarize(files, language_stats)
        tech_stack: TechStack = tech_outcome.value
        self._progress(
            "detecting_tech_stack",
            f"Detected {len(tech_stack.frameworks)} frameworks",
            degraded=not tech_outcome.ok,
        )

        # Stage 7
        ast_data, metrics = await self._extract_in_parallel(tree.entries, files)
        self._progress(
            "extracting_syntax",
            f"Parsed {ast_data['summary']['parsed_files']} files, {metrics.lines_of_code} lines of code",
        )

        # Stage 8
        overview_outcome = await self.overview_summarizer.summarize(features, structure, tech_stack, readme)
        self._progress("summarizing", "Generated summary", degraded=not overview_outcome.ok)

        # Stage 9
        searchable = build_searchable_index(features, structure, files.keys())
        payload: dict[str, Any] = {
            "features": [f.model_dump(mode="json") for f in features],
            "structure": structure.model_dump(mode="json"),
            "tech_stack": tech_stack.model_dump(mode="json"),
            "ast_data": ast_data,
            "code_metrics": metrics.model_dump(mode="json"),
            "searchable_content": searchable.model_dump(mode="json"),
            "dependencies": language_stats,
            "documentation": {"readme": readme},
            "summary": overview_outcome.value,
            "complexity": metrics.complexity,
        }
        analysis = await self._persist(repository_id, analysis_id, payload)
        self._progress("saving", "Analysis saved")

        logger.info(
            f"Analysis {analysis_id} completed for {repository.full_name}: "
            f"{len(features)} features, {metrics.code_files} code files, complexity {metrics.complexity}"
        )
        return analysis

    async def _extract_in_parallel(
        self,
        tree_entries: list[TreeEntry],
        files: Mapping[str, str | None],
    ) -> tuple[dict[str, Any], CodeMetrics]:
        """
        Build syntax artifacts and code metrics concurrently.

        Both are CPU-bound and depend only on fetched content, so each
        runs in a worker thread.
        """
        ast_task = asyncio.to_thread(self._build_ast_data, files)
        metrics_task = asyncio.to_thread(compute_code_metrics, tree_entries, files)
        ast_data, metrics = await asyncio.gather(ast_task, metrics_task)
        return ast_data, metrics

    def _build_ast_data(self, files: Mapping[str, str | None]) -> dict[str, Any]:
        return build_ast_data(self.extractor.extract_many(files))

    async def _load_repository(self, repository_id: uuid_pkg.UUID) -> Repository:
        async with self.session_maker() as session:
            repository = await repository_ops.get(session, repository_id)
        if repository is None:
            raise RepositoryNotFoundError(f"Repository {repository_id} not found")
        return repository

    async def _persist(
        self,
        repository_id: uuid_pkg.UUID,
        analysis_id: uuid_pkg.UUID,
        payload: dict[str, Any],
    ) -> Analysis:
        """Write the terminal COMPLETED state and stamp last_analyzed_at in one transaction."""
        async with self.session_maker() as session:
            analysis = await analysis_ops.get(session, analysis_id)
            if analysis is None:
                raise LookupError(f"Analysis {analysis_id} not found")
            analysis = await analysis_ops.mark_completed(session, analysis, payload)
            await repository_ops.mark_analyzed(
                session,
                repository_id,
                analysis.completed_at or datetime.now(UTC),
            )
            await session.commit()
            return analysis

    async def _mark_failed(self, analysis_id: uuid_pkg.UUID, error_message: str) -> None:
        """Mark the analysis FAILED using a fresh session."""
        try:
            async with self.session_maker() as session:
                await analysis_ops.mark_failed(session, analysis_id, error_message)
                await session.commit()
        except Exception as e:
            logger.error(f"Failed to mark analysis {analysis_id} as failed: {e}")

    def _progress(self, stage: AnalysisStage, message: str, degraded: bool = False) -> None:
        if degraded:
            message = f"{message} (using defaults)"
        logger.debug(f"[{STAGE_NUMBERS[stage]}/{TOTAL_STAGES}] {message}")
        if self.channel is not None:
            self.channel.publish(
                AnalysisProgress(
                    stage=stage,
                    step_index=STAGE_NUMBERS[stage],
                    total_steps=TOTAL_STAGES,
                    message=message,
                    degraded=degraded,
                )
            )

    def _close(self, terminal: AnalysisTerminal) -> None:
        if self.channel is not None:
            self.channel.close(terminal)
