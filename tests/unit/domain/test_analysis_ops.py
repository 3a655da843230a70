"""Unit tests for AnalysisOperations: all DB calls mocked."""

import uuid
import warnings
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from app.domain.analysis_operations import MAX_START_ATTEMPTS, AnalysisOperations
from tests.helpers.mock_factories import (
    make_mock_analysis,
    mock_rows_result,
    mock_scalar_result,
    mock_scalars_result,
)


class TestStartOrGetInProgress:
    """Single-flight start: insert-or-return-existing."""

    def setup_method(self):
        self.ops = AnalysisOperations()
        self.db = AsyncMock()
        self.db.add = MagicMock()
        self.repository_id = uuid.uuid4()

    @pytest.mark.asyncio
    async def test_creates_when_none_running(self):
        analysis = make_mock_analysis(repository_id=self.repository_id)
        self.db.execute = AsyncMock(
            side_effect=[
                mock_scalar_result(analysis.id),  # INSERT ... RETURNING id
                mock_scalar_result(analysis),  # reload
            ]
        )

        result, created = await self.ops.start_or_get_in_progress(self.db, self.repository_id)

        assert created is True
        assert result is analysis
        self.db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_returns_existing_on_conflict(self):
        existing = make_mock_analysis(repository_id=self.repository_id)
        self.db.execute = AsyncMock(
            side_effect=[
                mock_scalar_result(None),  # conflict, nothing inserted
                mock_scalar_result(existing),
            ]
        )

        result, created = await self.ops.start_or_get_in_progress(self.db, self.repository_id)

        assert created is False
        assert result is existing

    @pytest.mark.asyncio
    async def test_retries_when_running_analysis_finished_mid_start(self):
        analysis = make_mock_analysis(repository_id=self.repository_id)
        self.db.execute = AsyncMock(
            side_effect=[
                mock_scalar_result(None),  # conflict
                mock_scalar_result(None),  # ...but it already finished
                mock_scalar_result(analysis.id),
                mock_scalar_result(analysis),
            ]
        )

        result, created = await self.ops.start_or_get_in_progress(self.db, self.repository_id)

        assert created is True
        assert result is analysis

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        self.db.execute = AsyncMock(return_value=mock_scalar_result(None))

        with pytest.raises(RuntimeError):
            await self.ops.start_or_get_in_progress(self.db, self.repository_id)

        assert self.db.execute.await_count == MAX_START_ATTEMPTS * 2


class TestTerminalUpdates:
    def setup_method(self):
        self.ops = AnalysisOperations()
        self.db = AsyncMock()
        self.db.add = MagicMock()

    @pytest.mark.asyncio
    async def test_mark_completed_stores_payload(self):
        analysis = make_mock_analysis()
        analysis.is_terminal = False

        result = await self.ops.mark_completed(self.db, analysis, {"summary": "A service", "complexity": "low"})

        assert result.status == "COMPLETED"
        assert result.summary == "A service"
        assert result.complexity == "low"
        assert result.completed_at is not None
        self.db.add.assert_called_once_with(analysis)

    @pytest.mark.asyncio
    async def test_mark_completed_rejects_terminal_analysis(self):
        analysis = make_mock_analysis(status="FAILED")
        analysis.is_terminal = True

        with pytest.raises(ValueError):
            await self.ops.mark_completed(self.db, analysis, {})

    @pytest.mark.asyncio
    async def test_mark_failed_truncates_message(self):
        analysis = make_mock_analysis()
        analysis.is_terminal = False
        self.db.execute = AsyncMock(return_value=mock_scalar_result(analysis))

        result = await self.ops.mark_failed(self.db, analysis.id, "x" * 800)

        assert result.status == "FAILED"
        assert len(result.error_message) == 500

    @pytest.mark.asyncio
    async def test_mark_failed_leaves_terminal_analysis_alone(self):
        analysis = make_mock_analysis(status="COMPLETED")
        analysis.is_terminal = True
        self.db.execute = AsyncMock(return_value=mock_scalar_result(analysis))

        result = await self.ops.mark_failed(self.db, analysis.id, "late failure")

        assert result.status == "COMPLETED"
        self.db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_mark_failed_missing_analysis(self):
        self.db.execute = AsyncMock(return_value=mock_scalar_result(None))

        assert await self.ops.mark_failed(self.db, uuid.uuid4(), "gone") is None


class TestQueries:
    def setup_method(self):
        self.ops = AnalysisOperations()
        self.db = AsyncMock()

    @pytest.mark.asyncio
    async def test_list_for_repository(self):
        analyses = [make_mock_analysis() for _ in range(3)]
        self.db.execute = AsyncMock(return_value=mock_scalars_result(analyses))

        result = await self.ops.list_for_repository(self.db, uuid.uuid4(), limit=3)

        assert result == analyses

    @pytest.mark.asyncio
    async def test_list_searchable_filters_complexity_after_query(self):
        low = make_mock_analysis(complexity="low")
        high = make_mock_analysis(complexity="high")
        rows = [(MagicMock(), low), (MagicMock(), high)]
        self.db.execute = AsyncMock(return_value=mock_rows_result(rows))

        result = await self.ops.list_searchable(self.db, complexity="high")

        assert [analysis for _, analysis in result] == [high]

    @pytest.mark.asyncio
    async def test_list_with_searchable_content(self):
        rows = [(MagicMock(), make_mock_analysis())]
        self.db.execute = AsyncMock(return_value=mock_rows_result(rows))

        result = await self.ops.list_with_searchable_content(self.db, [uuid.uuid4()])

        assert result == rows

    @pytest.mark.asyncio
    async def test_latest_per_repository_uses_window_function(self):
        self.db.execute = AsyncMock(return_value=mock_rows_result([]))

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            await self.ops.list_searchable(self.db, repository_ids=[uuid.uuid4()], languages=["Python"])
            await self.ops.list_with_searchable_content(self.db)

        for call in self.db.execute.await_args_list:
            sql = str(call.args[0].compile(dialect=postgresql.dialect()))
            assert "DISTINCT" not in sql
            assert "row_number() OVER (PARTITION BY analyses.repository_id" in sql
