"""Search API endpoint tests.

SearchService is replaced by a mock; streamed searches are replaced by a
producer that writes straight to the channel.
"""

from __future__ import annotations

import json
import uuid
from unittest.mock import ANY, AsyncMock, MagicMock, patch

import pytest
from httpx import AsyncClient

from app.api.deps import get_search_service
from app.main import app
from app.schemas.search import IntentResult, SearchEvent, SearchResponse
from app.services.search import PatternGenerationError


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.search = AsyncMock()
    service.simple_search = AsyncMock(return_value=[])
    app.dependency_overrides[get_search_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_search_service, None)


def _casual_response(query: str) -> SearchResponse:
    return SearchResponse(
        query=query,
        summary="Hi! Ask me about your code.",
        intent=IntentResult(intent="casual_conversation", confidence=90, reasoning="Greeting"),
        response_type="casual_response",
    )


class TestSearch:
    @pytest.mark.asyncio
    async def test_returns_service_response(self, api_client: AsyncClient, mock_service):
        mock_service.search.return_value = _casual_response("hello")

        resp = await api_client.post("/api/v1/search", json={"query": "hello"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["response_type"] == "casual_response"
        assert data["results"] == []
        request = mock_service.search.await_args.args[1]
        assert request.query == "hello"

    @pytest.mark.asyncio
    async def test_blank_query_rejected(self, api_client: AsyncClient, mock_service):
        resp = await api_client.post("/api/v1/search", json={"query": "   "})

        assert resp.status_code == 422
        mock_service.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_pattern_failure_is_bad_gateway(self, api_client: AsyncClient, mock_service):
        mock_service.search.side_effect = PatternGenerationError("provider down", "jwt auth")

        resp = await api_client.post("/api/v1/search", json={"query": "jwt auth"})

        assert resp.status_code == 502
        assert "jwt auth" in resp.json()["detail"]


class TestSearchStream:
    @pytest.mark.asyncio
    async def test_streams_events_until_complete(self, api_client: AsyncClient, mock_service):
        captured = {}

        async def fake_run(service, request, channel):
            captured["request"] = request
            channel.publish(SearchEvent(stage="connected", message="Search started", query=request.query))
            channel.close(SearchEvent(stage="complete", message="Done", data={"total_found": 0}))

        repo_id = uuid.uuid4()
        with patch("app.api.v1.search._run_streamed_search", side_effect=fake_run):
            resp = await api_client.get(
                "/api/v1/search/stream",
                params={
                    "query": "jwt auth",
                    "repository_ids": str(repo_id),
                    "languages": "python, go",
                    "complexity": "high",
                },
            )

        assert resp.status_code == 200
        events = [block.split("\n")[0] for block in resp.text.strip().split("\n\n")]
        assert events == ["event: connected", "event: complete"]
        request = captured["request"]
        assert request.repository_ids == [repo_id]
        assert request.filters.languages == ["python", "go"]
        assert request.filters.complexity == "high"

    @pytest.mark.asyncio
    async def test_invalid_repository_ids(self, api_client: AsyncClient, mock_service):
        resp = await api_client.get(
            "/api/v1/search/stream",
            params={"query": "jwt", "repository_ids": "not-a-uuid"},
        )

        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_blank_query(self, api_client: AsyncClient, mock_service):
        resp = await api_client.get("/api/v1/search/stream", params={"query": "   "})

        assert resp.status_code == 400


class TestSimpleSearch:
    @pytest.mark.asyncio
    async def test_passes_repository_ids(self, api_client: AsyncClient, mock_service):
        repo_ids = [uuid.uuid4(), uuid.uuid4()]

        resp = await api_client.get(
            "/api/v1/search/simple",
            params={"query": "auth", "repository_ids": ",".join(str(r) for r in repo_ids)},
        )

        assert resp.status_code == 200
        assert resp.json() == {"query": "auth", "results": [], "total_found": 0}
        mock_service.simple_search.assert_awaited_once_with(ANY, "auth", repo_ids)


class TestStaticEndpoints:
    @pytest.mark.asyncio
    async def test_suggestions_filtered(self, api_client: AsyncClient):
        resp = await api_client.get("/api/v1/search/suggestions", params={"q": "react"})

        data = resp.json()
        assert data["query"] == "react"
        assert data["suggestions"]
        assert all("react" in s.lower() for s in data["suggestions"])

    @pytest.mark.asyncio
    async def test_suggestions_limit(self, api_client: AsyncClient):
        resp = await api_client.get("/api/v1/search/suggestions", params={"limit": 2})

        assert len(resp.json()["suggestions"]) == 2

    @pytest.mark.asyncio
    async def test_filters(self, api_client: AsyncClient):
        resp = await api_client.get("/api/v1/search/filters")

        data = resp.json()
        assert data["complexity"] == ["low", "medium", "high"]
        assert "Python" in data["languages"]


@pytest.mark.asyncio
async def test_health(api_client: AsyncClient):
    resp = await api_client.get("/health")

    assert resp.status_code == 200
    assert json.loads(resp.text)["status"] == "healthy"
