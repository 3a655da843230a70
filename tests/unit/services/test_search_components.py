"""Unit tests for the search building blocks: intent, patterns, replies, text search."""

import uuid

import pytest

from app.schemas.search import FileRef, IntentResult, RepositoryRef, SearchFilters, SearchPatternSet, SearchResult
from app.services.llm import GenerationError
from app.services.search.constants import CASUAL_FALLBACK_REPLY, HELP_FALLBACK_REPLY
from app.services.search.intent import IntentClassifier
from app.services.search.patterns import PatternGenerationError, PatternGenerator
from app.services.search.replies import ReplyWriter, fallback_summary
from app.services.search.text_search import simple_text_search
from tests.helpers.mock_factories import make_mock_analysis, make_mock_generator, make_mock_repository


class TestIntentClassifier:
    @pytest.mark.asyncio
    async def test_returns_generated_intent(self):
        verdict = IntentResult(intent="casual_conversation", confidence=95, reasoning="Greeting")
        generator = make_mock_generator(verdict)

        result = await IntentClassifier(generator).classify("hello there")

        assert result.intent == "casual_conversation"
        assert "hello there" in generator.generate.await_args.args[0][1]["content"]

    @pytest.mark.asyncio
    async def test_failure_defaults_to_code_search(self):
        generator = make_mock_generator(GenerationError("down"))

        result = await IntentClassifier(generator).classify("jwt auth")

        assert result.intent == "code_search"
        assert result.confidence == 0


class TestPatternGenerator:
    @pytest.mark.asyncio
    async def test_filters_reach_prompt(self):
        generator = make_mock_generator(SearchPatternSet(search_terms=["jwt"]))
        filters = SearchFilters(languages=["python"], frameworks=["fastapi"], complexity="high")

        patterns = await PatternGenerator(generator).generate("token auth", filters)

        assert patterns.search_terms == ["jwt"]
        prompt = generator.generate.await_args.args[0][1]["content"]
        assert "Restrict to languages: python" in prompt
        assert "Restrict to frameworks: fastapi" in prompt
        assert "Repository complexity: high" in prompt

    @pytest.mark.asyncio
    async def test_failure_raises_with_query(self):
        generator = make_mock_generator(GenerationError("down"))

        with pytest.raises(PatternGenerationError) as exc_info:
            await PatternGenerator(generator).generate("token auth")

        assert exc_info.value.query == "token auth"


def _result(path: str = "src/auth.ts", score: float = 80) -> SearchResult:
    return SearchResult(
        repository=RepositoryRef(id=uuid.uuid4(), full_name="acme/api"),
        file=FileRef(path=path, language="typescript"),
        matches=[],
        overall_score=score,
    )


class TestReplyWriter:
    @pytest.mark.asyncio
    async def test_casual_reply_falls_back(self):
        writer = ReplyWriter(make_mock_generator(GenerationError("down")))

        assert await writer.casual_reply("hi") == CASUAL_FALLBACK_REPLY

    @pytest.mark.asyncio
    async def test_help_reply_falls_back_on_blank(self):
        writer = ReplyWriter(make_mock_generator("  "))

        assert await writer.help_reply("how does this work?") == HELP_FALLBACK_REPLY

    @pytest.mark.asyncio
    async def test_summary_without_results_skips_generation(self):
        generator = make_mock_generator()
        writer = ReplyWriter(generator)

        summary = await writer.search_summary("jwt", [], SearchPatternSet(), total=0)

        assert summary == "No code matching 'jwt' was found in the analyzed repositories."
        generator.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_summary_falls_back_on_failure(self):
        writer = ReplyWriter(make_mock_generator(GenerationError("down")))
        results = [_result()]

        summary = await writer.search_summary("jwt", results, SearchPatternSet(search_terms=["jwt"]), total=3)

        assert summary == fallback_summary("jwt", results, 3)
        assert "Found 3 relevant files" in summary
        assert "src/auth.ts in acme/api" in summary


class TestSimpleTextSearch:
    def setup_method(self):
        self.repo = make_mock_repository(full_name="acme/api", description="API server")

    def _row(self, searchable_content):
        return self.repo, make_mock_analysis(searchable_content=searchable_content)

    def test_keyword_and_feature_hits(self):
        content = {
            "keywords": ["authenticate", "router"],
            "features": [{"name": "Auth", "description": "JWT authentication flow"}],
        }

        results = simple_text_search([self._row(content)], "authentication")

        assert len(results) == 1
        result = results[0]
        assert result.file.path == "repository-level"
        assert result.overall_score == 35
        assert [m.score for m in result.matches] == [40]

    def test_keyword_containment_both_ways(self):
        content = {"keywords": ["auth"], "features": []}

        results = simple_text_search([self._row(content)], "Auth middleware")

        assert [m.name for m in results[0].matches] == ["auth"]
        assert results[0].matches[0].score == 30

    def test_repositories_without_hits_are_omitted(self):
        results = simple_text_search([self._row({"keywords": ["billing"]}), self._row(None)], "graphql")

        assert results == []

    def test_blank_query(self):
        assert simple_text_search([self._row({"keywords": ["x"]})], "   ") == []
