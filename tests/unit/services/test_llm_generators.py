"""Unit tests for the structured generation layer: retry policy and the Anthropic adapter."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import BaseModel

from app.config.settings import Settings
from app.services.llm.anthropic_generator import OUTPUT_TOOL_NAME, AnthropicGenerator
from app.services.llm.base import GenerationError, RetryPolicy, call_with_retry, split_system
from app.services.llm.factory import get_generator
from app.services.llm.openai_generator import OpenAIGenerator, extract_json


class Verdict(BaseModel):
    """A yes/no verdict."""

    ok: bool
    reason: str = ""


class TestRetryPolicy:
    def test_exponential_delays_double(self):
        policy = RetryPolicy(max_attempts=4, delay_seconds=1.0, backoff="exponential")

        assert [policy.delay_for(i) for i in range(3)] == [1.0, 2.0, 4.0]

    def test_fixed_delays(self):
        policy = RetryPolicy(delay_seconds=0.5, backoff="fixed")

        assert policy.delay_for(0) == 0.5
        assert policy.delay_for(5) == 0.5


class TestCallWithRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        operation = AsyncMock(side_effect=[ValueError("boom"), ValueError("boom"), "ok"])

        with patch("app.services.llm.base.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await call_with_retry(operation, RetryPolicy(max_attempts=3), (ValueError,), "test")

        assert result == "ok"
        assert operation.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_raises_generation_error_when_exhausted(self):
        operation = AsyncMock(side_effect=ValueError("always"))

        with patch("app.services.llm.base.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(GenerationError) as exc_info:
                await call_with_retry(operation, RetryPolicy(max_attempts=2), (ValueError,), "test")

        assert exc_info.value.attempts == 2
        assert exc_info.value.provider == "test"
        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_unlisted_errors_propagate_immediately(self):
        operation = AsyncMock(side_effect=KeyError("nope"))

        with pytest.raises(KeyError):
            await call_with_retry(operation, RetryPolicy(max_attempts=3), (ValueError,), "test")

        assert operation.await_count == 1


class TestSplitSystem:
    def test_lifts_system_messages(self):
        system, rest = split_system(
            [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "Hi"},
            ]
        )

        assert system == "Be brief."
        assert rest == [{"role": "user", "content": "Hi"}]

    def test_no_system(self):
        system, rest = split_system([{"role": "user", "content": "Hi"}])

        assert system is None
        assert len(rest) == 1


def _tool_response(payload: dict) -> SimpleNamespace:
    block = SimpleNamespace(type="tool_use", name=OUTPUT_TOOL_NAME, input=payload)
    return SimpleNamespace(content=[block])


def _text_response(text: str) -> SimpleNamespace:
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class TestAnthropicGenerator:
    def setup_method(self):
        self.client = MagicMock()
        self.client.messages.create = AsyncMock()
        self.generator = AnthropicGenerator(
            api_key="test",
            model="claude-test",
            retry=RetryPolicy(max_attempts=2, delay_seconds=0),
            client=self.client,
        )

    @pytest.mark.asyncio
    async def test_structured_output_uses_forced_tool(self):
        self.client.messages.create.return_value = _tool_response({"ok": True, "reason": "fine"})

        result = await self.generator.generate(
            [{"role": "system", "content": "Judge."}, {"role": "user", "content": "Is it?"}],
            output_model=Verdict,
        )

        assert result == Verdict(ok=True, reason="fine")
        kwargs = self.client.messages.create.await_args.kwargs
        assert kwargs["system"] == "Judge."
        assert kwargs["tool_choice"] == {"type": "tool", "name": OUTPUT_TOOL_NAME}
        assert kwargs["tools"][0]["input_schema"]["properties"]["ok"]["type"] == "boolean"

    @pytest.mark.asyncio
    async def test_free_text(self):
        self.client.messages.create.return_value = _text_response("hello")

        result = await self.generator.generate([{"role": "user", "content": "Hi"}])

        assert result == "hello"
        assert "tools" not in self.client.messages.create.await_args.kwargs

    @pytest.mark.asyncio
    async def test_invalid_output_is_retried_then_fails(self):
        self.client.messages.create.return_value = _tool_response({"reason": "missing ok"})

        with patch("app.services.llm.base.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(GenerationError):
                await self.generator.generate([{"role": "user", "content": "Hi"}], output_model=Verdict)

        assert self.client.messages.create.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_tool_use_is_retried(self):
        self.client.messages.create.side_effect = [
            _text_response("I refuse to use tools"),
            _tool_response({"ok": False}),
        ]

        with patch("app.services.llm.base.asyncio.sleep", new_callable=AsyncMock):
            result = await self.generator.generate([{"role": "user", "content": "Hi"}], output_model=Verdict)

        assert result.ok is False


class TestFactory:
    def test_defaults_to_anthropic(self):
        generator = get_generator(Settings(llm_provider="anthropic", anthropic_api_key="k"))

        assert isinstance(generator, AnthropicGenerator)

    def test_openai_provider(self):
        generator = get_generator(Settings(llm_provider="openai", openai_api_key="k"))

        assert isinstance(generator, OpenAIGenerator)


class TestExtractJson:
    def test_plain_object(self):
        assert extract_json('{"ok": true}') == {"ok": True}

    def test_markdown_fence(self):
        assert extract_json('```json\n{"ok": false}\n```') == {"ok": False}

    def test_object_inside_prose(self):
        assert extract_json('Here you go: {"ok": true, "reason": "x"} hope that helps') == {
            "ok": True,
            "reason": "x",
        }

    def test_no_object_raises(self):
        with pytest.raises(json.JSONDecodeError):
            extract_json("no json here")
