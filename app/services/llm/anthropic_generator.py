"""Anthropic adapter for the StructuredGenerator protocol.

Structured output uses a single forced tool: the pydantic model's JSON
schema becomes the tool's input schema, and the tool_use input is
validated back into the model.
"""

import logging
from typing import Any, cast

import anthropic
from anthropic import APIError, RateLimitError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.services.llm.base import Message, RetryPolicy, call_with_retry, split_system

logger = logging.getLogger(__name__)

OUTPUT_TOOL_NAME = "save_result"


class MissingToolOutputError(Exception):
    """The model answered without calling the output tool."""


class AnthropicGenerator:
    """StructuredGenerator backed by the Anthropic Messages API."""

    provider = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 4000,
        retry: RetryPolicy | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.retry = retry or RetryPolicy()

    async def generate(
        self,
        messages: list[Message],
        output_model: type[BaseModel] | None = None,
    ) -> Any:
        system, conversation = split_system(messages)

        async def attempt() -> str | BaseModel:
            kwargs: dict[str, Any] = {
                "model": self.model,
                "max_tokens": self.max_tokens,
                "messages": conversation,
            }
            if system:
                kwargs["system"] = system
            if output_model is not None:
                kwargs["tools"] = cast(Any, [self._build_tool_schema(output_model)])
                kwargs["tool_choice"] = cast(Any, {"type": "tool", "name": OUTPUT_TOOL_NAME})

            response = await self.client.messages.create(**kwargs)

            if output_model is None:
                return self._parse_text(response)
            return self._parse_tool_output(response, output_model)

        return await call_with_retry(
            attempt,
            self.retry,
            retry_on=(RateLimitError, APIError, PydanticValidationError, MissingToolOutputError),
            provider=self.provider,
        )

    def _build_tool_schema(self, output_model: type[BaseModel]) -> dict[str, Any]:
        """Build the forced tool definition from the output model."""
        return {
            "name": OUTPUT_TOOL_NAME,
            "description": output_model.__doc__ or f"Return a {output_model.__name__}",
            "input_schema": output_model.model_json_schema(),
        }

    def _parse_text(self, response: anthropic.types.Message) -> str:
        return "".join(block.text for block in response.content if block.type == "text")

    def _parse_tool_output(
        self,
        response: anthropic.types.Message,
        output_model: type[BaseModel],
    ) -> BaseModel:
        for block in response.content:
            if block.type == "tool_use" and block.name == OUTPUT_TOOL_NAME:
                return output_model.model_validate(cast(dict[str, Any], block.input))

        logger.warning(f"Claude did not return a {OUTPUT_TOOL_NAME} tool use")
        raise MissingToolOutputError(f"No {OUTPUT_TOOL_NAME} tool use in response")
