"""OpenAI-compatible adapter for the StructuredGenerator protocol.

Structured output asks for a JSON object (the schema is embedded in the
system prompt) and validates the reply with the pydantic model. Setting a
base URL points the adapter at any OpenAI-compatible provider.
"""

import json
import logging
import re
from typing import Any

from openai import APIError, AsyncOpenAI, RateLimitError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.services.llm.base import Message, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)


def extract_json(text: str) -> Any:
    """Parse a JSON object from model output, tolerating markdown fences.

    Raises:
        json.JSONDecodeError: If no JSON object can be recovered
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        lines = stripped.split("\n")[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        stripped = "\n".join(lines)

    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        match = re.search(r"\{.*\}", stripped, re.DOTALL)
        if not match:
            raise
        return json.loads(match.group())


class OpenAIGenerator:
    """StructuredGenerator backed by the Chat Completions API."""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        max_tokens: int = 4000,
        retry: RetryPolicy | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self.max_tokens = max_tokens
        self.retry = retry or RetryPolicy()

    async def generate(
        self,
        messages: list[Message],
        output_model: type[BaseModel] | None = None,
    ) -> Any:
        request_messages: list[dict[str, str]] = [dict(m) for m in messages]
        if output_model is not None:
            schema = json.dumps(output_model.model_json_schema())
            request_messages.insert(
                0,
                {
                    "role": "system",
                    "content": (
                        "Respond with a single JSON object that validates against this "
                        f"JSON schema, and nothing else:\n{schema}"
                    ),
                },
            )

        async def attempt() -> str | BaseModel:
            kwargs: dict[str, Any] = {
                "model": self.model,
                "max_tokens": self.max_tokens,
                "messages": request_messages,
            }
            if output_model is not None:
                kwargs["response_format"] = {"type": "json_object"}

            completion = await self.client.chat.completions.create(**kwargs)
            text = completion.choices[0].message.content or ""

            if output_model is None:
                return text
            return output_model.model_validate(extract_json(text))

        return await call_with_retry(
            attempt,
            self.retry,
            retry_on=(
                RateLimitError,
                APIError,
                PydanticValidationError,
                json.JSONDecodeError,
            ),
            provider=self.provider,
        )
