"""
Structured generation capability.

Every caller (summarizers, intent classifier, pattern generator, ranker)
depends on the StructuredGenerator protocol only. Concrete adapters live
beside this module and are picked by settings in `factory.get_generator`.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal, Protocol, TypedDict, TypeVar, overload

from pydantic import BaseModel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
T = TypeVar("T")


class Message(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


class GenerationError(Exception):
    """The provider failed to produce a valid result after all attempts.

    Distinct from an empty-but-valid result, which is returned normally.
    """

    def __init__(self, message: str, provider: str = "", attempts: int = 0):
        self.message = message
        self.provider = provider
        self.attempts = attempts
        super().__init__(message)


class StructuredGenerator(Protocol):
    """Generate free text, or an object validated against a pydantic model."""

    @overload
    async def generate(self, messages: list[Message], output_model: None = None) -> str: ...

    @overload
    async def generate(self, messages: list[Message], output_model: type[ModelT]) -> ModelT: ...

    async def generate(
        self,
        messages: list[Message],
        output_model: type[BaseModel] | None = None,
    ) -> str | BaseModel: ...


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded attempts with fixed or doubling delays between them."""

    max_attempts: int = 3
    delay_seconds: float = 1.0
    backoff: Literal["fixed", "exponential"] = "exponential"

    def delay_for(self, attempt: int) -> float:
        """Delay after the given zero-based failed attempt."""
        if self.backoff == "exponential":
            return self.delay_seconds * (2**attempt)
        return self.delay_seconds


def split_system(messages: list[Message]) -> tuple[str | None, list[Message]]:
    """Lift system messages out for providers that take them separately."""
    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    rest = [m for m in messages if m["role"] != "system"]
    return ("\n\n".join(system_parts) if system_parts else None), rest


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    retry_on: tuple[type[Exception], ...],
    provider: str,
) -> T:
    """Run `operation` until it succeeds or the policy's attempts run out.

    Raises:
        GenerationError: After the final failed attempt
    """
    last_error: Exception | None = None
    attempts = max(1, policy.max_attempts)

    for attempt in range(attempts):
        try:
            return await operation()
        except retry_on as e:
            last_error = e
            if attempt < attempts - 1:
                delay = policy.delay_for(attempt)
                logger.warning(
                    f"{provider} generation error (attempt {attempt + 1}/{attempts}), "
                    f"retrying in {delay}s: {e}"
                )
                await asyncio.sleep(delay)
            else:
                logger.error(f"{provider} generation failed after {attempts} attempts: {e}")

    raise GenerationError(
        f"{provider} generation failed after {attempts} attempts: {last_error}",
        provider=provider,
        attempts=attempts,
    ) from last_error
