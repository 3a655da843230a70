"""Structured generation capability and its provider adapters."""

from app.services.llm.anthropic_generator import AnthropicGenerator
from app.services.llm.base import (
    GenerationError,
    Message,
    RetryPolicy,
    StructuredGenerator,
    call_with_retry,
)
from app.services.llm.factory import get_generator
from app.services.llm.openai_generator import OpenAIGenerator

__all__ = [
    "AnthropicGenerator",
    "GenerationError",
    "Message",
    "OpenAIGenerator",
    "RetryPolicy",
    "StructuredGenerator",
    "call_with_retry",
    "get_generator",
]
