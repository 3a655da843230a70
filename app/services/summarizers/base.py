"""
Shared plumbing for the generation-backed summarizers.

A summarizer never raises for a provider or schema failure: it returns a
SummarizerOutcome carrying its named default and `ok=False`, so the
pipeline can report a degraded stage and keep going.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from app.services.llm import GenerationError, Message, StructuredGenerator

logger = logging.getLogger(__name__)

T = TypeVar("T")
ModelT = TypeVar("ModelT", bound=BaseModel)

# Per-file character limit when file contents are inlined into a prompt
MAX_FILE_CHARS = 8000


@dataclass
class SummarizerOutcome(Generic[T]):
    value: T
    ok: bool = True
    error: str | None = None


def fetched_files(files: Mapping[str, str | None]) -> list[tuple[str, str]]:
    """(path, content) pairs for files that were fetched, in input order."""
    return [(path, content) for path, content in files.items() if content]


def format_file(path: str, content: str, limit: int = MAX_FILE_CHARS) -> list[str]:
    lines = [f"### {path}", "```"]
    if len(content) > limit:
        lines.append(content[:limit])
        lines.append(f"\n... (truncated, {len(content)} chars total)")
    else:
        lines.append(content)
    lines.extend(["```", ""])
    return lines


async def generate_or_default(
    generator: StructuredGenerator,
    messages: list[Message],
    output_model: type[ModelT],
    default: ModelT,
    label: str,
) -> SummarizerOutcome[ModelT]:
    """Run one structured generation, substituting `default` on failure."""
    try:
        result = await generator.generate(messages, output_model)
        return SummarizerOutcome(value=result)
    except (GenerationError, ValidationError) as e:
        logger.warning(f"{label} failed, using default: {e}")
        return SummarizerOutcome(value=default, ok=False, error=str(e))
