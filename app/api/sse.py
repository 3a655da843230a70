"""Server-sent events framing for progress channels."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from app.schemas.analysis_progress import AnalysisEvent, AnalysisProgress
from app.schemas.search import SearchEvent
from app.services.progress_channel import ProgressChannel

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: str, payload: BaseModel | dict[str, Any]) -> str:
    """Frame one event as `event: <name>\\ndata: <json>\\n\\n`."""
    if isinstance(payload, BaseModel):
        data = payload.model_dump_json()
    else:
        data = json.dumps(payload, default=str)
    return f"event: {event}\ndata: {data}\n\n"


def analysis_event_name(event: AnalysisEvent) -> str:
    if isinstance(event, AnalysisProgress):
        return event.stage
    return event.status.lower()


async def analysis_stream(
    channel: ProgressChannel[AnalysisEvent],
    preamble: list[str] | None = None,
) -> AsyncIterator[str]:
    for frame in preamble or []:
        yield frame
    async for event in channel:
        yield format_sse(analysis_event_name(event), event)


async def search_stream(channel: ProgressChannel[SearchEvent]) -> AsyncIterator[str]:
    async for event in channel:
        yield format_sse(event.stage, event)


def sse_response(frames: AsyncIterator[str]) -> StreamingResponse:
    return StreamingResponse(frames, media_type="text/event-stream", headers=SSE_HEADERS)
