"""Pydantic schemas for analysis progress events.

The pipeline publishes one AnalysisProgress after each of its nine
stages and exactly one AnalysisTerminal when it exits, on every path.
SSE consumers render both; background runs simply drop them.
"""

import uuid as uuid_pkg
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

TOTAL_STAGES = 9

AnalysisStage = Literal[
    "fetching_tree",
    "selecting_files",
    "fetching_files",
    "extracting_features",
    "analyzing_structure",
    "detecting_tech_stack",
    "extracting_syntax",
    "summarizing",
    "saving",
]


class AnalysisProgress(BaseModel):
    """Progress update emitted after a pipeline stage finishes."""

    kind: Literal["progress"] = "progress"
    stage: AnalysisStage = Field(description="Stage that just finished")
    step_index: int = Field(ge=1, le=TOTAL_STAGES, description="Stage number (1-9)")
    total_steps: int = Field(default=TOTAL_STAGES, description="Total number of stages")
    message: str = Field(description="Human-readable status, e.g. 'Selected 42 files'")
    degraded: bool = Field(
        default=False,
        description="True when the stage fell back to a default value",
    )


class AnalysisTerminal(BaseModel):
    """Final event of an analysis stream."""

    kind: Literal["terminal"] = "terminal"
    status: Literal["COMPLETED", "FAILED", "IN_PROGRESS"]
    analysis_id: uuid_pkg.UUID | None = None
    message: str | None = None
    error_message: str | None = None


AnalysisEvent = AnalysisProgress | AnalysisTerminal


class AnalyzeResponse(BaseModel):
    """Response for POST /repositories/{id}/analyze."""

    status: Literal["started", "already_analyzing"]
    analysis_id: uuid_pkg.UUID
    message: str


class AnalysisStatusResponse(BaseModel):
    status: Literal["NOT_STARTED", "IN_PROGRESS", "COMPLETED", "FAILED"]
    analysis_id: uuid_pkg.UUID | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None
