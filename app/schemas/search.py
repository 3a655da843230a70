"""Pydantic schemas for code search requests, results and stream events."""

import uuid as uuid_pkg
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

Intent = Literal["code_search", "casual_conversation", "help_request"]
MatchType = Literal["function", "class", "interface", "variable", "import", "comment", "general"]
ResponseType = Literal["code_search", "casual_response", "help_response"]
Complexity = Literal["low", "medium", "high"]

SearchStage = Literal[
    "connected",
    "status",
    "intent",
    "patterns",
    "repositories",
    "raw_results",
    "scored_results",
    "summary",
    "results",
    "complete",
    "error",
]


class SearchFilters(BaseModel):
    languages: list[str] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    complexity: Complexity | None = None


class SearchRequest(BaseModel):
    """Query context for one search request."""

    query: str = Field(min_length=1, max_length=1000)
    repository_ids: list[uuid_pkg.UUID] = Field(default_factory=list)
    filters: SearchFilters = Field(default_factory=SearchFilters)

    @field_validator("query")
    @classmethod
    def _strip_query(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("query must not be blank")
        return stripped


class IntentResult(BaseModel):
    """Classifier verdict on what the user is asking for."""

    intent: Intent = Field(description="code_search, casual_conversation or help_request")
    confidence: int = Field(ge=0, le=100, description="Confidence in the intent, 0-100")
    reasoning: str = Field(description="One sentence explaining the decision")
    suggested_response: str | None = Field(
        default=None,
        description="A short friendly reply, only for casual_conversation",
    )


class SearchPatternSet(BaseModel):
    """Lexical signals used to score syntax elements against a query."""

    search_terms: list[str] = Field(
        default_factory=list,
        description="Identifiers and keywords likely to appear in relevant code",
    )
    file_patterns: list[str] = Field(
        default_factory=list,
        description="Path fragments or globs where relevant code usually lives",
    )
    code_patterns: list[str] = Field(
        default_factory=list,
        description="Code fragments such as call names or decorators",
    )
    framework_hints: list[str] = Field(
        default_factory=list,
        description="Framework or library names related to the query",
    )


class ModelScore(BaseModel):
    """Model-assisted relevance verdict for one file."""

    score: float = Field(ge=0, le=100, description="Relevance of the file to the query, 0-100")
    explanation: str = Field(description="One or two sentences on why the file is relevant")


class Match(BaseModel):
    type: MatchType
    name: str
    snippet: str
    line_start: int = 0
    line_end: int = 0
    score: float = Field(ge=0, le=100)
    explanation: str


class RepositoryRef(BaseModel):
    id: uuid_pkg.UUID
    full_name: str
    description: str | None = None


class FileRef(BaseModel):
    path: str
    language: str
    size: int | None = None


class SearchResult(BaseModel):
    repository: RepositoryRef
    file: FileRef
    matches: list[Match]
    overall_score: float


class SearchResponse(BaseModel):
    query: str
    results: list[SearchResult] = Field(default_factory=list)
    total_found: int = 0
    search_patterns: SearchPatternSet | None = None
    summary: str
    intent: IntentResult
    response_type: ResponseType


class SimpleSearchResponse(BaseModel):
    query: str
    results: list[SearchResult]
    total_found: int


class SearchEvent(BaseModel):
    """One server-sent event of a search stream."""

    stage: SearchStage
    message: str
    data: dict[str, Any] | None = None
    query: str | None = None


class SuggestionsResponse(BaseModel):
    suggestions: list[str]
    query: str = ""


class FiltersResponse(BaseModel):
    languages: list[str]
    frameworks: list[str]
    complexity: list[str]
