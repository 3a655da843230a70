"""Pydantic schemas for API request/response validation."""

from app.schemas.analysis_progress import (
    TOTAL_STAGES,
    AnalysisEvent,
    AnalysisProgress,
    AnalysisStatusResponse,
    AnalysisTerminal,
    AnalyzeResponse,
)
from app.schemas.repository_analysis import (
    DEFAULT_FEATURES,
    DEFAULT_STRUCTURE,
    DEFAULT_TECH_STACK,
    CodeMetrics,
    DirectoryInfo,
    Feature,
    FeatureList,
    ProjectStructure,
    SearchableFeature,
    SearchableIndex,
    TechStack,
)
from app.schemas.search import (
    FileRef,
    FiltersResponse,
    IntentResult,
    Match,
    ModelScore,
    RepositoryRef,
    SearchEvent,
    SearchFilters,
    SearchPatternSet,
    SearchRequest,
    SearchResponse,
    SearchResult,
    SimpleSearchResponse,
    SuggestionsResponse,
)

__all__ = [
    "TOTAL_STAGES",
    "AnalysisEvent",
    "AnalysisProgress",
    "AnalysisStatusResponse",
    "AnalysisTerminal",
    "AnalyzeResponse",
    "DEFAULT_FEATURES",
    "DEFAULT_STRUCTURE",
    "DEFAULT_TECH_STACK",
    "CodeMetrics",
    "DirectoryInfo",
    "Feature",
    "FeatureList",
    "ProjectStructure",
    "SearchableFeature",
    "SearchableIndex",
    "TechStack",
    "FileRef",
    "FiltersResponse",
    "IntentResult",
    "Match",
    "ModelScore",
    "RepositoryRef",
    "SearchEvent",
    "SearchFilters",
    "SearchPatternSet",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
    "SimpleSearchResponse",
    "SuggestionsResponse",
]
