"""Pydantic schemas for the structured claims produced during analysis.

These models double as generator output schemas: the summarizers pass
them to the StructuredGenerator, which validates the provider's reply
against them.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

FeatureType = Literal["authentication", "api", "database", "ui", "testing", "deployment", "other"]
FEATURE_TYPES: tuple[str, ...] = ("authentication", "api", "database", "ui", "testing", "deployment", "other")


class Feature(BaseModel):
    """A user-facing capability of the repository."""

    name: str = Field(description="Short feature name, e.g. 'OAuth login'")
    description: str = Field(description="One or two sentences on what the feature does")
    files: list[str] = Field(default_factory=list, description="Paths implementing the feature")
    type: FeatureType = Field(default="other", description="Feature category")
    implementation: str = Field(default="", description="How the feature is implemented")
    dependencies: list[str] = Field(default_factory=list, description="Libraries the feature relies on")

    @field_validator("type", mode="before")
    @classmethod
    def _unknown_type_is_other(cls, value: Any) -> Any:
        if isinstance(value, str) and value.lower() in FEATURE_TYPES:
            return value.lower()
        return "other"


class FeatureList(BaseModel):
    """Features identified in the repository."""

    features: list[Feature] = Field(default_factory=list)


class DirectoryInfo(BaseModel):
    path: str
    purpose: str = ""
    importance: Literal["high", "medium", "low"] = "medium"

    @field_validator("importance", mode="before")
    @classmethod
    def _normalize_importance(cls, value: Any) -> Any:
        if isinstance(value, str) and value.lower() in ("high", "medium", "low"):
            return value.lower()
        return "medium"


class ProjectStructure(BaseModel):
    """How the repository is organized."""

    architecture: str = Field(default="unknown", description="e.g. 'monolith', 'microservices', 'mvc'")
    patterns: list[str] = Field(default_factory=list, description="Design patterns in use")
    directories: list[DirectoryInfo] = Field(default_factory=list)
    entry_points: list[str] = Field(default_factory=list)
    config_files: list[str] = Field(default_factory=list)


class TechStack(BaseModel):
    """Technologies the repository is built with."""

    frontend: list[str] = Field(default_factory=list)
    backend: list[str] = Field(default_factory=list)
    database: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)


class CodeMetrics(BaseModel):
    total_files: int
    code_files: int
    lines_of_code: int
    complexity: Literal["low", "medium", "high"]
    maintainability: float
    languages: list[str] = Field(default_factory=list)


class SearchableFeature(BaseModel):
    name: str
    description: str
    type: str


class SearchableIndex(BaseModel):
    """Flattened projection of features/structure for the fallback text search."""

    features: list[SearchableFeature] = Field(default_factory=list)
    architecture: str = "unknown"
    patterns: list[str] = Field(default_factory=list)
    directories: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    file_types: list[str] = Field(default_factory=list)


DEFAULT_FEATURES: list[Feature] = []
DEFAULT_STRUCTURE = ProjectStructure()
DEFAULT_TECH_STACK = TechStack()
