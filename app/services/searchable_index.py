"""Flattened keyword/feature projection used by the simple text search."""

from collections.abc import Iterable

from app.schemas.repository_analysis import (
    Feature,
    ProjectStructure,
    SearchableFeature,
    SearchableIndex,
)
from app.services.syntax.languages import UNKNOWN_LANGUAGE, detect_language


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def build_searchable_index(
    features: list[Feature],
    structure: ProjectStructure,
    paths: Iterable[str],
) -> SearchableIndex:
    keywords = _dedupe(
        [word for feature in features for word in feature.name.lower().split()]
        + list(structure.patterns)
        + [structure.architecture.lower()]
    )
    file_types = sorted({detect_language(path) for path in paths} - {UNKNOWN_LANGUAGE})

    return SearchableIndex(
        features=[
            SearchableFeature(name=f.name, description=f.description, type=f.type) for f in features
        ],
        architecture=structure.architecture,
        patterns=list(structure.patterns),
        directories=[d.path for d in structure.directories],
        keywords=keywords,
        file_types=file_types,
    )
