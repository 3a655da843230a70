"""Simple text search over stored searchable indexes (no model calls)."""

from app.models.analysis import Analysis
from app.models.repository import Repository
from app.schemas.search import FileRef, Match, RepositoryRef, SearchResult

KEYWORD_SCORE = 30
FEATURE_SCORE = 40
REPOSITORY_SCORE = 35


def simple_text_search(rows: list[tuple[Repository, Analysis]], query: str) -> list[SearchResult]:
    """Keyword and feature hits per repository; repositories without hits are left out."""
    needle = query.strip().lower()
    if not needle:
        return []

    results: list[SearchResult] = []
    for repository, analysis in rows:
        index = analysis.searchable_content or {}
        matches: list[Match] = []

        for keyword in index.get("keywords") or []:
            lowered = str(keyword).lower()
            if lowered and (needle in lowered or lowered in needle):
                matches.append(
                    Match(
                        type="general",
                        name=keyword,
                        snippet=f"Keyword: {keyword}",
                        score=KEYWORD_SCORE,
                        explanation="Keyword match",
                    )
                )

        for feature in index.get("features") or []:
            name = str(feature.get("name") or "")
            description = str(feature.get("description") or "")
            if needle in name.lower() or needle in description.lower():
                matches.append(
                    Match(
                        type="general",
                        name=name,
                        snippet=description,
                        score=FEATURE_SCORE,
                        explanation="Feature match",
                    )
                )

        if matches:
            results.append(
                SearchResult(
                    repository=RepositoryRef(
                        id=repository.id,
                        full_name=repository.full_name,
                        description=repository.description,
                    ),
                    file=FileRef(path="repository-level", language="metadata"),
                    matches=matches,
                    overall_score=REPOSITORY_SCORE,
                )
            )

    return results
