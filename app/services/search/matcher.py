"""
AST matcher: heuristic scoring of stored syntax elements against a query.

Works on the plain `ast_data` stored with an analysis. Scores are
additive (so adding a matching term never lowers a score) and clamped to
[0, 100]. Each category has its own inclusion threshold.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from app.schemas.search import FileRef, Match, RepositoryRef, SearchPatternSet
from app.services.syntax.nodes import INTERFACE_KINDS

MAX_SCORE = 100

# An element becomes a match only when its score is strictly above these
FUNCTION_THRESHOLD = 20
CLASS_THRESHOLD = 20
VARIABLE_THRESHOLD = 25
IMPORT_THRESHOLD = 30
COMMENT_THRESHOLD = 15

COMMENT_SNIPPET_CHARS = 100


@dataclass
class FileMatches:
    """Heuristic matches for one file, before ranking."""

    repository: RepositoryRef
    file: FileRef
    matches: list[Match] = field(default_factory=list)

    @property
    def average_score(self) -> float:
        if not self.matches:
            return 0.0
        return sum(m.score for m in self.matches) / len(self.matches)


def _clamp(score: float) -> float:
    return max(0.0, min(float(MAX_SCORE), score))


def _count_hits(text: str, needles: list[str]) -> int:
    return sum(1 for needle in needles if needle and needle.lower() in text)


def _lines(element: dict[str, Any]) -> tuple[int, int]:
    location = element.get("location") or {}
    return location.get("start_line", 0), location.get("end_line", 0)


def score_element(element: dict[str, Any], query: str, patterns: SearchPatternSet) -> float:
    """Score a function, class or variable against the query and patterns."""
    text = json.dumps(element, ensure_ascii=False, default=str).lower()
    name = str(element.get("name") or "").lower()

    score = 0
    if query and query.lower() in name:
        score += 50
    score += 30 * _count_hits(text, patterns.search_terms)
    score += 25 * _count_hits(text, patterns.code_patterns)
    score += 20 * _count_hits(text, patterns.framework_hints)
    return _clamp(score)


def score_import(element: dict[str, Any], query: str, patterns: SearchPatternSet) -> float:
    source = str(element.get("source") or "").lower()

    score = 0
    if query and query.lower() in source:
        score += 60
    score += 40 * _count_hits(source, patterns.framework_hints)
    score += 35 * _count_hits(source, patterns.search_terms)
    return _clamp(score)


def score_comment(element: dict[str, Any], query: str, patterns: SearchPatternSet) -> float:
    text = str(element.get("text") or "").lower()

    score = 0
    if query and query.lower() in text:
        score += 40
    score += 20 * _count_hits(text, patterns.search_terms)
    if element.get("is_doc"):
        score += 10
    return _clamp(score)


def function_snippet(element: dict[str, Any]) -> str:
    params = ", ".join(element.get("params") or [])
    return_type = element.get("return_type")
    suffix = f": {return_type}" if return_type else ""
    return f"{element.get('name') or 'anonymous'}({params}){suffix}"


def class_snippet(element: dict[str, Any]) -> str:
    extends = f" extends {element['extends']}" if element.get("extends") else ""
    implements = element.get("implements") or []
    implements_part = f" implements {', '.join(implements)}" if implements else ""
    return f"class {element.get('name')}{extends}{implements_part}"


def import_snippet(element: dict[str, Any]) -> str:
    names = element.get("names") or []
    imported = "{" + ", ".join(names) + "}" if names else "..."
    return f"import {imported} from '{element.get('source', '')}'"


def comment_snippet(element: dict[str, Any]) -> str:
    text = str(element.get("text") or "")
    if len(text) > COMMENT_SNIPPET_CHARS:
        return text[:COMMENT_SNIPPET_CHARS] + "..."
    return text


class ASTMatcher:
    """Pure scanner over stored syntax artifacts."""

    def match_file(
        self,
        file_ast: dict[str, Any],
        query: str,
        patterns: SearchPatternSet,
    ) -> list[Match]:
        """All matches in one file, highest score first."""
        matches: list[Match] = []

        for fn in file_ast.get("functions") or []:
            score = score_element(fn, query, patterns)
            if score > FUNCTION_THRESHOLD:
                matches.append(
                    self._match(
                        "function",
                        fn.get("name") or "anonymous",
                        function_snippet(fn),
                        fn,
                        score,
                        "Function matches search criteria",
                    )
                )

        for cls in file_ast.get("classes") or []:
            score = score_element(cls, query, patterns)
            if score > CLASS_THRESHOLD:
                match_type = "interface" if cls.get("kind") in INTERFACE_KINDS else "class"
                matches.append(
                    self._match(
                        match_type,
                        cls.get("name") or "anonymous",
                        class_snippet(cls),
                        cls,
                        score,
                        f"{match_type.capitalize()} matches search criteria",
                    )
                )

        for imp in file_ast.get("imports") or []:
            score = score_import(imp, query, patterns)
            if score > IMPORT_THRESHOLD:
                matches.append(
                    self._match(
                        "import",
                        imp.get("source") or "unknown",
                        import_snippet(imp),
                        imp,
                        score,
                        "Import statement relevant to search",
                    )
                )

        for var in file_ast.get("variables") or []:
            score = score_element(var, query, patterns)
            if score > VARIABLE_THRESHOLD:
                matches.append(
                    self._match(
                        "variable",
                        var.get("name") or "anonymous",
                        f"{var.get('kind', 'variable')} {var.get('name')}",
                        var,
                        score,
                        "Variable matches search criteria",
                    )
                )

        for comment in file_ast.get("comments") or []:
            score = score_comment(comment, query, patterns)
            if score > COMMENT_THRESHOLD:
                matches.append(
                    self._match(
                        "comment",
                        "Documentation",
                        comment_snippet(comment),
                        comment,
                        score,
                        "Comment contains relevant information",
                    )
                )

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches

    def match_repository(
        self,
        repository: RepositoryRef,
        ast_data: dict[str, Any],
        query: str,
        patterns: SearchPatternSet,
    ) -> list[FileMatches]:
        """Per-file matches for every file of one repository that has any."""
        results: list[FileMatches] = []
        for file_ast in ast_data.get("files") or []:
            matches = self.match_file(file_ast, query, patterns)
            if matches:
                results.append(
                    FileMatches(
                        repository=repository,
                        file=FileRef(
                            path=file_ast.get("path", ""),
                            language=file_ast.get("language", "unknown"),
                            size=file_ast.get("size"),
                        ),
                        matches=matches,
                    )
                )
        return results

    @staticmethod
    def _match(
        match_type: str,
        name: str,
        snippet: str,
        element: dict[str, Any],
        score: float,
        explanation: str,
    ) -> Match:
        line_start, line_end = _lines(element)
        return Match(
            type=match_type,  # type: ignore[arg-type]
            name=name,
            snippet=snippet,
            line_start=line_start,
            line_end=line_end,
            score=score,
            explanation=explanation,
        )
