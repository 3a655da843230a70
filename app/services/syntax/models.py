"""Syntax artifact models.

Each element category is its own model; a FileAST holds one list per
category. Models only hold strings, ints, bools and nested models, so
`FileAST.to_data()` is always a plain JSON-ready tree with no parser
handles left in it.
"""

from typing import Any

from pydantic import BaseModel, Field


class Location(BaseModel):
    start_line: int
    end_line: int


class SyntaxElement(BaseModel):
    name: str
    snippet: str = ""
    location: Location


class FunctionElement(SyntaxElement):
    params: list[str] = Field(default_factory=list)
    return_type: str | None = None
    is_async: bool = False
    complexity: int = 1


class ClassElement(SyntaxElement):
    kind: str = "class"  # class | interface | struct | enum | trait | protocol | module | type
    extends: str | None = None
    implements: list[str] = Field(default_factory=list)
    methods: list[str] = Field(default_factory=list)


class ImportElement(SyntaxElement):
    source: str
    names: list[str] = Field(default_factory=list)


class ExportElement(SyntaxElement):
    pass


class VariableElement(SyntaxElement):
    kind: str = "variable"


class CommentElement(SyntaxElement):
    text: str
    is_doc: bool = False


class CallElement(SyntaxElement):
    pass


class ControlFlowElement(BaseModel):
    kind: str
    location: Location


class LiteralElement(BaseModel):
    kind: str
    value: str
    location: Location


class LocationMap(BaseModel):
    total_lines: int
    total_characters: int


class FileAST(BaseModel):
    """Per-file structural summary."""

    path: str
    language: str
    size: int
    parse_success: bool
    has_errors: bool = False
    error: str | None = None

    functions: list[FunctionElement] = Field(default_factory=list)
    classes: list[ClassElement] = Field(default_factory=list)
    imports: list[ImportElement] = Field(default_factory=list)
    exports: list[ExportElement] = Field(default_factory=list)
    variables: list[VariableElement] = Field(default_factory=list)
    comments: list[CommentElement] = Field(default_factory=list)
    calls: list[CallElement] = Field(default_factory=list)
    control_flow: list[ControlFlowElement] = Field(default_factory=list)
    literals: list[LiteralElement] = Field(default_factory=list)

    dependencies: list[str] = Field(default_factory=list)
    location_map: LocationMap

    def to_data(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def fallback_artifact(path: str, language: str, content: str, error: str | None = None) -> FileAST:
    """Degraded artifact for a file that could not be parsed."""
    return FileAST(
        path=path,
        language=language,
        size=len(content.encode("utf-8")),
        parse_success=False,
        error=error,
        location_map=LocationMap(
            total_lines=len(content.split("\n")),
            total_characters=len(content),
        ),
    )
