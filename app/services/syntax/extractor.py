"""
Structural extractor: file contents -> FileAST.

The walk is an explicit stack over named nodes. Each node type is looked
up once in a dispatch table built from the language's node table, and
matching nodes go to the typed visitor for their category. A file that
cannot be parsed gets the degraded fallback artifact; it never stops the
other files from being processed.
"""

import logging
from collections.abc import Mapping

from tree_sitter import Node

from app.services.syntax.languages import UNKNOWN_LANGUAGE, detect_language
from app.services.syntax.models import FileAST, LocationMap, fallback_artifact
from app.services.syntax.nodes import (
    BRANCH_TYPES,
    CALL_TYPES,
    COMMENT_TYPES,
    LANGUAGE_NODES,
    LITERAL_TYPES,
    LanguageNodes,
)
from app.services.syntax.registry import ParserRegistry
from app.services.syntax.visitors import (
    ExtractionContext,
    Visitor,
    visit_branch,
    visit_call,
    visit_class,
    visit_comment,
    visit_docstring,
    visit_export,
    visit_function,
    visit_import,
    visit_literal,
    visit_variable,
)

logger = logging.getLogger(__name__)


def build_dispatch(nodes: LanguageNodes) -> dict[str, Visitor]:
    """Map node types to visitors. Later categories never override earlier ones."""
    table: dict[str, Visitor] = {}

    def register(node_types, visitor: Visitor) -> None:
        for node_type in node_types:
            table.setdefault(node_type, visitor)

    register(nodes.functions, visit_function)
    register(nodes.classes, visit_class)
    register(nodes.imports, visit_import)
    register(nodes.exports, visit_export)
    register(nodes.variables, visit_variable)
    register(COMMENT_TYPES, visit_comment)
    register(CALL_TYPES, visit_call)
    register(BRANCH_TYPES, visit_branch)
    register(LITERAL_TYPES, visit_literal)
    if nodes.docstrings:
        register(["expression_statement"], visit_docstring)
    return table


def walk(root: Node, ctx: ExtractionContext, dispatch: Mapping[str, Visitor]) -> None:
    """Visit every named node in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        visitor = dispatch.get(node.type)
        if visitor is not None:
            visitor(node, ctx)
        stack.extend(reversed(node.named_children))


class StructuralExtractor:
    """Produce per-file syntax artifacts using an injected ParserRegistry."""

    def __init__(self, registry: ParserRegistry) -> None:
        self.registry = registry
        self._dispatch = {
            language: build_dispatch(nodes) for language, nodes in LANGUAGE_NODES.items()
        }

    def extract(self, path: str, content: str, language: str | None = None) -> FileAST:
        language = language or detect_language(path)

        if language == UNKNOWN_LANGUAGE or not self.registry.supports(language):
            return fallback_artifact(path, language, content, error="parser unavailable")

        try:
            return self._extract(path, content, language)
        except Exception as e:
            logger.warning(f"Parse failed for {path} ({language}), using fallback: {e}")
            return fallback_artifact(path, language, content, error=str(e)[:200])

    def _extract(self, path: str, content: str, language: str) -> FileAST:
        source = content.encode("utf-8")
        tree = self.registry.parse(language, source)
        if tree is None:
            return fallback_artifact(path, language, content, error="parser unavailable")

        ctx = ExtractionContext(source=source, language=language, nodes=LANGUAGE_NODES[language])
        walk(tree.root_node, ctx, self._dispatch[language])

        dependencies = sorted({imp.source for imp in ctx.imports})

        return FileAST(
            path=path,
            language=language,
            size=len(source),
            parse_success=True,
            has_errors=tree.root_node.has_error,
            functions=ctx.functions,
            classes=ctx.classes,
            imports=ctx.imports,
            exports=ctx.exports,
            variables=ctx.variables,
            comments=ctx.comments,
            calls=ctx.calls,
            control_flow=ctx.control_flow,
            literals=ctx.literals,
            dependencies=dependencies,
            location_map=LocationMap(
                total_lines=len(content.split("\n")),
                total_characters=len(content),
            ),
        )

    def extract_many(self, files: Mapping[str, str | None]) -> list[FileAST]:
        """Extract every file with content and a known language, in input order."""
        artifacts: list[FileAST] = []
        for path, content in files.items():
            if content is None:
                continue
            language = detect_language(path)
            if language == UNKNOWN_LANGUAGE:
                continue
            artifacts.append(self.extract(path, content, language))
        return artifacts
