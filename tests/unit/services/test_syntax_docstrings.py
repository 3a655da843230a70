"""Unit tests for Python docstring detection across grammar tree shapes.

Hand-built nodes stand in for tree-sitter output, so both the
`expression_statement > string` and the bare `string` shapes are covered
regardless of which grammar version is installed.
"""

from types import SimpleNamespace

from app.services.syntax.nodes import LANGUAGE_NODES
from app.services.syntax.visitors import ExtractionContext, visit_docstring, visit_literal

SOURCE = b'"""Module doc."""\nimport os\n'
DOC_END = len(b'"""Module doc."""')


def _node(node_type: str, node_id: int, start: int, end: int, children=()) -> SimpleNamespace:
    node = SimpleNamespace(
        type=node_type,
        id=node_id,
        start_byte=start,
        end_byte=end,
        start_point=(0, start),
        end_point=(0, end),
        parent=None,
        named_children=list(children),
    )
    node.named_child_count = len(node.named_children)
    for child in node.named_children:
        child.parent = node
    return node


def _context() -> ExtractionContext:
    return ExtractionContext(source=SOURCE, language="python", nodes=LANGUAGE_NODES["python"])


class TestDocstringShapes:
    def test_bare_string_under_module(self):
        string = _node("string", 2, 0, DOC_END)
        _node("module", 1, 0, len(SOURCE), [string, _node("import_statement", 3, DOC_END + 1, len(SOURCE) - 1)])
        ctx = _context()

        visit_literal(string, ctx)

        assert len(ctx.comments) == 1
        assert ctx.comments[0].is_doc is True
        assert "Module doc." in ctx.comments[0].text
        assert len(ctx.literals) == 1

    def test_wrapped_string_under_module(self):
        string = _node("string", 3, 0, DOC_END)
        statement = _node("expression_statement", 2, 0, DOC_END, [string])
        _node("module", 1, 0, len(SOURCE), [statement])
        ctx = _context()

        visit_docstring(statement, ctx)
        visit_literal(string, ctx)

        assert [c.is_doc for c in ctx.comments] == [True]

    def test_string_after_first_statement_is_not_a_docstring(self):
        string = _node("string", 3, 0, DOC_END)
        _node("module", 1, 0, len(SOURCE), [_node("import_statement", 2, 0, 0), string])
        ctx = _context()

        visit_literal(string, ctx)

        assert ctx.comments == []
        assert len(ctx.literals) == 1

    def test_other_languages_ignore_bare_strings(self):
        string = _node("string", 2, 0, DOC_END)
        _node("module", 1, 0, len(SOURCE), [string])
        ctx = ExtractionContext(source=SOURCE, language="javascript", nodes=LANGUAGE_NODES["javascript"])

        visit_literal(string, ctx)

        assert ctx.comments == []
