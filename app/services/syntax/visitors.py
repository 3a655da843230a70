"""Typed visitor functions, one per element category.

Each visitor receives a tree-sitter node the walker has already
classified, reads only plain strings and line numbers from it, and
appends an element model to the extraction context.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from tree_sitter import Node

from app.services.syntax.models import (
    CallElement,
    ClassElement,
    CommentElement,
    ControlFlowElement,
    ExportElement,
    FunctionElement,
    ImportElement,
    LiteralElement,
    Location,
    VariableElement,
)
from app.services.syntax.nodes import (
    BRANCH_TYPES,
    COMMENT_TYPES,
    TOP_LEVEL_VARIABLE_PARENTS,
    LanguageNodes,
)

MAX_SNIPPET_CHARS = 120
MAX_LITERAL_CHARS = 100
MAX_LITERALS = 200
MAX_CALLS = 500
MAX_CONTROL_FLOW = 500
MAX_VARIABLES = 500

NAME_NODE_TYPES = frozenset(
    {
        "identifier",
        "property_identifier",
        "type_identifier",
        "field_identifier",
        "simple_identifier",
        "constant",
        "name",
        "word",
        "variable_name",
        "qualified_identifier",
        "private_property_identifier",
    }
)

DECLARATOR_TYPES = frozenset(
    {
        "variable_declarator",
        "init_declarator",
        "property_element",
        "const_element",
        "variable_declaration",
    }
)

HERITAGE_EXTENDS = frozenset(
    {
        "class_heritage",
        "extends_clause",
        "superclass",
        "base_list",
        "base_clause",
        "delegation_specifier",
        "delegation_specifiers",
        "inheritance_specifier",
        "extends_type_clause",
    }
)
HERITAGE_IMPLEMENTS = frozenset(
    {"implements_clause", "super_interfaces", "class_interface_clause", "extends_interfaces"}
)
TYPE_NAME_TYPES = NAME_NODE_TYPES | frozenset(
    {
        "qualified_name",
        "scoped_identifier",
        "scoped_type_identifier",
        "member_expression",
        "attribute",
        "user_type",
        "generic_type",
        "nested_identifier",
        "scope_resolution",
        "dotted_name",
    }
)

ASYNC_MODIFIER_TYPES = frozenset({"modifiers", "function_modifiers", "modifier", "modifiers_list"})


@dataclass
class ExtractionContext:
    """Mutable state for one file's walk."""

    source: bytes
    language: str
    nodes: LanguageNodes
    functions: list[FunctionElement] = field(default_factory=list)
    classes: list[ClassElement] = field(default_factory=list)
    imports: list[ImportElement] = field(default_factory=list)
    exports: list[ExportElement] = field(default_factory=list)
    variables: list[VariableElement] = field(default_factory=list)
    comments: list[CommentElement] = field(default_factory=list)
    calls: list[CallElement] = field(default_factory=list)
    control_flow: list[ControlFlowElement] = field(default_factory=list)
    literals: list[LiteralElement] = field(default_factory=list)

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


Visitor = Callable[[Node, ExtractionContext], None]


# ─────────────────────────────────────────────────────────────────────────────
# Node helpers
# ─────────────────────────────────────────────────────────────────────────────


def location_of(node: Node) -> Location:
    return Location(start_line=node.start_point[0] + 1, end_line=node.end_point[0] + 1)


def first_line(text: str, limit: int = MAX_SNIPPET_CHARS) -> str:
    line = text.strip().split("\n", 1)[0].strip()
    return line[:limit]


def strip_quotes(text: str) -> str:
    return text.strip().strip("'\"`<>").strip()


def node_name(node: Node, ctx: ExtractionContext) -> str | None:
    """Best-effort declared name of a node across grammars."""
    named = node.child_by_field_name("name")
    if named is not None:
        if named.type in NAME_NODE_TYPES or named.named_child_count == 0:
            return ctx.text(named)
        return node_name(named, ctx) or ctx.text(named)

    # C-family: name sits at the bottom of a declarator chain
    declarator = node.child_by_field_name("declarator")
    while declarator is not None:
        if declarator.type in NAME_NODE_TYPES:
            return ctx.text(declarator)
        inner = declarator.child_by_field_name("declarator")
        if inner is None:
            for child in declarator.named_children:
                if child.type in NAME_NODE_TYPES:
                    return ctx.text(child)
            break
        declarator = inner

    for child in node.named_children:
        if child.type in NAME_NODE_TYPES:
            return ctx.text(child)
    return None


def _assigned_name(node: Node, ctx: ExtractionContext) -> str | None:
    """Name given to an anonymous function by its surrounding declaration."""
    parent = node.parent
    if parent is None:
        return None
    if parent.type == "variable_declarator":
        return node_name(parent, ctx)
    if parent.type in ("pair", "assignment_expression", "public_field_definition", "field_definition"):
        target = (
            parent.child_by_field_name("key")
            or parent.child_by_field_name("left")
            or parent.child_by_field_name("name")
            or parent.child_by_field_name("property")
        )
        if target is not None:
            return strip_quotes(ctx.text(target))
    return None


def _is_async(node: Node, ctx: ExtractionContext) -> bool:
    for child in node.children:
        if child.type == "async":
            return True
        if child.type in ASYNC_MODIFIER_TYPES and "async" in ctx.text(child).split():
            return True
    return False


def count_branches(node: Node) -> int:
    """Branching and loop constructs anywhere in the node's subtree."""
    count = 0
    stack = list(node.named_children)
    while stack:
        current = stack.pop()
        if current.type in BRANCH_TYPES:
            count += 1
        stack.extend(current.named_children)
    return count


def _type_names(node: Node, ctx: ExtractionContext) -> list[str]:
    """Outermost type-like names below a heritage clause."""
    names: list[str] = []
    stack = list(reversed(node.named_children))
    while stack:
        current = stack.pop()
        if current.type in TYPE_NAME_TYPES:
            names.append(ctx.text(current))
            continue
        stack.extend(reversed(current.named_children))
    return names


def _method_names(class_node: Node, ctx: ExtractionContext) -> list[str]:
    """Function names declared in a class body, not descending into nested classes."""
    body = class_node.child_by_field_name("body")
    if body is None:
        return []
    methods: list[str] = []
    stack = list(reversed(body.named_children))
    while stack:
        current = stack.pop()
        if current.type in ctx.nodes.classes:
            continue
        if current.type in ctx.nodes.functions:
            name = node_name(current, ctx) or _assigned_name(current, ctx)
            if name:
                methods.append(name)
            continue
        stack.extend(reversed(current.named_children))
    return methods


def _declared_names(node: Node, ctx: ExtractionContext) -> list[str]:
    declarators = [child for child in node.named_children if child.type in DECLARATOR_TYPES]
    if declarators:
        names: list[str] = []
        for declarator in declarators:
            nested = _declared_names(declarator, ctx)
            if nested:
                names.extend(nested)
            elif name := node_name(declarator, ctx):
                names.append(name)
        return names

    for field_name in ("name", "left", "pattern", "key"):
        target = node.child_by_field_name(field_name)
        if target is not None:
            return [strip_quotes(ctx.text(target))]

    name = node_name(node, ctx)
    return [name] if name else []


# ─────────────────────────────────────────────────────────────────────────────
# Visitors
# ─────────────────────────────────────────────────────────────────────────────


def visit_function(node: Node, ctx: ExtractionContext) -> None:
    name = node_name(node, ctx) or _assigned_name(node, ctx)
    if not name:
        return  # anonymous callbacks are not declarations

    params: list[str] = []
    params_node = node.child_by_field_name("parameters") or node.child_by_field_name("parameter")
    if params_node is not None:
        if params_node.named_child_count == 0 and params_node.type in NAME_NODE_TYPES:
            params.append(ctx.text(params_node))
        for child in params_node.named_children:
            if child.type not in COMMENT_TYPES:
                params.append(" ".join(ctx.text(child).split())[:60])

    return_type: str | None = None
    for field_name in ("return_type", "result", "returns", "type"):
        type_node = node.child_by_field_name(field_name)
        if type_node is not None:
            return_type = ctx.text(type_node).lstrip(":").strip() or None
            break

    ctx.functions.append(
        FunctionElement(
            name=name,
            snippet=first_line(ctx.text(node)),
            location=location_of(node),
            params=params,
            return_type=return_type,
            is_async=_is_async(node, ctx),
            complexity=1 + count_branches(node),
        )
    )


def visit_class(node: Node, ctx: ExtractionContext) -> None:
    name = node_name(node, ctx)
    if not name:
        return

    kind = ctx.nodes.classes.get(node.type, "class")
    if kind == "type":
        # Go type_spec / Rust type aliases: refine by the declared shape
        shape = node.child_by_field_name("type")
        if shape is not None and shape.type == "interface_type":
            kind = "interface"
        elif shape is not None and shape.type == "struct_type":
            kind = "struct"

    extends_candidates: list[str] = []
    implements: list[str] = []
    superclasses = node.child_by_field_name("superclasses")
    if superclasses is not None:
        extends_candidates.extend(_type_names(superclasses, ctx))
    for child in node.named_children:
        if child.type in HERITAGE_IMPLEMENTS:
            implements.extend(_type_names(child, ctx))
        elif child.type in HERITAGE_EXTENDS:
            # TypeScript nests extends/implements clauses inside class_heritage
            nested_implements = [c for c in child.named_children if c.type in HERITAGE_IMPLEMENTS]
            for nested in nested_implements:
                implements.extend(_type_names(nested, ctx))
            for nested in child.named_children:
                if nested.type in HERITAGE_IMPLEMENTS:
                    continue
                if nested.type in TYPE_NAME_TYPES:
                    extends_candidates.append(ctx.text(nested))
                else:
                    extends_candidates.extend(_type_names(nested, ctx))

    extends = extends_candidates[0] if extends_candidates else None
    implements = extends_candidates[1:] + implements

    ctx.classes.append(
        ClassElement(
            name=name,
            snippet=first_line(ctx.text(node)),
            location=location_of(node),
            kind=kind,
            extends=extends,
            implements=implements,
            methods=_method_names(node, ctx),
        )
    )


def _add_import(node: Node, ctx: ExtractionContext, source: str, names: list[str]) -> None:
    source = strip_quotes(source)
    if not source:
        return
    ctx.imports.append(
        ImportElement(
            name=source,
            snippet=first_line(ctx.text(node)),
            location=location_of(node),
            source=source,
            names=names,
        )
    )


def _last_segment(source: str) -> str:
    return re.split(r"[./\\:]+", strip_quotes(source).rstrip("/.*;"))[-1]


def visit_import(node: Node, ctx: ExtractionContext) -> None:
    if node.type == "import_statement" and ctx.language == "python":
        # `import a, b.c as d` is one element per module
        for child in node.named_children:
            module = child.child_by_field_name("name") if child.type == "aliased_import" else child
            if module is not None:
                text = ctx.text(module)
                _add_import(node, ctx, text, [_last_segment(text)])
        return

    if node.type == "import_from_statement":
        module = node.child_by_field_name("module_name")
        names = [ctx.text(n) for n in node.children_by_field_name("name")]
        if module is not None:
            _add_import(node, ctx, ctx.text(module), names)
        return

    source_node = (
        node.child_by_field_name("source")
        or node.child_by_field_name("path")
        or node.child_by_field_name("argument")
    )
    if source_node is not None and node.type == "import_statement":
        clause = next((c for c in node.named_children if c.type == "import_clause"), None)
        names = _type_names(clause, ctx) if clause is not None else []
        _add_import(node, ctx, ctx.text(source_node), names)
        return

    if source_node is None:
        source_node = next(
            (c for c in node.named_children if c.type not in COMMENT_TYPES),
            None,
        )
    if source_node is None:
        return
    source = ctx.text(source_node)
    _add_import(node, ctx, source, [_last_segment(source)])


def visit_export(node: Node, ctx: ExtractionContext) -> None:
    names: list[str] = []
    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        name = node_name(declaration, ctx)
        if name is None:
            names.extend(_declared_names(declaration, ctx))
        else:
            names.append(name)
    else:
        clause = next((c for c in node.named_children if c.type == "export_clause"), None)
        if clause is not None:
            for specifier in clause.named_children:
                name = node_name(specifier, ctx)
                if name:
                    names.append(name)
        elif any(child.type == "default" for child in node.children):
            names.append("default")

    for name in names:
        ctx.exports.append(
            ExportElement(name=name, snippet=first_line(ctx.text(node)), location=location_of(node))
        )


def visit_variable(node: Node, ctx: ExtractionContext) -> None:
    if len(ctx.variables) >= MAX_VARIABLES:
        return

    allowed_parents = TOP_LEVEL_VARIABLE_PARENTS.get(ctx.language)
    if allowed_parents is not None:
        parent = node.parent
        # Python assignments hang off an expression_statement
        if parent is not None and parent.type == "expression_statement":
            parent = parent.parent
        if parent is None or parent.type not in allowed_parents:
            return
        if ctx.language == "python" and parent.type == "block":
            owner = parent.parent
            if owner is None or owner.type != "class_definition":
                return

    kind = ctx.nodes.variables.get(node.type, "variable")
    if not kind:
        keyword = node.children[0] if node.children else None
        kind = ctx.text(keyword) if keyword is not None and not keyword.is_named else "variable"

    for name in _declared_names(node, ctx):
        if not name:
            continue
        ctx.variables.append(
            VariableElement(
                name=name[:100],
                snippet=first_line(ctx.text(node)),
                location=location_of(node),
                kind=kind,
            )
        )


def visit_comment(node: Node, ctx: ExtractionContext) -> None:
    text = ctx.text(node).strip()
    if not text:
        return
    is_doc = text.startswith(("/**", "///", "//!"))
    ctx.comments.append(
        CommentElement(
            name="",
            snippet=first_line(text),
            location=location_of(node),
            text=text,
            is_doc=is_doc,
        )
    )


def _opens_body(statement: Node) -> bool:
    """True for the first non-comment statement of a module or block."""
    parent = statement.parent
    if parent is None or parent.type not in ("module", "block"):
        return False
    first_statement = next((c for c in parent.named_children if c.type not in COMMENT_TYPES), None)
    return first_statement is not None and first_statement.id == statement.id


def visit_docstring(node: Node, ctx: ExtractionContext) -> None:
    """Python docstrings: a lone string as the first statement of a body."""
    if node.named_child_count != 1 or node.named_children[0].type != "string":
        return
    if _opens_body(node):
        _add_docstring(node, ctx)


def _add_docstring(node: Node, ctx: ExtractionContext) -> None:
    text = ctx.text(node).strip()
    ctx.comments.append(
        CommentElement(
            name="",
            snippet=first_line(text),
            location=location_of(node),
            text=text,
            is_doc=True,
        )
    )


def visit_call(node: Node, ctx: ExtractionContext) -> None:
    callee = (
        node.child_by_field_name("function")
        or node.child_by_field_name("method")
        or node.child_by_field_name("name")
    )
    if callee is None:
        return
    name = " ".join(ctx.text(callee).split())[:100]

    if name in ctx.nodes.import_calls:
        arguments = node.child_by_field_name("arguments")
        argument = arguments.named_children[0] if arguments is not None and arguments.named_children else None
        if argument is not None and argument.type in ("string", "string_literal", "template_string"):
            source = ctx.text(argument)
            _add_import(node, ctx, source, [_last_segment(source)])

    if len(ctx.calls) >= MAX_CALLS:
        return
    ctx.calls.append(CallElement(name=name, snippet=first_line(ctx.text(node)), location=location_of(node)))


def visit_branch(node: Node, ctx: ExtractionContext) -> None:
    if len(ctx.control_flow) >= MAX_CONTROL_FLOW:
        return
    ctx.control_flow.append(ControlFlowElement(kind=node.type, location=location_of(node)))


def visit_literal(node: Node, ctx: ExtractionContext) -> None:
    # Some Python grammars emit docstrings as a bare string directly under the body
    if ctx.nodes.docstrings and node.type == "string" and _opens_body(node):
        _add_docstring(node, ctx)
    if len(ctx.literals) >= MAX_LITERALS:
        return
    ctx.literals.append(
        LiteralElement(
            kind=node.type,
            value=ctx.text(node)[:MAX_LITERAL_CHARS],
            location=location_of(node),
        )
    )
