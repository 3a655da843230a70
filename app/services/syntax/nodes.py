"""Per-language tree-sitter node tables.

Each supported language maps its grammar's node types onto the element
categories the extractor knows about. Categories whose node names are the
same across grammars (comments, branches, literals, calls) are shared.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LanguageNodes:
    """Node types of one grammar, grouped by element category."""

    # Names to try with tree_sitter_language_pack.get_parser, in order
    grammars: tuple[str, ...]
    functions: frozenset[str] = frozenset()
    # node type -> class kind
    classes: dict[str, str] = field(default_factory=dict)
    imports: frozenset[str] = frozenset()
    exports: frozenset[str] = frozenset()
    # node type -> variable kind ("" means: use the declaration keyword)
    variables: dict[str, str] = field(default_factory=dict)
    # Call names that behave like imports (require, require_relative)
    import_calls: frozenset[str] = frozenset()
    # Python-style docstrings (first string statement of a body)
    docstrings: bool = False


COMMENT_TYPES: frozenset[str] = frozenset(
    {"comment", "line_comment", "block_comment", "multiline_comment"}
)

CALL_TYPES: frozenset[str] = frozenset(
    {
        "call",
        "call_expression",
        "method_invocation",
        "invocation_expression",
        "function_call_expression",
        "member_call_expression",
        "scoped_call_expression",
    }
)

BRANCH_TYPES: frozenset[str] = frozenset(
    {
        # conditionals
        "if_statement",
        "if_expression",
        "elif_clause",
        "else_if_clause",
        "if",
        "elsif",
        "unless",
        "guard_statement",
        "conditional_expression",
        "ternary_expression",
        "conditional",
        # loops
        "for_statement",
        "for_in_statement",
        "enhanced_for_statement",
        "foreach_statement",
        "for_each_statement",
        "for_range_loop",
        "for_expression",
        "while_statement",
        "while_expression",
        "do_statement",
        "do_while_statement",
        "repeat_while_statement",
        "loop_expression",
        "while",
        "until",
        "for",
        "for_in_clause",
        # cases and handlers
        "case_clause",
        "switch_case",
        "switch_label",
        "switch_section",
        "switch_entry",
        "case_statement",
        "expression_case",
        "type_case",
        "communication_case",
        "match_arm",
        "when_entry",
        "when",
        "except_clause",
        "catch_clause",
        "catch_block",
        "rescue",
    }
)

LITERAL_TYPES: frozenset[str] = frozenset(
    {
        "string",
        "string_literal",
        "template_string",
        "interpreted_string_literal",
        "raw_string_literal",
        "encapsed_string",
        "char_literal",
        "character_literal",
        "number",
        "integer",
        "float",
        "integer_literal",
        "float_literal",
        "decimal_integer_literal",
        "decimal_floating_point_literal",
        "real_literal",
        "int_literal",
        "true",
        "false",
        "boolean_literal",
        "null",
        "none",
        "nil",
    }
)

_JS_FUNCTIONS = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "method_definition",
        "arrow_function",
        "function_expression",
        "function",
    }
)
_JS_VARIABLES = {"lexical_declaration": "", "variable_declaration": ""}

_TS_CLASSES = {
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "interface_declaration": "interface",
    "type_alias_declaration": "type",
    "enum_declaration": "enum",
}

LANGUAGE_NODES: dict[str, LanguageNodes] = {
    "python": LanguageNodes(
        grammars=("python",),
        functions=frozenset({"function_definition"}),
        classes={"class_definition": "class"},
        imports=frozenset({"import_statement", "import_from_statement"}),
        variables={"assignment": "assignment"},
        docstrings=True,
    ),
    "javascript": LanguageNodes(
        grammars=("javascript",),
        functions=_JS_FUNCTIONS,
        classes={"class_declaration": "class", "class": "class"},
        imports=frozenset({"import_statement"}),
        exports=frozenset({"export_statement"}),
        variables=_JS_VARIABLES,
        import_calls=frozenset({"require"}),
    ),
    "typescript": LanguageNodes(
        grammars=("typescript",),
        functions=_JS_FUNCTIONS,
        classes=_TS_CLASSES,
        imports=frozenset({"import_statement"}),
        exports=frozenset({"export_statement"}),
        variables=_JS_VARIABLES,
        import_calls=frozenset({"require"}),
    ),
    "tsx": LanguageNodes(
        grammars=("tsx",),
        functions=_JS_FUNCTIONS,
        classes=_TS_CLASSES,
        imports=frozenset({"import_statement"}),
        exports=frozenset({"export_statement"}),
        variables=_JS_VARIABLES,
        import_calls=frozenset({"require"}),
    ),
    "go": LanguageNodes(
        grammars=("go",),
        functions=frozenset({"function_declaration", "method_declaration"}),
        classes={"type_spec": "type"},
        imports=frozenset({"import_spec"}),
        variables={"var_spec": "var", "const_spec": "const"},
    ),
    "rust": LanguageNodes(
        grammars=("rust",),
        functions=frozenset({"function_item", "function_signature_item"}),
        classes={
            "struct_item": "struct",
            "enum_item": "enum",
            "trait_item": "trait",
            "type_item": "type",
        },
        imports=frozenset({"use_declaration"}),
        variables={"let_declaration": "let", "const_item": "const", "static_item": "static"},
    ),
    "java": LanguageNodes(
        grammars=("java",),
        functions=frozenset({"method_declaration", "constructor_declaration"}),
        classes={
            "class_declaration": "class",
            "interface_declaration": "interface",
            "enum_declaration": "enum",
            "record_declaration": "class",
        },
        imports=frozenset({"import_declaration"}),
        variables={"field_declaration": "field", "local_variable_declaration": "local"},
    ),
    "ruby": LanguageNodes(
        grammars=("ruby",),
        functions=frozenset({"method", "singleton_method"}),
        classes={"class": "class", "module": "module"},
        variables={"assignment": "assignment"},
        import_calls=frozenset({"require", "require_relative"}),
    ),
    "php": LanguageNodes(
        grammars=("php",),
        functions=frozenset({"function_definition", "method_declaration"}),
        classes={
            "class_declaration": "class",
            "interface_declaration": "interface",
            "trait_declaration": "trait",
            "enum_declaration": "enum",
        },
        imports=frozenset({"namespace_use_declaration"}),
        variables={"property_declaration": "property", "const_declaration": "const"},
    ),
    "csharp": LanguageNodes(
        grammars=("csharp", "c_sharp"),
        functions=frozenset({"method_declaration", "constructor_declaration", "local_function_statement"}),
        classes={
            "class_declaration": "class",
            "interface_declaration": "interface",
            "struct_declaration": "struct",
            "enum_declaration": "enum",
            "record_declaration": "class",
        },
        imports=frozenset({"using_directive"}),
        variables={"field_declaration": "field"},
    ),
    "cpp": LanguageNodes(
        grammars=("cpp",),
        functions=frozenset({"function_definition"}),
        classes={"class_specifier": "class", "struct_specifier": "struct", "enum_specifier": "enum"},
        imports=frozenset({"preproc_include"}),
        variables={"declaration": "declaration"},
    ),
    "c": LanguageNodes(
        grammars=("c",),
        functions=frozenset({"function_definition"}),
        classes={"struct_specifier": "struct", "enum_specifier": "enum"},
        imports=frozenset({"preproc_include"}),
        variables={"declaration": "declaration"},
    ),
    "kotlin": LanguageNodes(
        grammars=("kotlin",),
        functions=frozenset({"function_declaration"}),
        classes={
            "class_declaration": "class",
            "object_declaration": "class",
            "interface_declaration": "interface",
        },
        imports=frozenset({"import_header"}),
        variables={"property_declaration": ""},
    ),
    "swift": LanguageNodes(
        grammars=("swift",),
        functions=frozenset({"function_declaration"}),
        classes={
            "class_declaration": "class",
            "struct_declaration": "struct",
            "protocol_declaration": "protocol",
            "enum_declaration": "enum",
        },
        imports=frozenset({"import_declaration"}),
        variables={"property_declaration": ""},
    ),
    "json": LanguageNodes(
        grammars=("json",),
        variables={"pair": "key"},
    ),
}

SUPPORTED_LANGUAGES: tuple[str, ...] = tuple(LANGUAGE_NODES)

# Class kinds reported as interfaces by search and summaries
INTERFACE_KINDS: frozenset[str] = frozenset({"interface", "protocol", "trait"})

# Top-level-only variables: these node types also appear inside function bodies
TOP_LEVEL_VARIABLE_PARENTS: dict[str, frozenset[str]] = {
    "python": frozenset({"module", "block"}),
    "c": frozenset({"translation_unit"}),
    "cpp": frozenset({"translation_unit", "declaration_list", "field_declaration_list"}),
}
