"""Repository-level roll-up of per-file syntax artifacts.

The result is stored as the analysis `ast_data` column and is what the
search matcher scans.
"""

import re
from typing import Any

from app.services.syntax.languages import display_language
from app.services.syntax.models import FileAST
from app.services.syntax.nodes import INTERFACE_KINDS

MAX_PATTERN_ITEMS = 100

# Root package name -> framework
FRAMEWORK_IMPORTS: dict[str, str] = {
    "next": "Next.js",
    "react": "React",
    "react-dom": "React",
    "@nestjs": "NestJS",
    "express": "Express",
    "fastapi": "FastAPI",
    "django": "Django",
    "flask": "Flask",
    "vue": "Vue",
}

API_NAME_HINTS = ("api", "route", "handler")
DB_CALL_HINTS = ("find", "create", "update", "delete", "save", "query")
REACT_HOOK = re.compile(r"^use[A-Z]")


def import_root(source: str) -> str:
    """Package root of an import source: '@nestjs/core' -> '@nestjs', 'django.db' -> 'django'."""
    return re.split(r"[/.]", source, maxsplit=1)[0] if not source.startswith("@") else source.split("/")[0]


def is_relative_import(source: str) -> bool:
    return source.startswith((".", "/", "~/"))


def _call_tail(name: str) -> str:
    return re.split(r"[.:>]+", name)[-1]


def detect_frameworks(artifacts: list[FileAST]) -> list[str]:
    found: set[str] = set()
    for artifact in artifacts:
        for imp in artifact.imports:
            framework = FRAMEWORK_IMPORTS.get(import_root(imp.source))
            if framework:
                found.add(framework)
    return sorted(found)


def build_global_patterns(artifacts: list[FileAST]) -> dict[str, list[str]]:
    libraries: set[str] = set()
    api_endpoints: set[str] = set()
    db_operations: set[str] = set()
    patterns: set[str] = set()

    for artifact in artifacts:
        for imp in artifact.imports:
            if not is_relative_import(imp.source):
                libraries.add(imp.source)
        for fn in artifact.functions:
            lowered = fn.name.lower()
            if any(hint in lowered for hint in API_NAME_HINTS):
                api_endpoints.add(fn.name)
            if fn.is_async:
                patterns.add("async")
        for call in artifact.calls:
            tail = _call_tail(call.name)
            if any(hint in tail.lower() for hint in DB_CALL_HINTS):
                db_operations.add(call.name)
            if REACT_HOOK.match(tail):
                patterns.add("react-hooks")
        if artifact.functions:
            patterns.add("functions")
        if artifact.classes:
            patterns.add("classes")

    return {
        "frameworks": detect_frameworks(artifacts),
        "libraries": sorted(libraries)[:MAX_PATTERN_ITEMS],
        "patterns": sorted(patterns),
        "api_endpoints": sorted(api_endpoints)[:MAX_PATTERN_ITEMS],
        "db_operations": sorted(db_operations)[:MAX_PATTERN_ITEMS],
    }


def build_summary(artifacts: list[FileAST]) -> dict[str, Any]:
    functions = sum(len(a.functions) for a in artifacts)
    classes = sum(1 for a in artifacts for c in a.classes if c.kind not in INTERFACE_KINDS and c.kind != "type")
    interfaces = sum(1 for a in artifacts for c in a.classes if c.kind in INTERFACE_KINDS)
    types = sum(1 for a in artifacts for c in a.classes if c.kind == "type")
    variables = sum(len(a.variables) for a in artifacts)

    return {
        "total_files": len(artifacts),
        "parsed_files": sum(1 for a in artifacts if a.parse_success),
        "total_declarations": functions + classes + interfaces + types + variables,
        "total_functions": functions,
        "total_classes": classes,
        "total_interfaces": interfaces,
        "total_types": types,
        "total_imports": sum(len(a.imports) for a in artifacts),
        "languages": sorted({display_language(a.language) for a in artifacts}),
    }


def build_ast_data(artifacts: list[FileAST]) -> dict[str, Any]:
    """Plain-data roll-up: files, summary counts and global patterns."""
    return {
        "files": [artifact.to_data() for artifact in artifacts],
        "summary": build_summary(artifacts),
        "global_patterns": build_global_patterns(artifacts),
    }
