"""
Syntax extraction package.

Module structure:
- registry.py: ParserRegistry, built once at startup and injected
- nodes.py: per-language node tables (which node types are which category)
- visitors.py: typed visitor functions per element category
- extractor.py: StructuralExtractor (walk + fallback)
- aggregate.py: repository-level summary and global patterns
- models.py: FileAST and element models
- languages.py: extension-based language detection
"""

from app.services.syntax.aggregate import build_ast_data, detect_frameworks
from app.services.syntax.extractor import StructuralExtractor
from app.services.syntax.languages import (
    CODE_EXTENSIONS,
    UNKNOWN_LANGUAGE,
    detect_language,
    is_code_file,
)
from app.services.syntax.models import FileAST, fallback_artifact
from app.services.syntax.nodes import INTERFACE_KINDS, SUPPORTED_LANGUAGES
from app.services.syntax.registry import ParserRegistry

__all__ = [
    "StructuralExtractor",
    "ParserRegistry",
    "FileAST",
    "fallback_artifact",
    "build_ast_data",
    "detect_frameworks",
    "detect_language",
    "is_code_file",
    "CODE_EXTENSIONS",
    "UNKNOWN_LANGUAGE",
    "INTERFACE_KINDS",
    "SUPPORTED_LANGUAGES",
]
