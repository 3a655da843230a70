"""Language detection by file extension.

The mapping is fixed; anything not listed is "unknown" and is neither
parsed nor counted as code.
"""

import posixpath

UNKNOWN_LANGUAGE = "unknown"

EXTENSION_LANGUAGES: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "tsx",
    "py": "python",
    "rb": "ruby",
    "go": "go",
    "java": "java",
    "php": "php",
    "cs": "csharp",
    "cpp": "cpp",
    "c": "c",
    "rs": "rust",
    "kt": "kotlin",
    "swift": "swift",
    "json": "json",
}

# Extensions that count as source code (data formats excluded)
CODE_EXTENSIONS: frozenset[str] = frozenset(ext for ext in EXTENSION_LANGUAGES if ext != "json")


def file_extension(path: str) -> str:
    """Lowercased extension without the dot, or "" if there is none."""
    _, ext = posixpath.splitext(path)
    return ext[1:].lower()


def detect_language(path: str) -> str:
    return EXTENSION_LANGUAGES.get(file_extension(path), UNKNOWN_LANGUAGE)


def is_code_file(path: str) -> bool:
    return file_extension(path) in CODE_EXTENSIONS


def display_language(language: str) -> str:
    """Family name used in summaries: tsx is reported as typescript."""
    return "typescript" if language == "tsx" else language
