"""Process-wide parser registry.

Built once at application startup and passed into every
StructuralExtractor. A grammar that fails to load is left out, which makes
files in that language fall back to the degraded artifact.
"""

import logging
import threading
from collections.abc import Iterable

from tree_sitter import Parser, Tree
from tree_sitter_language_pack import get_parser

from app.services.syntax.nodes import LANGUAGE_NODES, SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)


class ParserRegistry:
    """One initialized tree-sitter parser per supported language.

    Parsers are not safe to share between threads, so each language has
    its own lock; extraction runs in worker threads.
    """

    def __init__(self, parsers: dict[str, Parser]) -> None:
        self._parsers = dict(parsers)
        self._locks = {language: threading.Lock() for language in self._parsers}

    @classmethod
    def load(cls, languages: Iterable[str] = SUPPORTED_LANGUAGES) -> "ParserRegistry":
        """Load a parser for each language from tree_sitter_language_pack."""
        parsers: dict[str, Parser] = {}
        for language in languages:
            nodes = LANGUAGE_NODES.get(language)
            if nodes is None:
                logger.warning(f"No node table for language {language!r}, skipping")
                continue
            for grammar in nodes.grammars:
                try:
                    parsers[language] = get_parser(grammar)  # type: ignore[arg-type]
                    break
                except Exception as e:
                    logger.debug(f"Grammar {grammar!r} unavailable for {language}: {e}")
            else:
                logger.warning(f"No tree-sitter grammar could be loaded for {language}")

        logger.info(f"Parser registry ready: {', '.join(sorted(parsers)) or 'no languages'}")
        return cls(parsers)

    @property
    def languages(self) -> list[str]:
        return sorted(self._parsers)

    def supports(self, language: str) -> bool:
        return language in self._parsers

    def parse(self, language: str, source: bytes) -> Tree | None:
        """Parse source bytes, or None if the language has no parser."""
        parser = self._parsers.get(language)
        if parser is None:
            return None
        with self._locks[language]:
            return parser.parse(source)
