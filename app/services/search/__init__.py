"""
Code search package.

Module structure:
- service.py: SearchService (intent gating, pipeline, streaming)
- intent.py: IntentClassifier
- patterns.py: PatternGenerator and PatternGenerationError
- matcher.py: ASTMatcher heuristic scoring over stored syntax artifacts
- ranker.py: Ranker (heuristic + model-assisted blend)
- replies.py: summaries and casual/help replies
- text_search.py: simple text search over searchable indexes
- constants.py: suggestion and filter vocabularies
"""

from app.services.search.constants import (
    AVAILABLE_FRAMEWORKS,
    AVAILABLE_LANGUAGES,
    COMPLEXITY_LEVELS,
    SEARCH_SUGGESTIONS,
)
from app.services.search.intent import IntentClassifier
from app.services.search.matcher import ASTMatcher, FileMatches
from app.services.search.patterns import PatternGenerationError, PatternGenerator
from app.services.search.ranker import Ranker, blend_scores
from app.services.search.replies import ReplyWriter
from app.services.search.service import SearchService
from app.services.search.text_search import simple_text_search

__all__ = [
    "SearchService",
    "IntentClassifier",
    "PatternGenerator",
    "PatternGenerationError",
    "ASTMatcher",
    "FileMatches",
    "Ranker",
    "blend_scores",
    "ReplyWriter",
    "simple_text_search",
    "AVAILABLE_FRAMEWORKS",
    "AVAILABLE_LANGUAGES",
    "COMPLEXITY_LEVELS",
    "SEARCH_SUGGESTIONS",
]
