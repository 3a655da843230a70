"""
Generation-backed summarizers used by the analysis pipeline.

Each one turns fetched files into a structured claim and falls back to a
named default on failure instead of raising.
"""

from app.services.summarizers.base import SummarizerOutcome
from app.services.summarizers.features import FeatureSummarizer
from app.services.summarizers.overview import OverviewSummarizer, default_overview
from app.services.summarizers.structure import StructureSummarizer, top_level_directories
from app.services.summarizers.tech_stack import TechStackSummarizer

__all__ = [
    "SummarizerOutcome",
    "FeatureSummarizer",
    "StructureSummarizer",
    "TechStackSummarizer",
    "OverviewSummarizer",
    "default_overview",
    "top_level_directories",
]
