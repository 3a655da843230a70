# Services package

from app.services.analysis_orchestrator import AnalysisOrchestrator
from app.services.progress_channel import ProgressChannel
from app.services.search import SearchService

__all__ = [
    # Analysis services
    "AnalysisOrchestrator",
    "ProgressChannel",
    # Search services
    "SearchService",
]
