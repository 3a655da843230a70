from app.models.analysis import (
    Analysis,
    AnalysisListItem,
    AnalysisRead,
    AnalysisStatus,
)
from app.models.repository import (
    Repository,
    RepositoryBase,
    RepositoryRead,
    RepositorySave,
)

__all__ = [
    "Analysis",
    "AnalysisListItem",
    "AnalysisRead",
    "AnalysisStatus",
    "Repository",
    "RepositoryBase",
    "RepositoryRead",
    "RepositorySave",
]
