from app.domain.analysis_operations import analysis_ops
from app.domain.repository_operations import repository_ops

__all__ = [
    "analysis_ops",
    "repository_ops",
]
