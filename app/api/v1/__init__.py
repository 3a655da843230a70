from app.api.v1 import (
    repositories,
    search,
)

__all__ = [
    "repositories",
    "search",
]
