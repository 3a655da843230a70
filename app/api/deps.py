"""API dependencies: database sessions and the shared analysis/search collaborators."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.services.github import GitHubReadOperations, get_source_browser
from app.services.llm import StructuredGenerator, get_generator
from app.services.search import SearchService
from app.services.syntax import ParserRegistry

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_parser_registry(request: Request) -> ParserRegistry:
    """The registry built once in the application lifespan."""
    registry: ParserRegistry | None = getattr(request.app.state, "parsers", None)
    if registry is None:
        registry = ParserRegistry.load()
        request.app.state.parsers = registry
    return registry


def get_structured_generator() -> StructuredGenerator:
    return get_generator()


def get_github_reader() -> GitHubReadOperations:
    return get_source_browser()


def get_search_service(
    generator: StructuredGenerator = Depends(get_structured_generator),
) -> SearchService:
    return SearchService(generator)


Parsers = Annotated[ParserRegistry, Depends(get_parser_registry)]
GitHubReader = Annotated[GitHubReadOperations, Depends(get_github_reader)]
Search = Annotated[SearchService, Depends(get_search_service)]
