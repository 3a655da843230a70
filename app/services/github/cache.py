"""
TTL caching for GitHub API responses.

Trees change with every push but are stable within one analysis run;
language breakdowns and repository metadata change rarely.
"""

import hashlib
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

tree_cache: TTLCache[str, Any] = TTLCache(maxsize=100, ttl=300)  # 5 min
languages_cache: TTLCache[str, Any] = TTLCache(maxsize=200, ttl=3600)  # 1 hour
repo_details_cache: TTLCache[str, Any] = TTLCache(maxsize=200, ttl=600)  # 10 min


def _make_cache_key(func_name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    """Key on function name and arguments, skipping the bound instance."""
    cache_args = args[1:] if args else ()
    key_data = f"{func_name}:{cache_args}:{sorted(kwargs.items())}"
    return hashlib.md5(key_data.encode()).hexdigest()


def cached_github_call(
    cache: TTLCache[str, Any],
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Cache the result of an async GitHub read method in `cache`.

    Exceptions are not cached; a failed call is retried on the next request.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            key = _make_cache_key(func.__name__, args, kwargs)

            if key in cache:
                logger.debug(f"Cache HIT: {func.__name__}")
                cached_result: T = cache[key]
                return cached_result

            logger.debug(f"Cache MISS: {func.__name__}")
            result = await func(*args, **kwargs)
            cache[key] = result
            return result

        return wrapper

    return decorator


def clear_all_caches() -> None:
    """Clear all GitHub caches."""
    tree_cache.clear()
    languages_cache.clear()
    repo_details_cache.clear()
    logger.debug("Cleared all GitHub caches")
