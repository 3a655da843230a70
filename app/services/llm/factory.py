"""Adapter selection for the StructuredGenerator capability."""

import logging

from app.config import Settings, settings
from app.services.llm.anthropic_generator import AnthropicGenerator
from app.services.llm.base import RetryPolicy, StructuredGenerator
from app.services.llm.openai_generator import OpenAIGenerator

logger = logging.getLogger(__name__)


def retry_policy_from_settings(config: Settings = settings) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=config.llm_max_retries,
        delay_seconds=config.llm_retry_delay_seconds,
        backoff=config.llm_retry_backoff,
    )


def get_generator(config: Settings = settings) -> StructuredGenerator:
    """Build the generator adapter named by `llm_provider`."""
    retry = retry_policy_from_settings(config)

    if config.llm_provider == "openai":
        logger.debug(f"Using OpenAI-compatible generator ({config.openai_model})")
        return OpenAIGenerator(
            api_key=config.openai_api_key,
            model=config.openai_model,
            base_url=config.openai_base_url,
            max_tokens=config.llm_max_tokens,
            retry=retry,
        )

    logger.debug(f"Using Anthropic generator ({config.anthropic_model})")
    return AnthropicGenerator(
        api_key=config.anthropic_api_key,
        model=config.anthropic_model,
        max_tokens=config.llm_max_tokens,
        retry=retry,
    )
