"""Intent classifier: decides whether a query is a code search at all."""

import logging

from pydantic import ValidationError

from app.schemas.search import IntentResult
from app.services.llm import GenerationError, Message, StructuredGenerator

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "\n".join(
    [
        "You classify messages sent to a code search assistant.",
        "",
        "Intents:",
        "- code_search: the user wants to find code, implementations, patterns, files,",
        "  libraries or examples in their repositories",
        "- casual_conversation: greetings, thanks, small talk, or anything unrelated to code",
        "- help_request: questions about how to use this search tool itself",
        "",
        "When a message could plausibly be a code search, classify it as code_search.",
        "Explain the decision in one sentence in `reasoning`.",
        "For casual_conversation, also write a short friendly `suggested_response`",
        "that steers the user toward searching their code.",
    ]
)


class IntentClassifier:
    def __init__(self, generator: StructuredGenerator) -> None:
        self.generator = generator

    async def classify(self, query: str) -> IntentResult:
        """
        Classify a raw query.

        A classification failure is treated as a code search, since that
        is the bias for ambiguous input anyway.
        """
        messages: list[Message] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": f"Message: {query}"},
        ]
        try:
            result = await self.generator.generate(messages, IntentResult)
        except (GenerationError, ValidationError) as e:
            logger.warning(f"Intent classification failed, assuming code_search: {e}")
            return IntentResult(
                intent="code_search",
                confidence=0,
                reasoning="Intent classification was unavailable; treating the query as a code search.",
            )

        logger.info(f"Classified query as {result.intent} ({result.confidence}%)")
        return result
