"""Query gate — decide whether a user message warrants retrieval."""

from __future__ import annotations

import logging
from enum import StrEnum

from contextual_rag.errors import ProviderError
from contextual_rag.llm.base import LLMProvider
from contextual_rag.prompts import CLASSIFY_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class MessageKind(StrEnum):
    """Labels the gate can assign to a user message."""

    QUESTION = "question"
    STATEMENT = "statement"
    OTHER = "other"


class QueryGate:
    """Classifies messages with one constrained completion call."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        system_prompt: str = CLASSIFY_SYSTEM_PROMPT,
    ):
        self.llm_provider = llm_provider
        self.system_prompt = system_prompt

    def classify(self, text: str) -> MessageKind:
        """Return the kind of ``text``.

        Raises:
            ProviderError: The completion call failed or returned a label
                outside ``MessageKind``.
        """
        labels = [kind.value for kind in MessageKind]
        try:
            label = self.llm_provider.classify(text, labels, system=self.system_prompt)
            kind = MessageKind(label)
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(f"Message classification failed: {exc}") from exc

        logger.debug("Classified message as %s", kind)
        return kind

    def should_retrieve(self, text: str) -> bool:
        """True only for questions; any classification failure means False."""
        try:
            return self.classify(text) is MessageKind.QUESTION
        except ProviderError as exc:
            logger.warning("Skipping retrieval, classification failed: %s", exc)
            return False
