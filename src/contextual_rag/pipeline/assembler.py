"""Prompt assembler — inject retrieved passages into the outgoing conversation."""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import StrEnum

from contextual_rag.errors import ConfigurationError
from contextual_rag.pipeline.schemas import ConversationMessage
from contextual_rag.prompts import RELEVANT_INFORMATION_HEADER, format_relevant_information
from contextual_rag.retrieval.schemas import RetrievalCandidate

logger = logging.getLogger(__name__)


class ContextPlacement(StrEnum):
    """Where the relevant-information section goes."""

    USER_MESSAGE = "user_message"  # appended to the last user message
    SYSTEM_MESSAGE = "system_message"  # prepended as a new system message


class PromptAssembler:
    """Rewrites a conversation to carry ranked retrieval candidates."""

    def __init__(
        self,
        placement: ContextPlacement | str = ContextPlacement.USER_MESSAGE,
        header: str = RELEVANT_INFORMATION_HEADER,
    ):
        try:
            self.placement = ContextPlacement(placement)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown context placement: {placement!r}") from exc
        self.header = header

    def assemble(
        self,
        conversation: list[ConversationMessage],
        candidates: list[RetrievalCandidate],
    ) -> list[ConversationMessage]:
        """Return ``conversation`` with the candidates' text injected.

        Messages before the last user message are passed through untouched
        and in order. With no candidates the input list itself is returned.
        """
        if not candidates:
            return conversation

        section = format_relevant_information([c.text for c in candidates], header=self.header)

        if self.placement is ContextPlacement.SYSTEM_MESSAGE:
            logger.debug("Prepending system context with %d passages", len(candidates))
            return [ConversationMessage(role="system", content=section), *conversation]

        last_user = self._last_user_index(conversation)
        if last_user is None:
            return conversation

        rewritten = list(conversation)
        rewritten[last_user] = self._append(conversation[last_user], section)
        logger.debug("Appended %d passages to the last user message", len(candidates))
        return rewritten

    @staticmethod
    def _last_user_index(conversation: list[ConversationMessage]) -> int | None:
        for i in range(len(conversation) - 1, -1, -1):
            if conversation[i].role == "user":
                return i
        return None

    @staticmethod
    def _append(message: ConversationMessage, section: str) -> ConversationMessage:
        if isinstance(message.content, str):
            return replace(message, content=f"{message.content}\n\n{section}")
        return replace(message, content=[*message.content, {"type": "text", "text": section}])
