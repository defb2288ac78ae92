"""Data models for the ingestion trigger and the chat boundary."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from contextual_rag.chunking.schemas import ContextualChunk
from contextual_rag.errors import ValidationError
from contextual_rag.retrieval.schemas import RetrievalCandidate

# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConversationMessage:
    """One chat turn.

    ``content`` is either plain text or a list of content parts in the
    chat-API shape (``{"type": "text", "text": ...}``, images, ...).
    """

    role: str
    content: str | list[dict[str, Any]]

    def text(self) -> str:
        """Plain text of the message; text parts are joined with newlines."""
        if isinstance(self.content, str):
            return self.content
        return "\n".join(
            str(part.get("text", ""))
            for part in self.content
            if isinstance(part, Mapping) and part.get("type") == "text"
        )

    def to_dict(self) -> dict[str, Any]:
        content = self.content if isinstance(self.content, str) else [dict(p) for p in self.content]
        return {"role": self.role, "content": content}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConversationMessage:
        if "role" not in data:
            raise ValidationError("Conversation message is missing 'role'")
        content = data.get("content", "")
        if isinstance(content, str):
            return cls(role=str(data["role"]), content=content)
        if isinstance(content, list):
            return cls(role=str(data["role"]), content=[dict(p) for p in content])
        raise ValidationError(
            f"Message content must be str or a list of parts, got {type(content).__name__}"
        )


def to_messages(conversation: list[Any]) -> list[ConversationMessage]:
    """Coerce chat-API dicts (or messages) into ``ConversationMessage`` objects."""
    return [
        m if isinstance(m, ConversationMessage) else ConversationMessage.from_dict(m)
        for m in conversation
    ]


class SkipReason(StrEnum):
    """Why the middleware returned the conversation unchanged."""

    NOT_USER_TURN = "not_user_turn"
    EMPTY_MESSAGE = "empty_message"
    NOT_A_QUESTION = "not_a_question"
    CLASSIFICATION_FAILED = "classification_failed"
    NO_CONTEXT = "no_context"


@dataclass
class AugmentOutcome:
    """Result of running the chat middleware on one conversation.

    Either ``applied`` with a rewritten ``conversation``, or skipped with a
    ``skip_reason`` and the input conversation returned as-is.
    """

    conversation: list[ConversationMessage]
    applied: bool = False
    skip_reason: SkipReason | None = None
    candidates: list[RetrievalCandidate] = field(default_factory=list)

    @classmethod
    def skip(cls, conversation: list[ConversationMessage], reason: SkipReason) -> AugmentOutcome:
        return cls(conversation=conversation, applied=False, skip_reason=reason)


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@dataclass
class IngestOptions:
    """Chunking options for one ingestion call."""

    chunk_size: int = 1000
    chunk_overlap: int = 200

    @classmethod
    def from_value(cls, value: IngestOptions | Mapping[str, Any] | None) -> IngestOptions:
        if value is None:
            return cls()
        if isinstance(value, IngestOptions):
            return value
        if not isinstance(value, Mapping):
            raise ValidationError(
                f"Ingestion options must be a mapping, got {type(value).__name__}"
            )
        unknown = set(value) - {"chunk_size", "chunk_overlap"}
        if unknown:
            raise ValidationError(f"Unknown ingestion options: {sorted(unknown)}")
        return cls(**value)


@dataclass
class IngestResult:
    """Result of an ingestion call."""

    documents: int
    chunks_created: int
    chunks_stored: int
    context_failures: int = 0
    chunks: list[ContextualChunk] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.chunks_stored == self.chunks_created
