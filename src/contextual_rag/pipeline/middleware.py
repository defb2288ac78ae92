"""Chat middleware — classify → expand → retrieve → assemble.

Sits between a chat handler and the completion provider. When it declines
to act, for whatever reason, the caller gets its own conversation back.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from contextual_rag.errors import ProviderError, ValidationError
from contextual_rag.llm.base import LLMProvider
from contextual_rag.pipeline.assembler import PromptAssembler
from contextual_rag.pipeline.schemas import (
    AugmentOutcome,
    ConversationMessage,
    SkipReason,
    to_messages,
)
from contextual_rag.query.expander import HypotheticalAnswerExpander
from contextual_rag.query.gate import MessageKind, QueryGate
from contextual_rag.retrieval.hybrid import HybridRetriever
from contextual_rag.retrieval.schemas import RetrievalConfig
from contextual_rag.vectorstore.schemas import MetadataFilter

logger = logging.getLogger(__name__)

Conversation = Sequence[ConversationMessage | Mapping[str, Any]]


class RAGMiddleware:
    """Augments the last user turn with retrieved context when it is a question."""

    def __init__(
        self,
        retriever: HybridRetriever,
        gate: QueryGate | None = None,
        expander: HypotheticalAnswerExpander | None = None,
        assembler: PromptAssembler | None = None,
        llm_provider: LLMProvider | None = None,
        retrieval_config: RetrievalConfig | None = None,
    ):
        self.retriever = retriever
        self.gate = gate
        self.expander = expander
        self.assembler = assembler or PromptAssembler()
        self.llm_provider = llm_provider
        self.retrieval_config = retrieval_config or retriever.config

    def transform(
        self,
        conversation: Conversation,
        sources: Sequence[str] | None = None,
    ) -> AugmentOutcome:
        """Run the query path and report what happened.

        Args:
            conversation: Chat messages, oldest first.
            sources: Restrict retrieval to records whose ``source``
                metadata is one of these values.

        Returns:
            An ``AugmentOutcome``; ``applied`` is False together with a
            ``skip_reason`` whenever the conversation is passed through.

        Raises:
            ValidationError: The conversation is empty or malformed.
        """
        if not conversation:
            raise ValidationError("Conversation must contain at least one message")
        messages = to_messages(list(conversation))

        last = messages[-1]
        if last.role != "user":
            return AugmentOutcome.skip(messages, SkipReason.NOT_USER_TURN)
        question = last.text().strip()
        if not question:
            return AugmentOutcome.skip(messages, SkipReason.EMPTY_MESSAGE)

        if self.gate is not None:
            try:
                kind = self.gate.classify(question)
            except ProviderError as exc:
                logger.warning("Passing conversation through, classification failed: %s", exc)
                return AugmentOutcome.skip(messages, SkipReason.CLASSIFICATION_FAILED)
            if kind is not MessageKind.QUESTION:
                logger.debug("Message classified as %s, no retrieval", kind)
                return AugmentOutcome.skip(messages, SkipReason.NOT_A_QUESTION)

        signal = self.expander.expand(question) if self.expander is not None else question

        config = self.retrieval_config
        if sources:
            conditions = config.metadata_filter.to_dict() if config.metadata_filter else {}
            conditions["source"] = list(sources)
            config = replace(config, metadata_filter=MetadataFilter(conditions))

        result = self.retriever.retrieve(question, embedding_signal=signal, config=config)
        if not result:
            return AugmentOutcome.skip(messages, SkipReason.NO_CONTEXT)

        augmented = self.assembler.assemble(messages, result.candidates)
        logger.info("Augmented conversation with %d passages", len(result.candidates))
        return AugmentOutcome(
            conversation=augmented,
            applied=True,
            candidates=list(result.candidates),
        )

    def augment_if_needed(
        self,
        conversation: Conversation,
        sources: Sequence[str] | None = None,
    ) -> list[Any]:
        """Return the conversation, augmented with context when appropriate.

        The return value has the same shape as the input: a list of
        ``ConversationMessage`` objects or of chat-API dicts. Any failure
        other than malformed input returns the input conversation unchanged.
        """
        try:
            outcome = self.transform(conversation, sources=sources)
        except ValidationError:
            raise
        except Exception:
            logger.exception("RAG augmentation failed, passing conversation through")
            return conversation

        if not outcome.applied:
            return conversation
        if all(isinstance(m, ConversationMessage) for m in conversation):
            return outcome.conversation
        return [m.to_dict() for m in outcome.conversation]

    def complete(
        self,
        conversation: Conversation,
        sources: Sequence[str] | None = None,
    ) -> str:
        """Augment the conversation, then hand it to the completion provider."""
        if self.llm_provider is None:
            raise ValidationError("RAGMiddleware.complete requires an llm_provider")
        augmented = self.augment_if_needed(conversation, sources=sources)
        return self.llm_provider.chat([m.to_dict() for m in to_messages(list(augmented))])
