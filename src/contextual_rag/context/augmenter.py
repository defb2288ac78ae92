"""Context augmenter — prefix each chunk with an LLM-written situating context.

A failed or empty context call never fails ingestion: the chunk is kept
verbatim instead.
"""

from __future__ import annotations

import logging

from contextual_rag.chunking.schemas import Chunk, ContextualChunk
from contextual_rag.concurrency import DEFAULT_MAX_WORKERS, DEFAULT_QUEUE_SIZE, bounded_map
from contextual_rag.documents.schemas import Document
from contextual_rag.llm.base import LLMProvider, strip_reasoning
from contextual_rag.prompts import CONTEXT_SYSTEM_PROMPT, build_context_prompt

logger = logging.getLogger(__name__)


class ContextAugmenter:
    """Generates situating context for chunks with bounded parallelism."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        max_workers: int = DEFAULT_MAX_WORKERS,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        system_prompt: str = CONTEXT_SYSTEM_PROMPT,
    ):
        self.llm_provider = llm_provider
        self.max_workers = max_workers
        self.queue_size = queue_size
        self.system_prompt = system_prompt

    def augment(self, document: Document, chunk: Chunk) -> ContextualChunk:
        """Return ``chunk`` with its situating context prepended.

        Args:
            document: The full source document.
            chunk: One chunk of ``document``.

        Returns:
            A ``ContextualChunk`` whose text is ``context + "\\n\\n" + chunk``,
            or the chunk verbatim if context generation failed.
        """
        prompt = build_context_prompt(document.text, chunk.text)
        try:
            reply = self.llm_provider.generate(prompt, system=self.system_prompt)
        except Exception as exc:
            logger.warning(
                "Context generation failed for chunk %d of %s: %s",
                chunk.chunk_index, document.source or "document", exc,
            )
            return ContextualChunk.from_chunk(chunk)

        context = strip_reasoning(reply or "")
        if not context:
            logger.warning(
                "Empty context for chunk %d of %s, keeping chunk verbatim",
                chunk.chunk_index, document.source or "document",
            )
            return ContextualChunk.from_chunk(chunk)

        return ContextualChunk(
            text=f"{context}\n\n{chunk.text}",
            original_text=chunk.text,
            metadata={**chunk.metadata, "context": context},
            chunk_index=chunk.chunk_index,
            total_chunks=chunk.total_chunks,
            context=context,
        )

    def augment_all(self, document: Document, chunks: list[Chunk]) -> list[ContextualChunk]:
        """Augment every chunk of one document; output order matches ``chunks``."""
        contextual = bounded_map(
            lambda chunk: self.augment(document, chunk),
            chunks,
            max_workers=self.max_workers,
            queue_size=self.queue_size,
        )

        failures = sum(1 for c in contextual if not c.has_context)
        logger.info(
            "Augmented %d chunks of %s (%d without context)",
            len(contextual), document.source or "document", failures,
        )
        return contextual
