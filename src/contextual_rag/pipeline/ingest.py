"""Ingestion pipeline — documents → chunk → situate → embed → store.

This is the main entry point for adding documents to the vector store.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from contextual_rag.chunking.recursive_chunker import DEFAULT_SEPARATORS, RecursiveCharacterChunker
from contextual_rag.chunking.schemas import ContextualChunk
from contextual_rag.context.augmenter import ContextAugmenter
from contextual_rag.documents.schemas import Document
from contextual_rag.errors import ConfigurationError, IngestionError, ValidationError
from contextual_rag.indexing.indexer import Indexer
from contextual_rag.pipeline.schemas import IngestOptions, IngestResult

logger = logging.getLogger(__name__)


class IngestPipeline:
    """Orchestrates document ingestion: validate → chunk → augment → index.

    ``augmenter`` may be ``None`` to index chunks without situating context.
    """

    def __init__(
        self,
        indexer: Indexer,
        augmenter: ContextAugmenter | None = None,
        separators: Sequence[str] = DEFAULT_SEPARATORS,
        default_options: IngestOptions | None = None,
    ):
        self.indexer = indexer
        self.augmenter = augmenter
        self.separators = tuple(separators)
        self.default_options = default_options or IngestOptions()

    def ingest(
        self,
        documents: Sequence[Document | Mapping[str, Any]],
        options: IngestOptions | Mapping[str, Any] | None = None,
    ) -> IngestResult:
        """Ingest a batch of documents.

        Every document is validated before anything is written, so malformed
        input never leaves a partial batch behind.

        Args:
            documents: ``Document`` objects or ``{"text", "metadata"}`` mappings.
            options: Chunking options; defaults to the pipeline's defaults.

        Returns:
            An ``IngestResult`` with counts, contextual chunks and warnings.

        Raises:
            ValidationError: A document is malformed.
            ConfigurationError: Invalid chunking options, or wrong embedding
                dimensionality before any record was written.
            IngestionError: Embedding or storing failed, or a later document
                hit a configuration error; ``committed`` counts every record
                written during this call.
        """
        if isinstance(documents, (str, bytes, Mapping, Document)):
            raise ValidationError("documents must be a sequence of documents")

        opts = IngestOptions.from_value(options) if options is not None else self.default_options
        chunker = RecursiveCharacterChunker(
            chunk_size=opts.chunk_size,
            chunk_overlap=opts.chunk_overlap,
            separators=self.separators,
        )
        docs = [Document.from_value(d) for d in documents]

        result = IngestResult(documents=len(docs), chunks_created=0, chunks_stored=0)

        for doc in docs:
            label = doc.source or "document"
            chunks = chunker.split(doc)
            if not chunks:
                result.warnings.append(f"{label}: document contains no text")
                continue

            if self.augmenter is not None:
                contextual = self.augmenter.augment_all(doc, chunks)
            else:
                contextual = [ContextualChunk.from_chunk(c) for c in chunks]

            try:
                stored = self.indexer.index(contextual)
            except IngestionError as exc:
                raise IngestionError(
                    str(exc.args[0]) if exc.args else "Indexing failed",
                    stage=exc.stage,
                    committed=result.chunks_stored + exc.committed,
                    source=doc.source,
                ) from exc
            except ConfigurationError as exc:
                if not result.chunks_stored:
                    raise
                raise IngestionError(
                    str(exc), stage="embed", committed=result.chunks_stored, source=doc.source,
                ) from exc

            failures = sum(1 for c in contextual if not c.has_context)
            if self.augmenter is not None and failures:
                result.warnings.append(
                    f"{label}: {failures} of {len(contextual)} chunks stored without context"
                )

            result.chunks_created += len(chunks)
            result.chunks_stored += stored
            result.context_failures += failures if self.augmenter is not None else 0
            result.chunks.extend(contextual)

            logger.info(
                "Ingested %s: %d chunks → %d stored (%d without context)",
                label, len(chunks), stored, failures,
            )

        return result

    def ingest_text(
        self,
        text: str,
        metadata: Mapping[str, Any] | None = None,
        options: IngestOptions | Mapping[str, Any] | None = None,
    ) -> IngestResult:
        """Ingest raw text directly.

        Useful for testing or programmatic ingestion.
        """
        return self.ingest([Document(text=text, metadata=dict(metadata or {}))], options)
