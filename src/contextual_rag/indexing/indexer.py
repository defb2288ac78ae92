"""Indexer — embed contextual chunks and append them to the vector store.

Embedding runs in parallel batches; writes happen afterwards, batch by
batch, in chunk order. A record is only built once its embedding exists,
so the store never receives a record without a vector.
"""

from __future__ import annotations

import logging
import uuid

from contextual_rag.chunking.schemas import ContextualChunk
from contextual_rag.concurrency import DEFAULT_MAX_WORKERS, DEFAULT_QUEUE_SIZE, bounded_map
from contextual_rag.embeddings.base import EmbeddingProvider
from contextual_rag.errors import ConfigurationError, IngestionError
from contextual_rag.vectorstore.base import VectorStore
from contextual_rag.vectorstore.schemas import VectorRecord

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 32


class Indexer:
    """Writes ``ContextualChunk`` objects to a ``VectorStore``.

    Re-indexing identical content appends a second record: records have
    random ids and the store has no content-based identity.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_workers: int = DEFAULT_MAX_WORKERS,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ):
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self.batch_size = batch_size
        self.max_workers = max_workers
        self.queue_size = queue_size

    def index(self, chunks: list[ContextualChunk]) -> int:
        """Embed and store ``chunks``.

        Returns:
            Number of records written.

        Raises:
            ConfigurationError: An embedding has the wrong dimensionality.
            IngestionError: Embedding (``stage="embed"``) or writing
                (``stage="store"``) failed; ``committed`` counts the records
                written before the failure.
        """
        if not chunks:
            return 0

        batches = [
            chunks[i : i + self.batch_size] for i in range(0, len(chunks), self.batch_size)
        ]

        try:
            embedded = bounded_map(
                self._embed_batch,
                batches,
                max_workers=self.max_workers,
                queue_size=self.queue_size,
            )
        except ConfigurationError:
            raise
        except Exception as exc:
            raise IngestionError(f"Embedding failed: {exc}", stage="embed", committed=0) from exc

        written = 0
        for records in embedded:
            try:
                written += self.vector_store.add(records)
            except ConfigurationError:
                raise
            except Exception as exc:
                raise IngestionError(
                    f"Store write failed: {exc}", stage="store", committed=written,
                ) from exc

        logger.info("Indexed %d chunks in %d batches", written, len(batches))
        return written

    def _embed_batch(self, batch: list[ContextualChunk]) -> list[VectorRecord]:
        embeddings = self.embedding_provider.embed_texts([c.text for c in batch])
        if len(embeddings) != len(batch):
            raise ValueError(
                f"Embedding provider returned {len(embeddings)} vectors for {len(batch)} texts"
            )

        expected = self.embedding_provider.dimension
        records = []
        for chunk, embedding in zip(batch, embeddings, strict=True):
            if len(embedding) != expected:
                raise ConfigurationError(
                    f"Embedding has {len(embedding)} dimensions, "
                    f"provider is configured for {expected}"
                )
            records.append(VectorRecord(
                id=str(uuid.uuid4()),
                text=chunk.text,
                embedding=[float(x) for x in embedding],
                metadata={
                    **chunk.metadata,
                    "chunk_index": chunk.chunk_index,
                    "total_chunks": chunk.total_chunks,
                },
            ))
        return records
