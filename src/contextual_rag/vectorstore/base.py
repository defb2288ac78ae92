"""Abstract base class for vector stores."""

from __future__ import annotations

from abc import ABC, abstractmethod

from contextual_rag.vectorstore.schemas import MetadataFilter, SearchResult, VectorRecord


class VectorStore(ABC):
    """Interface for vector store backends.

    The pipeline treats a store as append-only during ingestion and
    read-only during retrieval. Backends raise ``StoreError`` for failures
    they detect themselves; client library errors propagate unchanged.
    """

    #: True when ``save``/``load`` persist the store to a local path.
    persists_locally: bool = False

    @abstractmethod
    def add(self, records: list[VectorRecord]) -> int:
        """Insert records into the store.

        Args:
            records: Contextual chunks with embeddings.

        Returns:
            Number of records inserted.
        """

    @abstractmethod
    def search(
        self,
        query_embedding: list[float],
        top_k: int = 10,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[SearchResult]:
        """Return the ``top_k`` records nearest to ``query_embedding``.

        Results are sorted by cosine similarity (highest first) and carry the
        stored embedding when the backend can return it.
        """

    @abstractmethod
    def scan(self, metadata_filter: MetadataFilter | None = None) -> list[SearchResult]:
        """Return every record (with embeddings), in insertion order.

        Used for lexical scoring when the backend has no native hybrid
        search. ``score`` is 0.0 for every result.
        """

    @abstractmethod
    def count(self) -> int:
        """Return the number of records in the store."""

    @abstractmethod
    def clear(self) -> None:
        """Delete all records."""

    def save(self, path: str) -> None:
        """Persist the store to disk (optional)."""
        raise NotImplementedError(f"{self.__class__.__name__} does not support save()")

    def load(self, path: str) -> None:
        """Load the store from disk (optional)."""
        raise NotImplementedError(f"{self.__class__.__name__} does not support load()")

    @classmethod
    def store_name(cls) -> str:
        """Return human-readable store name."""
        return cls.__name__
