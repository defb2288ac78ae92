"""Abstract base class for all chunkers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from contextual_rag.chunking.schemas import Chunk
from contextual_rag.documents.schemas import Document


class BaseChunker(ABC):
    """Interface for document chunking strategies."""

    @abstractmethod
    def split(self, document: Document) -> list[Chunk]:
        """Split a document into chunks.

        Args:
            document: The document to split. Its metadata is copied onto
                every chunk.

        Returns:
            Ordered list of ``Chunk`` objects.
        """

    @classmethod
    def strategy_name(cls) -> str:
        """Return human-readable strategy name."""
        return cls.__name__
