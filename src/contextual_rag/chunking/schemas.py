"""Data models for chunks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Chunk:
    """A contiguous slice of a document.

    ``start``/``end`` are character offsets into the document text; the
    first ``chunk_overlap`` characters of every chunk after the first repeat
    the tail of the previous chunk.
    """

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)
    chunk_index: int = 0
    total_chunks: int = 0
    start: int = 0
    end: int = 0


@dataclass
class ContextualChunk:
    """A chunk whose text is prefixed with its situating context.

    ``context`` is ``None`` when context generation failed; in that case
    ``text == original_text`` and ``metadata`` has no ``context`` key.
    """

    text: str
    original_text: str
    metadata: dict[str, Any] = field(default_factory=dict)
    chunk_index: int = 0
    total_chunks: int = 0
    context: str | None = None

    @property
    def has_context(self) -> bool:
        return self.context is not None

    @classmethod
    def from_chunk(cls, chunk: Chunk) -> ContextualChunk:
        """Wrap a chunk verbatim, without any context prefix."""
        return cls(
            text=chunk.text,
            original_text=chunk.text,
            metadata=dict(chunk.metadata),
            chunk_index=chunk.chunk_index,
            total_chunks=chunk.total_chunks,
        )
