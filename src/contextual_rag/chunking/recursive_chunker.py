"""Separator-aware character chunker with exact overlap.

Each chunk is cut at the right-most occurrence of the coarsest separator
(paragraph, line, sentence, word) inside a ``chunk_size`` window, falling
back to progressively finer separators and finally to a hard character
cut. The next chunk starts ``chunk_overlap`` characters before the end of
the previous one, so dropping the first ``chunk_overlap`` characters of
every chunk after the first reconstructs the document exactly.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from contextual_rag.chunking.base import BaseChunker
from contextual_rag.chunking.schemas import Chunk
from contextual_rag.documents.schemas import Document
from contextual_rag.errors import ConfigurationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1000
CHUNK_OVERLAP = 200
DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", " ", "")


class RecursiveCharacterChunker(BaseChunker):
    """Split text into overlapping chunks of at most ``chunk_size`` characters."""

    def __init__(
        self,
        chunk_size: int = CHUNK_SIZE,
        chunk_overlap: int = CHUNK_OVERLAP,
        separators: Sequence[str] = DEFAULT_SEPARATORS,
    ):
        for name, value in (("chunk_size", chunk_size), ("chunk_overlap", chunk_overlap)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"{name} must be an integer, got {type(value).__name__} {value!r}"
                )
        if chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0:
            raise ConfigurationError(f"chunk_overlap must be >= 0, got {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ConfigurationError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than "
                f"chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = tuple(separators)

    def split(self, document: Document) -> list[Chunk]:
        document.validate()
        text = document.text
        if not text:
            return []

        spans = self._spans(text)
        total = len(spans)
        chunks = [
            Chunk(
                text=text[start:end],
                metadata=dict(document.metadata),
                chunk_index=i,
                total_chunks=total,
                start=start,
                end=end,
            )
            for i, (start, end) in enumerate(spans)
        ]

        logger.info(
            "RecursiveCharacterChunker produced %d chunks from %d chars",
            total, len(text),
        )
        return chunks

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _spans(self, text: str) -> list[tuple[int, int]]:
        spans: list[tuple[int, int]] = []
        start = 0
        length = len(text)

        while length - start > self.chunk_size:
            window = text[start : start + self.chunk_size]
            end = start + self._cut(window, self.separators)
            spans.append((start, end))
            start = end - self.chunk_overlap

        spans.append((start, length))
        return spans

    def _cut(self, window: str, separators: Sequence[str]) -> int:
        """Return how many characters of ``window`` the chunk keeps.

        A separator only qualifies if the cut lands past the overlap (so the
        next chunk advances) and fills at least half of the window.
        """
        if not separators or separators[0] == "":
            return len(window)

        sep = separators[0]
        idx = window.rfind(sep)
        if idx != -1:
            cut = idx + len(sep)
            if cut > max(self.chunk_overlap, len(window) // 2):
                return cut

        return self._cut(window, separators[1:])
