"""Data models for retrieval operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from contextual_rag.errors import ConfigurationError
from contextual_rag.vectorstore.schemas import MetadataFilter


class LexicalScope(StrEnum):
    """Which records the BM25 stage scores."""

    VECTOR = "vector"  # the vector-stage candidates only
    SCAN = "scan"  # every record returned by ``VectorStore.scan``


class CandidateOrigin(StrEnum):
    """Stage that first produced a candidate."""

    VECTOR = "vector"
    LEXICAL = "lexical"


@dataclass
class RetrievalConfig:
    """Configuration for a hybrid retrieval operation."""

    vector_k: int = 30
    lexical_k: int = 10
    top_k: int = 20
    lexical_scope: LexicalScope = LexicalScope.VECTOR
    metadata_filter: MetadataFilter | None = None

    def __post_init__(self) -> None:
        if self.vector_k < 1:
            raise ConfigurationError(f"vector_k must be >= 1, got {self.vector_k}")
        if self.lexical_k < 0:
            raise ConfigurationError(f"lexical_k must be >= 0, got {self.lexical_k}")
        if self.top_k < 1:
            raise ConfigurationError(f"top_k must be >= 1, got {self.top_k}")
        try:
            self.lexical_scope = LexicalScope(self.lexical_scope)
        except ValueError as exc:
            raise ConfigurationError(
                f"lexical_scope must be one of {[s.value for s in LexicalScope]}, "
                f"got {self.lexical_scope!r}"
            ) from exc


@dataclass(frozen=True)
class RetrievalCandidate:
    """A passage retrieved for a single query.

    ``score`` is the cosine similarity between the query embedding and the
    candidate's stored embedding (0.0 when no usable embedding was stored).
    """

    id: str
    text: str
    score: float
    origin: CandidateOrigin
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class RetrievalResult:
    """Result of a retrieval operation."""

    query: str
    signal: str = ""
    candidates: list[RetrievalCandidate] = field(default_factory=list)
    vector_hits: int = 0
    lexical_hits: int = 0
    total_candidates: int = 0

    @property
    def texts(self) -> list[str]:
        return [c.text for c in self.candidates]

    def __bool__(self) -> bool:
        return bool(self.candidates)
