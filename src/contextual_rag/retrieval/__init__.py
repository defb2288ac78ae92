"""Retrieval — hybrid dense + BM25 search with cosine re-ranking."""

from contextual_rag.retrieval.hybrid import HybridRetriever
from contextual_rag.retrieval.schemas import (
    CandidateOrigin,
    LexicalScope,
    RetrievalCandidate,
    RetrievalConfig,
    RetrievalResult,
)

__all__ = [
    "CandidateOrigin",
    "HybridRetriever",
    "LexicalScope",
    "RetrievalCandidate",
    "RetrievalConfig",
    "RetrievalResult",
]
