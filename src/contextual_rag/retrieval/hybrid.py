"""Hybrid retriever — dense vector search fused with BM25 lexical matches.

1. Embed the retrieval signal (hypothetical answer, or the raw question).
2. Vector stage: ``vector_k`` nearest records.
3. Lexical stage: BM25 against the raw query over the configured universe
   (vector-stage candidates or a full store scan), top ``lexical_k``.
4. Fuse: vector hits then lexical hits, deduplicated by exact text, first
   occurrence kept.
5. Score every unique candidate by cosine similarity between the query
   embedding and its stored embedding; stable sort, truncate to ``top_k``.

Store or embedding failures yield an empty result, never an exception.
"""

from __future__ import annotations

import logging

from contextual_rag.embeddings.base import EmbeddingProvider
from contextual_rag.retrieval.bm25 import bm25_top_n
from contextual_rag.retrieval.schemas import (
    CandidateOrigin,
    LexicalScope,
    RetrievalCandidate,
    RetrievalConfig,
    RetrievalResult,
)
from contextual_rag.retrieval.similarity import cosine_similarity
from contextual_rag.vectorstore.base import VectorStore
from contextual_rag.vectorstore.schemas import SearchResult, parse_embedding

logger = logging.getLogger(__name__)


class HybridRetriever:
    """Orchestrates embedding → vector search → BM25 → fusion → ranking."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        config: RetrievalConfig | None = None,
    ):
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self.config = config or RetrievalConfig()

    def retrieve(
        self,
        query_text: str,
        embedding_signal: str | None = None,
        config: RetrievalConfig | None = None,
    ) -> RetrievalResult:
        """Run hybrid retrieval for one query.

        Args:
            query_text: The raw user question (used for BM25).
            embedding_signal: Text to embed for the vector stage; defaults
                to ``query_text``.
            config: Per-call override of the retriever's configuration.

        Returns:
            A ``RetrievalResult`` with at most ``top_k`` ranked candidates.
        """
        cfg = config or self.config
        signal = embedding_signal or query_text
        empty = RetrievalResult(query=query_text, signal=signal)

        try:
            query_embedding = [float(x) for x in self.embedding_provider.embed_query(signal)]
        except Exception as exc:
            logger.warning("Query embedding failed, no context available: %s", exc)
            return empty

        try:
            vector_hits = self.vector_store.search(
                query_embedding,
                top_k=cfg.vector_k,
                metadata_filter=cfg.metadata_filter,
            )
            if cfg.lexical_scope is LexicalScope.SCAN:
                universe = self.vector_store.scan(cfg.metadata_filter)
            else:
                universe = vector_hits
        except Exception as exc:
            logger.warning("Vector store unavailable, no context available: %s", exc)
            return empty

        lexical_hits = bm25_top_n(query_text, universe, cfg.lexical_k)

        fused = self._fuse(vector_hits, lexical_hits)
        candidates = self._score(query_embedding, fused)
        # list.sort is stable, so equal scores keep fusion order.
        candidates.sort(key=lambda c: c.score, reverse=True)

        logger.info(
            "Retrieved %d candidates (vector=%d, lexical=%d, unique=%d, scope=%s)",
            min(len(candidates), cfg.top_k),
            len(vector_hits),
            len(lexical_hits),
            len(fused),
            cfg.lexical_scope,
        )

        return RetrievalResult(
            query=query_text,
            signal=signal,
            candidates=candidates[: cfg.top_k],
            vector_hits=len(vector_hits),
            lexical_hits=len(lexical_hits),
            total_candidates=len(fused),
        )

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    @staticmethod
    def _fuse(
        vector_hits: list[SearchResult],
        lexical_hits: list[SearchResult],
    ) -> list[tuple[SearchResult, CandidateOrigin]]:
        seen: set[str] = set()
        fused: list[tuple[SearchResult, CandidateOrigin]] = []
        for hits, origin in (
            (vector_hits, CandidateOrigin.VECTOR),
            (lexical_hits, CandidateOrigin.LEXICAL),
        ):
            for hit in hits:
                if hit.text in seen:
                    continue
                seen.add(hit.text)
                fused.append((hit, origin))
        return fused

    @staticmethod
    def _score(
        query_embedding: list[float],
        fused: list[tuple[SearchResult, CandidateOrigin]],
    ) -> list[RetrievalCandidate]:
        candidates: list[RetrievalCandidate] = []
        for hit, origin in fused:
            raw = hit.embedding if hit.embedding is not None else hit.metadata.get("embedding")
            stored = parse_embedding(raw)

            if stored is None:
                score = 0.0
            elif len(stored) != len(query_embedding):
                logger.warning(
                    "Dropping candidate %s: embedding has %d dims, query has %d",
                    hit.id, len(stored), len(query_embedding),
                )
                continue
            else:
                score = cosine_similarity(query_embedding, stored)

            candidates.append(RetrievalCandidate(
                id=hit.id,
                text=hit.text,
                score=score,
                origin=origin,
                metadata={k: v for k, v in hit.metadata.items() if k != "embedding"},
            ))
        return candidates
