"""FAISS vector store — local, zero infrastructure.

Uses an inner-product index over L2-normalised copies of the vectors, so
search scores are cosine similarities. The raw (un-normalised) vectors are
kept next to the metadata because the hybrid retriever rescores candidates
against them and because ``IndexFlatIP`` cannot give them back.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

import numpy as np

from contextual_rag.errors import ConfigurationError, StoreError
from contextual_rag.vectorstore.base import VectorStore
from contextual_rag.vectorstore.schemas import MetadataFilter, SearchResult, VectorRecord

logger = logging.getLogger(__name__)


class FAISSStore(VectorStore):
    """FAISS-backed vector store with metadata filtering."""

    persists_locally = True

    def __init__(self, dimension: int = 768):
        try:
            import faiss
        except ImportError as exc:
            raise ImportError(
                "faiss-cpu required: pip install contextual-rag[faiss]"
            ) from exc

        self._faiss = faiss
        self._dimension = dimension
        self._index = faiss.IndexFlatIP(dimension)
        self._records: list[dict[str, Any]] = []  # position in index -> record
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        for record in records:
            if len(record.embedding) != self._dimension:
                raise ConfigurationError(
                    f"Record {record.id} has {len(record.embedding)}-dim embedding, "
                    f"store expects {self._dimension}"
                )

        vectors = np.array([r.embedding for r in records], dtype=np.float32)
        self._faiss.normalize_L2(vectors)

        with self._lock:
            self._index.add(vectors)
            for record in records:
                self._records.append({
                    "id": record.id,
                    "text": record.text,
                    "embedding": [float(x) for x in record.embedding],
                    "metadata": dict(record.metadata),
                })

        logger.info("FAISSStore added %d records (total: %d)", len(records), self.count())
        return len(records)

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 10,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[SearchResult]:
        if len(query_embedding) != self._dimension:
            raise ConfigurationError(
                f"Query embedding has {len(query_embedding)} dims, store expects {self._dimension}"
            )
        if self._index.ntotal == 0:
            return []

        query_vec = np.array([query_embedding], dtype=np.float32)
        self._faiss.normalize_L2(query_vec)

        # Over-fetch if filtering to ensure enough results after filtering
        fetch_k = top_k * 4 if metadata_filter else top_k
        fetch_k = min(fetch_k, self._index.ntotal)

        with self._lock:
            scores, indices = self._index.search(query_vec, fetch_k)
            records = list(self._records)

        results: list[SearchResult] = []
        for score, idx in zip(scores[0], indices[0], strict=True):
            if idx == -1 or idx >= len(records):
                continue
            record = records[int(idx)]
            if metadata_filter and not metadata_filter.matches(record["metadata"]):
                continue
            results.append(self._to_result(record, float(score)))
            if len(results) >= top_k:
                break

        return results

    def scan(self, metadata_filter: MetadataFilter | None = None) -> list[SearchResult]:
        with self._lock:
            records = list(self._records)
        return [
            self._to_result(r, 0.0)
            for r in records
            if not metadata_filter or metadata_filter.matches(r["metadata"])
        ]

    def count(self) -> int:
        return self._index.ntotal

    def clear(self) -> None:
        with self._lock:
            self._index = self._faiss.IndexFlatIP(self._dimension)
            self._records = []

    def save(self, path: str) -> None:
        """Save FAISS index and records (with raw embeddings) to disk."""
        p = Path(path)
        p.mkdir(parents=True, exist_ok=True)

        with self._lock:
            self._faiss.write_index(self._index, str(p / "index.faiss"))
            with open(p / "records.json", "w", encoding="utf-8") as f:
                json.dump({"dimension": self._dimension, "records": self._records}, f)

        logger.info("FAISSStore saved to %s (%d records)", path, self.count())

    def load(self, path: str) -> None:
        """Load FAISS index and records from disk."""
        p = Path(path)
        try:
            index = self._faiss.read_index(str(p / "index.faiss"))
            with open(p / "records.json", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, RuntimeError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot load FAISSStore from {path}: {exc}") from exc

        if index.d != self._dimension:
            raise ConfigurationError(
                f"Saved index has {index.d}-dim vectors, expected {self._dimension}"
            )
        records = data.get("records", [])
        if len(records) != index.ntotal:
            raise StoreError(
                f"FAISS index has {index.ntotal} vectors but {len(records)} records"
            )

        with self._lock:
            self._index = index
            self._records = records
        logger.info("FAISSStore loaded from %s (%d records)", path, self.count())

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    @staticmethod
    def _to_result(record: dict[str, Any], score: float) -> SearchResult:
        return SearchResult(
            id=record["id"],
            text=record["text"],
            score=score,
            metadata=dict(record["metadata"]),
            embedding=list(record["embedding"]),
        )
