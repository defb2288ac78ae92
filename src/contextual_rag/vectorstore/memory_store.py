"""In-process vector store — exact cosine search over a numpy matrix.

No external services; suitable for tests, the CLI and small corpora. The
store can be saved to and loaded from a JSON file, which keeps the raw
float vectors so they round-trip exactly.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

import numpy as np

from contextual_rag.errors import ConfigurationError, StoreError
from contextual_rag.vectorstore.base import VectorStore
from contextual_rag.vectorstore.schemas import MetadataFilter, SearchResult, VectorRecord

logger = logging.getLogger(__name__)

_FILENAME = "records.json"


class InMemoryStore(VectorStore):
    """Append-only list of records with brute-force cosine similarity."""

    persists_locally = True

    def __init__(self, dimension: int = 768):
        self._dimension = dimension
        self._records: list[VectorRecord] = []
        self._matrix = np.empty((0, dimension), dtype=np.float64)
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

        vectors = np.array([r.embedding for r in records], dtype=np.float64)
        with self._lock:
            self._matrix = np.vstack([self._matrix, vectors])
            self._records.extend(records)

        logger.info("InMemoryStore added %d records (total: %d)", len(records), self.count())
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

        with self._lock:
            records = list(self._records)
            matrix = self._matrix

        if not records:
            return []

        query = np.asarray(query_embedding, dtype=np.float64)
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        with np.errstate(divide="ignore", invalid="ignore"):
            scores = np.where(norms > 0, matrix @ query / norms, 0.0)

        # Stable sort keeps insertion order among equal scores.
        order = np.argsort(-scores, kind="stable")

        results: list[SearchResult] = []
        for idx in order:
            record = records[int(idx)]
            if metadata_filter and not metadata_filter.matches(record.metadata):
                continue
            results.append(self._to_result(record, float(scores[idx])))
            if len(results) >= top_k:
                break
        return results

    def scan(self, metadata_filter: MetadataFilter | None = None) -> list[SearchResult]:
        with self._lock:
            records = list(self._records)
        return [
            self._to_result(r, 0.0)
            for r in records
            if not metadata_filter or metadata_filter.matches(r.metadata)
        ]

    def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records = []
            self._matrix = np.empty((0, self._dimension), dtype=np.float64)

    def save(self, path: str) -> None:
        """Write all records, including raw embeddings, to ``path/records.json``."""
        p = Path(path)
        p.mkdir(parents=True, exist_ok=True)

        with self._lock:
            payload = {
                "dimension": self._dimension,
                "records": [
                    {
                        "id": r.id,
                        "text": r.text,
                        "embedding": list(r.embedding),
                        "metadata": r.metadata,
                    }
                    for r in self._records
                ],
            }

        with open(p / _FILENAME, "w", encoding="utf-8") as fh:
            json.dump(payload, fh)
        logger.info("InMemoryStore saved to %s (%d records)", path, self.count())

    def load(self, path: str) -> None:
        """Replace the store contents with ``path/records.json``."""
        file = Path(path) / _FILENAME
        try:
            with open(file, encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot load InMemoryStore from {file}: {exc}") from exc

        dimension = payload.get("dimension", self._dimension)
        if dimension != self._dimension:
            raise ConfigurationError(
                f"Saved store has {dimension}-dim embeddings, expected {self._dimension}"
            )

        records = [
            VectorRecord(
                id=item["id"],
                text=item["text"],
                embedding=item["embedding"],
                metadata=item.get("metadata", {}),
            )
            for item in payload.get("records", [])
        ]
        self.clear()
        self.add(records)
        logger.info("InMemoryStore loaded from %s (%d records)", path, self.count())

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    @staticmethod
    def _to_result(record: VectorRecord, score: float) -> SearchResult:
        return SearchResult(
            id=record.id,
            text=record.text,
            score=score,
            metadata=dict(record.metadata),
            embedding=list(record.embedding),
        )
