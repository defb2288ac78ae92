"""Qdrant vector store — production-grade with native metadata filtering.

Requires the ``qdrant`` extra. Supports Qdrant Cloud, local server, on-disk
and in-memory modes. Records are stored as ``{"text", "metadata", "embedding"}``
payloads. A COSINE collection normalizes the indexed vector, so the raw
embedding is kept in the payload and returned for hybrid rescoring.
"""

from __future__ import annotations

import logging
from typing import Any

from contextual_rag.vectorstore.base import VectorStore
from contextual_rag.vectorstore.schemas import MetadataFilter, SearchResult, VectorRecord

logger = logging.getLogger(__name__)

SCROLL_PAGE_SIZE = 256


class QdrantStore(VectorStore):
    """Qdrant-backed vector store."""

    def __init__(
        self,
        collection_name: str = "contextual_chunks",
        dimension: int = 768,
        url: str | None = None,
        api_key: str | None = None,
        path: str | None = None,
    ):
        try:
            from qdrant_client import QdrantClient, models
        except ImportError as exc:
            raise ImportError(
                "qdrant-client required: pip install contextual-rag[qdrant]"
            ) from exc

        self._models = models
        self._collection_name = collection_name
        self._dimension = dimension

        if url:
            self._client = QdrantClient(url=url, api_key=api_key)
        elif path:
            self._client = QdrantClient(path=path)
        else:
            self._client = QdrantClient(":memory:")

        self._ensure_collection()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        points = [
            self._models.PointStruct(
                id=record.id,
                vector=list(record.embedding),
                payload={
                    "text": record.text,
                    "metadata": dict(record.metadata),
                    "embedding": [float(x) for x in record.embedding],
                },
            )
            for record in records
        ]
        # wait=True: the call returns only once every point is persisted.
        self._client.upsert(
            collection_name=self._collection_name,
            points=points,
            wait=True,
        )
        logger.info("QdrantStore added %d records", len(records))
        return len(records)

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 10,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[SearchResult]:
        response = self._client.query_points(
            collection_name=self._collection_name,
            query=list(query_embedding),
            limit=top_k,
            query_filter=self._build_filter(metadata_filter),
            with_payload=True,
            with_vectors=False,
        )
        return [self._to_result(point, point.score) for point in response.points]

    def scan(self, metadata_filter: MetadataFilter | None = None) -> list[SearchResult]:
        results: list[SearchResult] = []
        offset = None
        while True:
            points, offset = self._client.scroll(
                collection_name=self._collection_name,
                scroll_filter=self._build_filter(metadata_filter),
                limit=SCROLL_PAGE_SIZE,
                offset=offset,
                with_payload=True,
                with_vectors=False,
            )
            results.extend(self._to_result(point, 0.0) for point in points)
            if offset is None:
                break
        return results

    def count(self) -> int:
        return self._client.count(collection_name=self._collection_name, exact=True).count

    def clear(self) -> None:
        self._client.delete_collection(self._collection_name)
        self._ensure_collection()

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _ensure_collection(self) -> None:
        if not self._client.collection_exists(self._collection_name):
            self._client.create_collection(
                collection_name=self._collection_name,
                vectors_config=self._models.VectorParams(
                    size=self._dimension,
                    distance=self._models.Distance.COSINE,
                ),
            )
            logger.info(
                "Created Qdrant collection '%s' (dim=%d)", self._collection_name, self._dimension
            )

    def _build_filter(self, metadata_filter: MetadataFilter | None) -> Any:
        if not metadata_filter:
            return None

        conditions = []
        for key, value in metadata_filter.to_dict().items():
            if isinstance(value, (list, tuple, set, frozenset)):
                match = self._models.MatchAny(any=list(value))
            else:
                match = self._models.MatchValue(value=value)
            conditions.append(self._models.FieldCondition(key=f"metadata.{key}", match=match))
        return self._models.Filter(must=conditions)

    @staticmethod
    def _to_result(point: Any, score: float | None) -> SearchResult:
        payload = point.payload or {}
        return SearchResult(
            id=str(point.id),
            text=payload.get("text", ""),
            score=score if score is not None else 0.0,
            metadata=dict(payload.get("metadata") or {}),
            embedding=payload.get("embedding", point.vector),
        )
