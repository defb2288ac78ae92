"""OpenAI embedding provider — text-embedding-3-small/large.

Requires the ``openai`` extra and an API key via ``OPENAI_API_KEY`` env var.
"""

from __future__ import annotations

import logging
from typing import Any

from contextual_rag.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-3-small"

_DIMENSION_MAP = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

# Models that accept a reduced ``dimensions`` argument.
_SHORTENABLE = {"text-embedding-3-small", "text-embedding-3-large"}

BATCH_SIZE = 2048  # OpenAI max inputs per request


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embed text via the OpenAI Embeddings API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        dimension: int | None = None,
        timeout: float = 60.0,
    ):
        try:
            import openai
        except ImportError as exc:
            raise ImportError(
                "openai package required: pip install contextual-rag[openai]"
            ) from exc

        self.model = model
        self._dimension = dimension or _DIMENSION_MAP.get(model, 1536)
        self._client: Any = openai.OpenAI(api_key=api_key, timeout=timeout)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        all_embeddings: list[list[float]] = []
        for i in range(0, len(texts), BATCH_SIZE):
            resp = self._client.embeddings.create(**self._request(texts[i : i + BATCH_SIZE]))
            # The API may return items out of order.
            ordered = sorted(resp.data, key=lambda x: x.index)
            all_embeddings.extend(d.embedding for d in ordered)

        return all_embeddings

    def embed_query(self, query: str) -> list[float]:
        resp = self._client.embeddings.create(**self._request([query]))
        return resp.data[0].embedding

    @property
    def dimension(self) -> int:
        return self._dimension

    def _request(self, batch: list[str]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"model": self.model, "input": batch}
        if self.model in _SHORTENABLE:
            kwargs["dimensions"] = self._dimension
        return kwargs
