"""Ollama embedding provider — local-first, no API keys needed.

Uses the Ollama REST API (http://localhost:11434) with models like
``nomic-embed-text`` or ``mxbai-embed-large``.
"""

from __future__ import annotations

import logging

import httpx

from contextual_rag.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "nomic-embed-text"
DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_DIM = 768


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embed text via a local Ollama server."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        dimension: int = DEFAULT_DIM,
        timeout: float = 60.0,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._dimension = dimension
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout)
        self._batch_supported = True

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts with ``/api/embed`` (Ollama v0.5+).

        Servers that 404 on the batch endpoint are remembered and served
        one text at a time through the legacy ``/api/embeddings`` endpoint.
        """
        if not texts:
            return []

        if self._batch_supported:
            resp = self._client.post(
                "/api/embed",
                json={"model": self.model, "input": texts},
            )
            if resp.status_code != httpx.codes.NOT_FOUND:
                resp.raise_for_status()
                return resp.json()["embeddings"]
            logger.info("Ollama at %s has no /api/embed, using /api/embeddings", self.base_url)
            self._batch_supported = False

        return [self._embed_single(text) for text in texts]

    def embed_query(self, query: str) -> list[float]:
        return self.embed_texts([query])[0]

    @property
    def dimension(self) -> int:
        return self._dimension

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _embed_single(self, text: str) -> list[float]:
        resp = self._client.post(
            "/api/embeddings",
            json={"model": self.model, "prompt": text},
        )
        resp.raise_for_status()
        return resp.json()["embedding"]
