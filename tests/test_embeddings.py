"""Tests for embedding providers — mocked transports and SDKs, no network calls."""

from __future__ import annotations

import json
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import numpy as np
import pytest
from conftest import MockEmbedder

from contextual_rag.embeddings.base import EmbeddingProvider
from contextual_rag.embeddings.factory import available_providers, get_embedding_provider
from contextual_rag.embeddings.ollama_provider import OllamaEmbeddingProvider

# ---------------------------------------------------------------------------
# Base class tests
# ---------------------------------------------------------------------------


class TestEmbeddingProviderABC:
    def test_cannot_instantiate_base(self):
        with pytest.raises(TypeError):
            EmbeddingProvider()  # type: ignore[abstract]

    def test_provider_name(self):
        assert MockEmbedder.provider_name() == "MockEmbedder"


class TestMockEmbedder:
    def test_deterministic(self, embedder: MockEmbedder):
        assert embedder.embed_query("same text") == embedder.embed_query("same text")

    def test_shared_words_are_similar(self, embedder: MockEmbedder):
        a = np.array(embedder.embed_query("cats are mammals"))
        b = np.array(embedder.embed_query("mammals are cats"))
        assert float(a @ b) == pytest.approx(1.0)

    def test_dimension(self, embedder: MockEmbedder):
        assert len(embedder.embed_query("x")) == embedder.dimension


# ---------------------------------------------------------------------------
# Ollama provider
# ---------------------------------------------------------------------------


def _ollama(handler) -> OllamaEmbeddingProvider:
    provider = OllamaEmbeddingProvider(dimension=3)
    provider._client = httpx.Client(
        base_url=provider.base_url, transport=httpx.MockTransport(handler)
    )
    return provider


class TestOllamaEmbeddingProvider:
    def test_batch_endpoint(self):
        requests: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            requests.append({"path": request.url.path, **body})
            return httpx.Response(200, json={"embeddings": [[0.1, 0.2, 0.3]] * len(body["input"])})

        provider = _ollama(handler)
        assert provider.embed_texts(["a", "b"]) == [[0.1, 0.2, 0.3], [0.1, 0.2, 0.3]]
        assert requests == [{"path": "/api/embed", "model": "nomic-embed-text", "input": ["a", "b"]}]

    def test_falls_back_to_legacy_endpoint(self):
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            if request.url.path == "/api/embed":
                return httpx.Response(404)
            return httpx.Response(200, json={"embedding": [1.0, 0.0, 0.0]})

        provider = _ollama(handler)
        assert provider.embed_texts(["a", "b"]) == [[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]]
        assert provider.embed_query("c") == [1.0, 0.0, 0.0]
        assert paths == ["/api/embed", "/api/embeddings", "/api/embeddings", "/api/embeddings"]

    def test_server_error_propagates(self):
        provider = _ollama(lambda request: httpx.Response(500))
        with pytest.raises(httpx.HTTPStatusError):
            provider.embed_texts(["a"])

    def test_empty_input_no_request(self):
        provider = _ollama(lambda request: pytest.fail("unexpected request"))
        assert provider.embed_texts([]) == []

    def test_dimension(self):
        assert OllamaEmbeddingProvider(dimension=1024).dimension == 1024


# ---------------------------------------------------------------------------
# OpenAI provider (SDK mocked)
# ---------------------------------------------------------------------------


class TestOpenAIEmbeddingProvider:
    @pytest.fixture
    def client(self) -> MagicMock:
        client = MagicMock()
        client.embeddings.create.return_value = SimpleNamespace(data=[
            SimpleNamespace(index=1, embedding=[0.0, 1.0]),
            SimpleNamespace(index=0, embedding=[1.0, 0.0]),
        ])
        return client

    def _provider(self, client: MagicMock, **kwargs):
        fake_openai = MagicMock()
        fake_openai.OpenAI.return_value = client
        with patch.dict(sys.modules, {"openai": fake_openai}):
            from contextual_rag.embeddings.openai_provider import OpenAIEmbeddingProvider

            return OpenAIEmbeddingProvider(**kwargs)

    def test_reorders_by_index(self, client):
        provider = self._provider(client, dimension=2)
        assert provider.embed_texts(["a", "b"]) == [[1.0, 0.0], [0.0, 1.0]]

    def test_passes_reduced_dimensions(self, client):
        provider = self._provider(client, dimension=256)
        provider.embed_texts(["a", "b"])
        kwargs = client.embeddings.create.call_args.kwargs
        assert kwargs["dimensions"] == 256
        assert kwargs["model"] == "text-embedding-3-small"

    def test_default_dimension_from_model(self, client):
        provider = self._provider(client, model="text-embedding-ada-002")
        assert provider.dimension == 1536
        provider.embed_texts(["a"])
        assert "dimensions" not in client.embeddings.create.call_args.kwargs


# ---------------------------------------------------------------------------
# Factory tests
# ---------------------------------------------------------------------------


class TestEmbeddingFactory:
    def test_available_providers(self):
        assert set(available_providers()) == {"ollama", "openai", "huggingface"}

    def test_unknown_provider_raises(self):
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            get_embedding_provider("nonexistent")

    def test_builds_with_kwargs(self):
        provider = get_embedding_provider("ollama", dimension=512)
        assert isinstance(provider, OllamaEmbeddingProvider)
        assert provider.dimension == 512

    def test_no_instance_cache(self):
        with patch("contextual_rag.registry.importlib") as mock_importlib:
            mock_importlib.import_module.return_value = SimpleNamespace(
                OllamaEmbeddingProvider=MockEmbedder
            )
            p1 = get_embedding_provider("ollama")
            p2 = get_embedding_provider("ollama")
        assert isinstance(p1, MockEmbedder)
        assert p1 is not p2
