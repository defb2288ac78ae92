"""Embedding provider factory."""

from __future__ import annotations

from contextual_rag.embeddings.base import EmbeddingProvider
from contextual_rag.registry import Registry

_PROVIDERS: Registry[EmbeddingProvider] = Registry("embedding provider", [
    ("ollama", "contextual_rag.embeddings.ollama_provider", "OllamaEmbeddingProvider"),
    ("openai", "contextual_rag.embeddings.openai_provider", "OpenAIEmbeddingProvider"),
    ("huggingface", "contextual_rag.embeddings.huggingface_provider",
     "HuggingFaceEmbeddingProvider"),
])


def get_embedding_provider(provider: str = "ollama", **kwargs) -> EmbeddingProvider:
    """Build an embedding provider by name.

    Args:
        provider: One of ``ollama``, ``openai``, ``huggingface``.
        **kwargs: Passed to the provider constructor.
    """
    return _PROVIDERS.create(provider, **kwargs)


def available_providers() -> list[str]:
    """Return names of registered embedding providers."""
    return _PROVIDERS.keys()
