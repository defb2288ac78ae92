"""Embedding providers — Ollama, OpenAI, HuggingFace."""

from contextual_rag.embeddings.base import EmbeddingProvider
from contextual_rag.embeddings.factory import available_providers, get_embedding_provider

__all__ = [
    "EmbeddingProvider",
    "available_providers",
    "get_embedding_provider",
]
