"""Vector store factory."""

from __future__ import annotations

from contextual_rag.registry import Registry
from contextual_rag.vectorstore.base import VectorStore

_STORES: Registry[VectorStore] = Registry("vector store", [
    ("memory", "contextual_rag.vectorstore.memory_store", "InMemoryStore"),
    ("faiss", "contextual_rag.vectorstore.faiss_store", "FAISSStore"),
    ("qdrant", "contextual_rag.vectorstore.qdrant_store", "QdrantStore"),
])


def get_vector_store(provider: str = "memory", **kwargs) -> VectorStore:
    """Build a vector store by name.

    Args:
        provider: One of ``memory``, ``faiss``, ``qdrant``.
        **kwargs: Passed to the store constructor.
    """
    return _STORES.create(provider, **kwargs)


def available_stores() -> list[str]:
    """Return names of registered vector stores."""
    return _STORES.keys()
