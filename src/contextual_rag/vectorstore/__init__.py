"""Vector store backends — in-memory, FAISS (local) and Qdrant (production)."""

from contextual_rag.vectorstore.base import VectorStore
from contextual_rag.vectorstore.factory import available_stores, get_vector_store
from contextual_rag.vectorstore.schemas import (
    MetadataFilter,
    SearchResult,
    VectorRecord,
    parse_embedding,
)

__all__ = [
    "MetadataFilter",
    "SearchResult",
    "VectorRecord",
    "VectorStore",
    "available_stores",
    "get_vector_store",
    "parse_embedding",
]
