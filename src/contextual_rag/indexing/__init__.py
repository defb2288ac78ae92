"""Embedding and persistence of contextual chunks."""

from contextual_rag.indexing.indexer import Indexer

__all__ = ["Indexer"]
