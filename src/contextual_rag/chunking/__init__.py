"""Overlapping, separator-aware document chunking."""

from contextual_rag.chunking.base import BaseChunker
from contextual_rag.chunking.recursive_chunker import RecursiveCharacterChunker
from contextual_rag.chunking.schemas import Chunk, ContextualChunk

__all__ = ["BaseChunker", "Chunk", "ContextualChunk", "RecursiveCharacterChunker"]
