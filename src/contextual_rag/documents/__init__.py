"""Documents accepted by the ingestion pipeline."""

from contextual_rag.documents.schemas import Document

__all__ = ["Document"]
