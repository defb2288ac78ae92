"""Data models for documents handed to the ingestion pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from contextual_rag.errors import ValidationError


@dataclass(frozen=True)
class Document:
    """Raw text plus arbitrary key-value metadata.

    Attributes:
        text: Full document text.
        metadata: Caller-supplied metadata (source name, page count,
            ingestion type, ...). Copied onto every chunk.
    """

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def source(self) -> str | None:
        value = self.metadata.get("source")
        return str(value) if value is not None else None

    def validate(self) -> None:
        """Raise ``ValidationError`` if the document is malformed."""
        if not isinstance(self.text, str):
            raise ValidationError(
                f"Document text must be str, got {type(self.text).__name__}"
            )
        if not isinstance(self.metadata, Mapping):
            raise ValidationError(
                f"Document metadata must be a mapping, got {type(self.metadata).__name__}"
            )

    @classmethod
    def from_value(cls, value: Document | Mapping[str, Any] | str) -> Document:
        """Coerce a ``Document``, a ``{"text", "metadata"}`` mapping or a str."""
        if isinstance(value, Document):
            doc = value
        elif isinstance(value, str):
            doc = cls(text=value)
        elif isinstance(value, Mapping):
            if "text" not in value:
                raise ValidationError("Document mapping is missing the 'text' key")
            metadata = value.get("metadata") or {}
            if not isinstance(metadata, Mapping):
                raise ValidationError(
                    f"Document metadata must be a mapping, got {type(metadata).__name__}"
                )
            doc = cls(text=value["text"], metadata=dict(metadata))
        else:
            raise ValidationError(
                f"Unsupported document type: {type(value).__name__}"
            )
        doc.validate()
        return doc
