"""Exception hierarchy shared by every layer of the pipeline.

Caller misuse (``ConfigurationError``, ``ValidationError``) is always raised.
Provider and store failures are recovered locally on the query path and
surfaced as ``IngestionError`` on the ingestion path.
"""

from __future__ import annotations


class RAGError(Exception):
    """Base class for all contextual-rag errors."""


class ProviderError(RAGError):
    """A completion or embedding call failed or timed out."""


class StoreError(RAGError):
    """A vector store write or query failed."""


class ConfigurationError(RAGError, ValueError):
    """Invalid chunking parameters or mismatched embedding dimensionality."""


class ValidationError(RAGError, ValueError):
    """Malformed input: non-text document, empty conversation, etc."""


class IngestionError(RAGError):
    """An ingestion batch was aborted.

    Attributes:
        stage: Pipeline stage that failed (``chunk``, ``embed``, ``store``).
        committed: Records already written before the failure.
        source: Source label of the document being processed, if known.
    """

    def __init__(
        self,
        message: str,
        stage: str,
        committed: int = 0,
        source: str | None = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.committed = committed
        self.source = source

    def __str__(self) -> str:
        base = super().__str__()
        where = f" ({self.source})" if self.source else ""
        return f"{base} [stage={self.stage}, committed={self.committed}]{where}"
