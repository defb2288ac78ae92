"""Data models for vector store operations."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass
class VectorRecord:
    """A contextual chunk with its embedding, ready for storage.

    Records are written once and never updated in place.
    """

    id: str
    text: str
    embedding: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SearchResult:
    """A single record returned by a store search or scan.

    ``embedding`` is whatever the backend kept for the record: a float
    list, a numpy array, a serialized string, or ``None`` when the backend
    did not return vectors.
    """

    id: str
    text: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)
    embedding: Any = None


@dataclass
class MetadataFilter:
    """Restrict results to records whose metadata matches every condition.

    A scalar condition must equal the metadata value; a list/tuple/set
    condition matches when the metadata value is one of its members.
    """

    conditions: dict[str, Any] = field(default_factory=dict)

    def matches(self, metadata: Mapping[str, Any]) -> bool:
        """Check if a record's metadata matches this filter."""
        for key, expected in self.conditions.items():
            value = metadata.get(key)
            if isinstance(expected, (list, tuple, set, frozenset)):
                if value not in expected:
                    return False
            elif value != expected:
                return False
        return True

    def to_dict(self) -> dict[str, Any]:
        """Return the conditions as a plain dict for backend-native filters."""
        return dict(self.conditions)

    def __bool__(self) -> bool:
        return bool(self.conditions)


def parse_embedding(value: Any) -> list[float] | None:
    """Coerce a stored embedding into a float list.

    Accepts float sequences, numpy arrays, and delimited strings such as
    ``"[0.1,0.2,0.3]"`` or ``"0.1,0.2,0.3"`` (the form some SQL vector
    columns return). Returns ``None`` for missing or unparseable values.
    """
    if value is None:
        return None

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            if stripped.startswith("["):
                parsed = json.loads(stripped)
            else:
                parsed = [float(part) for part in stripped.split(",")]
        except ValueError:
            return None
        value = parsed

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            return None
        return value.astype(float).tolist()

    if isinstance(value, Sequence):
        try:
            return [float(x) for x in value]
        except (TypeError, ValueError):
            return None

    return None
