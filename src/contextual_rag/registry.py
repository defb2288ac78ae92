"""Lazy-import registry shared by the provider and store factories.

Each registry maps a short key to ``(module_path, class_name)``; the module
is only imported when that backend is requested, so optional SDKs stay
optional. Instances are never cached here: callers own the objects they
build and pass them into the pipeline explicitly.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Registry(Generic[T]):
    """Named backends of one kind (embedding providers, LLMs, stores)."""

    def __init__(self, kind: str, entries: list[tuple[str, str, str]]):
        self.kind = kind
        self._entries = {key: (module_path, cls_name) for key, module_path, cls_name in entries}

    def create(self, key: str, **kwargs: Any) -> T:
        """Import and instantiate the backend registered under ``key``."""
        normalized = key.lower()
        if normalized not in self._entries:
            raise ValueError(
                f"Unknown {self.kind} '{key}'. Available: {self.keys()}"
            )

        module_path, cls_name = self._entries[normalized]
        cls = getattr(importlib.import_module(module_path), cls_name)
        logger.debug("Creating %s '%s' (%s)", self.kind, normalized, cls_name)
        return cls(**kwargs)

    def keys(self) -> list[str]:
        return list(self._entries)
