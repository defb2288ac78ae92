"""Contextual chunk augmentation."""

from contextual_rag.context.augmenter import ContextAugmenter

__all__ = ["ContextAugmenter"]
