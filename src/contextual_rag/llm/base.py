"""Abstract base class for LLM providers."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from contextual_rag.errors import ProviderError

# DeepSeek-R1 and similar models wrap their reasoning in <think> tags.
_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)


def strip_reasoning(text: str) -> str:
    """Remove ``<think>...</think>`` blocks and surrounding whitespace."""
    return _THINK_RE.sub("", text).strip()


def match_label(reply: str, labels: Sequence[str]) -> str | None:
    """Map a free-text reply onto one of ``labels``.

    An exact (case-insensitive) match wins; otherwise the label that appears
    first in the reply as a whole word is returned.
    """
    cleaned = strip_reasoning(reply).strip().strip("\"'`.").lower()
    for label in labels:
        if cleaned == label.lower():
            return label

    best: tuple[int, str] | None = None
    for label in labels:
        m = re.search(rf"\b{re.escape(label.lower())}\b", cleaned)
        if m and (best is None or m.start() < best[0]):
            best = (m.start(), label)
    return best[1] if best else None


class LLMProvider(ABC):
    """Interface for LLM response generation."""

    @abstractmethod
    def generate(self, prompt: str, system: str | None = None) -> str:
        """Generate a response from the LLM.

        Args:
            prompt: The user prompt.
            system: Optional system prompt.

        Returns:
            Generated text response.
        """

    def classify(
        self,
        prompt: str,
        labels: Sequence[str],
        system: str | None = None,
    ) -> str:
        """Constrained generation: return exactly one of ``labels``.

        The default implementation instructs the model to answer with a
        single label and parses the reply. Providers with native structured
        output override this.

        Raises:
            ProviderError: If the reply matches none of the labels.
        """
        instruction = f"Respond with exactly one word from: {', '.join(labels)}."
        full_system = f"{system}\n\n{instruction}" if system else instruction

        reply = self.generate(prompt, system=full_system)
        label = match_label(reply, labels)
        if label is None:
            raise ProviderError(
                f"{self.provider_name()} returned an unknown label: {reply[:80]!r}"
            )
        return label

    def chat(self, messages: Sequence[Mapping[str, Any]]) -> str:
        """Complete a multi-turn conversation.

        The default implementation folds system messages into the system
        prompt and the remaining turns into a single transcript prompt.
        """
        system_parts: list[str] = []
        turns: list[str] = []
        for message in messages:
            content = content_text(message.get("content", ""))
            if message.get("role") == "system":
                system_parts.append(content)
            else:
                turns.append(f"{message.get('role', 'user')}: {content}")

        system = "\n\n".join(system_parts) or None
        return self.generate("\n\n".join(turns), system=system)

    @classmethod
    def provider_name(cls) -> str:
        """Return human-readable provider name."""
        return cls.__name__


def content_text(content: Any) -> str:
    """Join the text parts of a chat message (plain string or part list)."""
    if isinstance(content, str):
        return content
    return "\n".join(
        part.get("text", "")
        for part in content
        if isinstance(part, Mapping) and part.get("type") == "text"
    )
