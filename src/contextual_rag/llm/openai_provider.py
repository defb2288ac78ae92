"""OpenAI LLM provider — GPT-4o and OpenAI-compatible endpoints.

Requires the ``openai`` extra and ``OPENAI_API_KEY`` env var. Classification
uses strict structured outputs with an enum-constrained JSON schema.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from contextual_rag.errors import ProviderError
from contextual_rag.llm.base import LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"


class OpenAILLMProvider(LLMProvider):
    """Generate responses via the OpenAI Chat API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.0,
        timeout: float = 60.0,
    ):
        try:
            import openai
        except ImportError as exc:
            raise ImportError(
                "openai package required: pip install contextual-rag[openai]"
            ) from exc

        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

        kwargs: dict[str, Any] = {"timeout": timeout}
        if api_key:
            kwargs["api_key"] = api_key
        if base_url:
            kwargs["base_url"] = base_url

        self._client: Any = openai.OpenAI(**kwargs)

    def generate(self, prompt: str, system: str | None = None) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return self._complete(messages)

    def chat(self, messages: Sequence[Mapping[str, Any]]) -> str:
        return self._complete([dict(m) for m in messages])

    def classify(
        self,
        prompt: str,
        labels: Sequence[str],
        system: str | None = None,
    ) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=0,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": "classification",
                    "strict": True,
                    "schema": {
                        "type": "object",
                        "properties": {
                            "label": {"type": "string", "enum": list(labels)},
                        },
                        "required": ["label"],
                        "additionalProperties": False,
                    },
                },
            },
        )
        raw = response.choices[0].message.content or ""
        try:
            label = json.loads(raw)["label"]
        except (json.JSONDecodeError, KeyError, TypeError) as exc:
            raise ProviderError(f"OpenAI returned malformed classification: {raw[:80]!r}") from exc

        if label not in labels:
            raise ProviderError(f"OpenAI returned an unknown label: {label!r}")
        return label

    def _complete(self, messages: list[dict[str, Any]]) -> str:
        response = self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return response.choices[0].message.content or ""
