"""Ollama LLM provider — local-first, no API keys.

Works with Llama, Mistral, DeepSeek-R1 and any other model served by
Ollama. Classification uses Ollama's JSON-schema ``format`` option.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from contextual_rag.errors import ProviderError
from contextual_rag.llm.base import LLMProvider, content_text, match_label, strip_reasoning

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama3.1:8b"
DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaLLMProvider(LLMProvider):
    """Generate responses via a local Ollama server."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        temperature: float = 0.0,
        max_tokens: int = 1024,
        timeout: float = 120.0,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout)

    def generate(self, prompt: str, system: str | None = None) -> str:
        payload = self._payload(prompt, system)
        resp = self._client.post("/api/generate", json=payload)
        resp.raise_for_status()
        return strip_reasoning(resp.json().get("response", ""))

    def classify(
        self,
        prompt: str,
        labels: Sequence[str],
        system: str | None = None,
    ) -> str:
        payload = self._payload(prompt, system)
        payload["format"] = {
            "type": "object",
            "properties": {"label": {"type": "string", "enum": list(labels)}},
            "required": ["label"],
        }
        resp = self._client.post("/api/generate", json=payload)
        resp.raise_for_status()
        raw = resp.json().get("response", "")

        try:
            label = json.loads(raw).get("label", "")
        except (json.JSONDecodeError, AttributeError):
            label = raw

        matched = match_label(str(label), labels)
        if matched is None:
            raise ProviderError(f"Ollama returned an unknown label: {raw[:80]!r}")
        return matched

    def chat(self, messages: Sequence[Mapping[str, Any]]) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": m.get("role", "user"), "content": content_text(m.get("content", ""))}
                for m in messages
            ],
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }
        resp = self._client.post("/api/chat", json=payload)
        resp.raise_for_status()
        return strip_reasoning(resp.json().get("message", {}).get("content", ""))

    def _payload(self, prompt: str, system: str | None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }
        if system:
            payload["system"] = system
        return payload
