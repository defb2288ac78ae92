"""LLM providers — Ollama, Anthropic, OpenAI."""

from contextual_rag.llm.base import LLMProvider
from contextual_rag.llm.factory import available_providers, get_llm_provider

__all__ = ["LLMProvider", "available_providers", "get_llm_provider"]
