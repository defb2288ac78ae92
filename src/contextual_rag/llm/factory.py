"""LLM provider factory."""

from __future__ import annotations

from contextual_rag.llm.base import LLMProvider
from contextual_rag.registry import Registry

# ---------------------------------------------------------------------------
# Provider registry: (provider_key, module_path, class_name)
# ---------------------------------------------------------------------------

_PROVIDERS: Registry[LLMProvider] = Registry("LLM provider", [
    ("ollama", "contextual_rag.llm.ollama_provider", "OllamaLLMProvider"),
    ("anthropic", "contextual_rag.llm.anthropic_provider", "AnthropicLLMProvider"),
    ("openai", "contextual_rag.llm.openai_provider", "OpenAILLMProvider"),
])


def get_llm_provider(provider: str = "ollama", **kwargs) -> LLMProvider:
    """Build an LLM provider by name.

    Args:
        provider: One of ``ollama``, ``anthropic``, ``openai``.
        **kwargs: Passed to the provider constructor.
    """
    return _PROVIDERS.create(provider, **kwargs)


def available_providers() -> list[str]:
    """Return names of registered LLM providers."""
    return _PROVIDERS.keys()
