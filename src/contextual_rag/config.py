"""Application settings loaded from YAML with environment variable overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Settings sections
# ---------------------------------------------------------------------------


class EmbeddingSettings(BaseModel):
    provider: str = "ollama"
    model: str = "nomic-embed-text"
    dimension: int = Field(default=768, gt=0)


class VectorStoreSettings(BaseModel):
    backend: str = "memory"
    path: str = "local_data/vectorstore"
    collection: str = "contextual_chunks"
    url: str | None = None


class LLMSettings(BaseModel):
    provider: str = "ollama"
    model: str = "llama3.1:8b"
    temperature: float = 0.0
    max_tokens: int = Field(default=1024, gt=0)


class ChunkingSettings(BaseModel):
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    separators: list[str] = Field(
        default_factory=lambda: ["\n\n", "\n", ". ", " ", ""]
    )


class ContextSettings(BaseModel):
    enabled: bool = True
    max_workers: int = Field(default=10, ge=1)
    queue_size: int = Field(default=32, ge=0)


class IndexingSettings(BaseModel):
    batch_size: int = Field(default=32, ge=1)
    max_workers: int = Field(default=10, ge=1)
    queue_size: int = Field(default=32, ge=0)


class RetrievalSettings(BaseModel):
    vector_k: int = Field(default=30, ge=1)
    lexical_k: int = Field(default=10, ge=0)
    top_k: int = Field(default=20, ge=1)
    lexical_scope: str = "vector"  # "vector" or "scan"
    gate_enabled: bool = True
    expand_enabled: bool = True
    placement: str = "user_message"  # "user_message" or "system_message"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vectorstore: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    context: ContextSettings = Field(default_factory=ContextSettings)
    indexing: IndexingSettings = Field(default_factory=IndexingSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)


def _find_settings_file() -> Path | None:
    """Walk up from cwd looking for settings.yaml."""
    profile = os.getenv("CTXRAG_PROFILE", "")
    names = [f"settings-{profile}.yaml", "settings.yaml"] if profile else ["settings.yaml"]

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        for name in names:
            candidate = parent / name
            if candidate.exists():
                return candidate
    return None


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from YAML file, falling back to defaults.

    Args:
        path: Explicit settings file. When omitted, ``settings.yaml`` (or
            ``settings-$CTXRAG_PROFILE.yaml``) is searched upwards from cwd.
    """
    resolved = Path(path) if path is not None else _find_settings_file()
    if resolved is None:
        return Settings()

    with open(resolved, encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    return Settings(**raw)
