"""Shared fixtures for tests — fake providers and stores, no network calls."""

from __future__ import annotations

import hashlib
import re
import textwrap
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np
import pytest

from contextual_rag.documents.schemas import Document
from contextual_rag.embeddings.base import EmbeddingProvider
from contextual_rag.errors import ProviderError, StoreError
from contextual_rag.llm.base import LLMProvider
from contextual_rag.prompts import CONTEXT_SYSTEM_PROMPT, HYPOTHETICAL_ANSWER_SYSTEM_PROMPT
from contextual_rag.vectorstore.base import VectorStore
from contextual_rag.vectorstore.memory_store import InMemoryStore
from contextual_rag.vectorstore.schemas import MetadataFilter, SearchResult, VectorRecord

DIM = 64

# ---------------------------------------------------------------------------
# Fake providers
# ---------------------------------------------------------------------------


class MockEmbedder(EmbeddingProvider):
    """Deterministic bag-of-words embeddings.

    Every token is hashed into one of ``dim`` buckets, so texts sharing
    words have a positive cosine similarity.
    """

    def __init__(self, dim: int = DIM):
        self._dim = dim
        self.calls: list[list[str]] = []

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [self._hash_embed(t) for t in texts]

    def embed_query(self, query: str) -> list[float]:
        return self._hash_embed(query)

    @property
    def dimension(self) -> int:
        return self._dim

    def _hash_embed(self, text: str) -> list[float]:
        vec = np.zeros(self._dim, dtype=np.float64)
        for token in re.findall(r"\w+", text.lower()):
            bucket = int.from_bytes(hashlib.sha256(token.encode()).digest()[:4], "big")
            vec[bucket % self._dim] += 1.0
        norm = np.linalg.norm(vec)
        if norm:
            vec /= norm
        return vec.tolist()


class FailingEmbedder(MockEmbedder):
    """Raises on every call after the first ``ok_calls`` batches."""

    def __init__(self, dim: int = DIM, ok_calls: int = 0):
        super().__init__(dim)
        self.ok_calls = ok_calls

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if len(self.calls) >= self.ok_calls:
            self.calls.append(list(texts))
            raise ProviderError("embedding endpoint unavailable")
        return super().embed_texts(texts)

    def embed_query(self, query: str) -> list[float]:
        raise ProviderError("embedding endpoint unavailable")


class ScriptedLLM(LLMProvider):
    """Fake completion provider that answers by task.

    The task is recognised from the system prompt. ``fail`` names the
    tasks (``context``, ``classify``, ``expand``, ``chat``) that raise.
    """

    def __init__(
        self,
        context: str = "This chunk comes from a note about animals.",
        label: str = "question",
        answer: str = "Cats are mammals.",
        chat_reply: str = "Mammals are warm-blooded animals.",
        fail: Sequence[str] = (),
    ):
        self.model = "scripted-llm"
        self.context = context
        self.label = label
        self.answer = answer
        self.chat_reply = chat_reply
        self.fail = set(fail)
        self.calls: list[tuple[str, str]] = []

    def generate(self, prompt: str, system: str | None = None) -> str:
        if system == HYPOTHETICAL_ANSWER_SYSTEM_PROMPT:
            return self._reply("expand", prompt, self.answer)
        if system == CONTEXT_SYSTEM_PROMPT:
            return self._reply("context", prompt, self.context)
        return self._reply("generate", prompt, self.chat_reply)

    def classify(self, prompt: str, labels: Sequence[str], system: str | None = None) -> str:
        return self._reply("classify", prompt, self.label)

    def chat(self, messages: Sequence[Mapping[str, Any]]) -> str:
        self.last_messages = [dict(m) for m in messages]
        return self._reply("chat", str(messages[-1].get("content", "")), self.chat_reply)

    def tasks(self) -> list[str]:
        return [task for task, _ in self.calls]

    def _reply(self, task: str, prompt: str, reply: str) -> str:
        self.calls.append((task, prompt))
        if task in self.fail:
            raise ProviderError(f"{task} call failed")
        return reply


# ---------------------------------------------------------------------------
# Fake stores
# ---------------------------------------------------------------------------


class StaticStore(VectorStore):
    """Returns fixed results from ``search`` and ``scan``; records writes."""

    def __init__(self, results: list[SearchResult] | None = None):
        self.results = list(results or [])
        self.added: list[VectorRecord] = []
        self.filters: list[MetadataFilter | None] = []

    def add(self, records: list[VectorRecord]) -> int:
        self.added.extend(records)
        return len(records)

    def search(self, query_embedding, top_k=10, metadata_filter=None):
        self.filters.append(metadata_filter)
        return self.results[:top_k]

    def scan(self, metadata_filter=None):
        self.filters.append(metadata_filter)
        return list(self.results)

    def count(self) -> int:
        return len(self.results) + len(self.added)

    def clear(self) -> None:
        self.results = []
        self.added = []


class FailingStore(VectorStore):
    """Accepts the first ``ok_writes`` ``add`` calls, then fails everything."""

    def __init__(self, ok_writes: int = 0):
        self.ok_writes = ok_writes
        self.added: list[VectorRecord] = []
        self._writes = 0

    def add(self, records: list[VectorRecord]) -> int:
        if self._writes >= self.ok_writes:
            raise StoreError("store is unreachable")
        self._writes += 1
        self.added.extend(records)
        return len(records)

    def search(self, query_embedding, top_k=10, metadata_filter=None):
        raise StoreError("store is unreachable")

    def scan(self, metadata_filter=None):
        raise StoreError("store is unreachable")

    def count(self) -> int:
        return len(self.added)

    def clear(self) -> None:
        self.added = []


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def embedder() -> MockEmbedder:
    return MockEmbedder(dim=DIM)


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore(dimension=DIM)


@pytest.fixture
def mammals_text() -> str:
    return "Cats are mammals. Dogs are mammals too. Fish are not mammals."


@pytest.fixture
def handbook_document() -> Document:
    """A multi-paragraph document with a source label."""
    text = textwrap.dedent("""\
        Employee Handbook

        New employees receive a laptop on their first day. The IT desk on
        the second floor configures accounts and two-factor authentication.

        Vacation policy: full-time staff accrue twenty days of paid leave
        per year. Unused days roll over up to a maximum of five days.

        Expenses must be submitted within thirty days with itemised
        receipts. Travel is booked through the internal portal.
    """)
    return Document(text=text, metadata={"source": "handbook.txt"})


@pytest.fixture
def populated_store(embedder: MockEmbedder, memory_store: InMemoryStore) -> InMemoryStore:
    """In-memory store holding a handful of short passages."""
    texts = [
        "Cats are mammals.",
        "Fish live in water and breathe through gills.",
        "Dogs are loyal mammals that bark.",
        "Eagles are birds of prey.",
        "Whales are marine mammals.",
    ]
    embeddings = embedder.embed_texts(texts)
    memory_store.add([
        VectorRecord(
            id=f"rec-{i}",
            text=text,
            embedding=emb,
            metadata={"source": "animals.txt" if i % 2 == 0 else "zoo.txt"},
        )
        for i, (text, emb) in enumerate(zip(texts, embeddings, strict=True))
    ])
    return memory_store
