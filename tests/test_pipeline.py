"""Tests for the end-to-end ingestion pipeline — fully mocked, no network."""

from __future__ import annotations

import pytest
from conftest import DIM, FailingStore, MockEmbedder, ScriptedLLM

from contextual_rag.config import Settings
from contextual_rag.context.augmenter import ContextAugmenter
from contextual_rag.documents.schemas import Document
from contextual_rag.errors import ConfigurationError, IngestionError, ValidationError
from contextual_rag.indexing.indexer import Indexer
from contextual_rag.pipeline.builder import build_components
from contextual_rag.pipeline.ingest import IngestPipeline
from contextual_rag.pipeline.schemas import IngestOptions
from contextual_rag.vectorstore.memory_store import InMemoryStore
from contextual_rag.vectorstore.schemas import parse_embedding


def _pipeline(llm, embedder, store, **kwargs) -> IngestPipeline:
    return IngestPipeline(
        Indexer(embedder, store, batch_size=4),
        augmenter=ContextAugmenter(llm, max_workers=4),
        **kwargs,
    )


class TestIngestOptions:
    def test_defaults(self):
        assert IngestOptions() == IngestOptions(chunk_size=1000, chunk_overlap=200)

    def test_from_mapping(self):
        assert IngestOptions.from_value({"chunk_size": 30, "chunk_overlap": 5}) == IngestOptions(
            30, 5
        )

    def test_unknown_keys(self):
        with pytest.raises(ValidationError):
            IngestOptions.from_value({"chunk_size": 30, "size": 5})


class TestIngestPipeline:
    def test_mammals_document(self, llm, embedder, memory_store, mammals_text):
        result = _pipeline(llm, embedder, memory_store).ingest(
            [{"text": mammals_text, "metadata": {"source": "animals.txt"}}],
            {"chunk_size": 30, "chunk_overlap": 5},
        )

        assert result.chunks_created >= 2
        assert result.chunks_stored == result.chunks_created
        assert all(len(c.original_text) <= 30 for c in result.chunks)

        records = memory_store.scan()
        assert len(records) == result.chunks_created
        for record in records:
            embedding = parse_embedding(record.embedding)
            assert embedding is not None and len(embedding) == DIM
            assert record.metadata["source"] == "animals.txt"

    def test_records_hold_context_and_chunk(self, llm, embedder, memory_store, mammals_text):
        _pipeline(llm, embedder, memory_store).ingest_text(
            mammals_text, {"source": "animals.txt"}, IngestOptions(30, 5)
        )
        first = memory_store.scan()[0]
        assert first.text.startswith(llm.context + "\n\n")
        assert first.metadata["context"] == llm.context
        assert first.metadata["chunk_index"] == 0

    def test_context_failures_still_indexed(self, embedder, memory_store, mammals_text):
        llm = ScriptedLLM(fail=["context"])
        result = _pipeline(llm, embedder, memory_store).ingest_text(
            mammals_text, options={"chunk_size": 30, "chunk_overlap": 5}
        )

        assert result.context_failures == result.chunks_created
        assert result.chunks_stored == result.chunks_created
        assert {r.text for r in memory_store.scan()} == {c.original_text for c in result.chunks}
        assert result.warnings

    def test_without_augmenter(self, embedder, memory_store, mammals_text):
        pipeline = IngestPipeline(Indexer(embedder, memory_store))
        result = pipeline.ingest_text(mammals_text, options=IngestOptions(30, 5))
        assert result.context_failures == 0
        assert all(not c.has_context for c in result.chunks)

    def test_multiple_documents(self, llm, embedder, memory_store, handbook_document, mammals_text):
        result = _pipeline(llm, embedder, memory_store).ingest(
            [handbook_document, Document(text=mammals_text, metadata={"source": "animals.txt"})],
            IngestOptions(chunk_size=120, chunk_overlap=20),
        )
        assert result.documents == 2
        assert memory_store.count() == result.chunks_stored
        assert {r.metadata["source"] for r in memory_store.scan()} == {
            "handbook.txt", "animals.txt",
        }

    def test_uses_default_options(self, llm, embedder, memory_store, mammals_text):
        pipeline = _pipeline(llm, embedder, memory_store, default_options=IngestOptions(30, 5))
        assert pipeline.ingest_text(mammals_text).chunks_created >= 2

    def test_empty_document_warns(self, llm, embedder, memory_store):
        result = _pipeline(llm, embedder, memory_store).ingest_text("", {"source": "blank.txt"})
        assert result.chunks_created == 0
        assert result.warnings == ["blank.txt: document contains no text"]
        assert llm.calls == []

    def test_reingest_duplicates(self, llm, embedder, memory_store, mammals_text):
        pipeline = _pipeline(llm, embedder, memory_store)
        first = pipeline.ingest_text(mammals_text, options=IngestOptions(30, 5))
        pipeline.ingest_text(mammals_text, options=IngestOptions(30, 5))
        assert memory_store.count() == 2 * first.chunks_stored

    def test_invalid_document_writes_nothing(self, llm, embedder, memory_store, mammals_text):
        with pytest.raises(ValidationError):
            _pipeline(llm, embedder, memory_store).ingest(
                [{"text": mammals_text}, {"text": 42}]
            )
        assert memory_store.count() == 0
        assert llm.calls == []

    def test_missing_text_key(self, llm, embedder, memory_store):
        with pytest.raises(ValidationError):
            _pipeline(llm, embedder, memory_store).ingest([{"metadata": {}}])

    def test_single_document_not_a_batch(self, llm, embedder, memory_store, handbook_document):
        with pytest.raises(ValidationError):
            _pipeline(llm, embedder, memory_store).ingest(handbook_document)

    def test_bad_options_rejected_before_work(self, llm, embedder, memory_store, mammals_text):
        with pytest.raises(ConfigurationError):
            _pipeline(llm, embedder, memory_store).ingest_text(
                mammals_text, options={"chunk_size": 30, "chunk_overlap": 30}
            )
        assert llm.calls == []

    def test_store_failure_reports_stage_and_commits(self, llm, embedder, mammals_text):
        store = FailingStore(ok_writes=1)
        pipeline = IngestPipeline(Indexer(embedder, store, batch_size=100), ContextAugmenter(llm))
        docs = [
            Document(text=mammals_text, metadata={"source": "first.txt"}),
            Document(text=mammals_text, metadata={"source": "second.txt"}),
        ]

        with pytest.raises(IngestionError) as exc_info:
            pipeline.ingest(docs, IngestOptions(30, 5))

        err = exc_info.value
        assert err.stage == "store"
        assert err.committed == len(store.added) > 0
        assert err.source == "second.txt"

    @pytest.mark.parametrize(
        "options",
        [
            {"chunk_size": "30", "chunk_overlap": 5},
            {"chunk_size": None, "chunk_overlap": 5},
            {"chunk_size": 30, "chunk_overlap": 5.0},
            {"chunk_size": True, "chunk_overlap": 0},
        ],
    )
    def test_non_integer_options_rejected(self, llm, embedder, memory_store, options):
        with pytest.raises(ConfigurationError, match="must be an integer"):
            _pipeline(llm, embedder, memory_store).ingest(
                [{"text": "Cats are mammals."}], options
            )
        assert memory_store.count() == 0

    def test_options_must_be_mapping(self, llm, embedder, memory_store):
        with pytest.raises(ValidationError):
            _pipeline(llm, embedder, memory_store).ingest([{"text": "x"}], [30, 5])

    def test_dimension_mismatch_after_commit_reports_committed(self, llm, mammals_text):
        class ShrinkingEmbedder(MockEmbedder):
            def embed_texts(self, texts):
                vectors = super().embed_texts(texts)
                return vectors if len(self.calls) == 1 else [v[:-1] for v in vectors]

        store = InMemoryStore(dimension=DIM)
        pipeline = IngestPipeline(
            Indexer(ShrinkingEmbedder(DIM), store, batch_size=100), ContextAugmenter(llm)
        )
        docs = [
            Document(text=mammals_text, metadata={"source": "first.txt"}),
            Document(text=mammals_text, metadata={"source": "second.txt"}),
        ]

        with pytest.raises(IngestionError) as exc_info:
            pipeline.ingest(docs, IngestOptions(30, 5))

        err = exc_info.value
        assert err.stage == "embed"
        assert err.committed == store.count() > 0
        assert err.source == "second.txt"
        assert isinstance(err.__cause__, ConfigurationError)

    def test_embedding_dimension_mismatch(self, llm, mammals_text):
        store = InMemoryStore(dimension=DIM)
        pipeline = _pipeline(llm, MockEmbedder(dim=DIM + 1), store)
        with pytest.raises(ConfigurationError):
            pipeline.ingest_text(mammals_text)


class TestBuilder:
    def test_build_components_with_injected_dependencies(self, llm, embedder, mammals_text):
        settings = Settings.model_validate({
            "chunking": {"chunk_size": 30, "chunk_overlap": 5},
            "retrieval": {"placement": "system_message"},
        })
        store = InMemoryStore(dimension=DIM)
        components = build_components(settings, embedder, llm, store)

        result = components.ingest.ingest_text(mammals_text, {"source": "animals.txt"})
        assert result.chunks_stored >= 2

        conversation = [{"role": "user", "content": "What is a mammal?"}]
        augmented = components.middleware.augment_if_needed(conversation)
        assert augmented[0]["role"] == "system"
        assert "<relevant_information>" in augmented[0]["content"]

    def test_context_disabled(self, llm, embedder):
        settings = Settings.model_validate({"context": {"enabled": False}})
        components = build_components(settings, embedder, llm, InMemoryStore(dimension=DIM))
        assert components.ingest.augmenter is None

    def test_gate_and_expansion_disabled(self, llm, embedder):
        settings = Settings.model_validate(
            {"retrieval": {"gate_enabled": False, "expand_enabled": False}}
        )
        components = build_components(settings, embedder, llm, InMemoryStore(dimension=DIM))
        assert components.middleware.gate is None
        assert components.middleware.expander is None

    def test_builds_memory_store_from_settings(self, llm, embedder):
        settings = Settings.model_validate({"embedding": {"dimension": DIM}})
        components = build_components(settings, embedder, llm)
        assert isinstance(components.vector_store, InMemoryStore)
