"""Wire providers, store and pipelines from a ``Settings`` object.

The core never reads configuration itself; everything it needs is built
here and passed in through constructors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from contextual_rag.config import Settings
from contextual_rag.context.augmenter import ContextAugmenter
from contextual_rag.embeddings.base import EmbeddingProvider
from contextual_rag.embeddings.factory import get_embedding_provider
from contextual_rag.indexing.indexer import Indexer
from contextual_rag.llm.base import LLMProvider
from contextual_rag.llm.factory import get_llm_provider
from contextual_rag.pipeline.assembler import PromptAssembler
from contextual_rag.pipeline.ingest import IngestPipeline
from contextual_rag.pipeline.middleware import RAGMiddleware
from contextual_rag.pipeline.schemas import IngestOptions
from contextual_rag.query.expander import HypotheticalAnswerExpander
from contextual_rag.query.gate import QueryGate
from contextual_rag.retrieval.hybrid import HybridRetriever
from contextual_rag.retrieval.schemas import RetrievalConfig
from contextual_rag.vectorstore.base import VectorStore
from contextual_rag.vectorstore.factory import get_vector_store

logger = logging.getLogger(__name__)


@dataclass
class RAGComponents:
    """Everything an application needs for one configured deployment."""

    embedding_provider: EmbeddingProvider
    llm_provider: LLMProvider
    vector_store: VectorStore
    ingest: IngestPipeline
    middleware: RAGMiddleware


def build_embedding_provider(settings: Settings) -> EmbeddingProvider:
    cfg = settings.embedding
    return get_embedding_provider(cfg.provider, model=cfg.model, dimension=cfg.dimension)


def build_llm_provider(settings: Settings) -> LLMProvider:
    cfg = settings.llm
    return get_llm_provider(
        cfg.provider,
        model=cfg.model,
        temperature=cfg.temperature,
        max_tokens=cfg.max_tokens,
    )


def build_vector_store(settings: Settings) -> VectorStore:
    cfg = settings.vectorstore
    dimension = settings.embedding.dimension
    if cfg.backend == "qdrant":
        return get_vector_store(
            "qdrant",
            collection_name=cfg.collection,
            dimension=dimension,
            url=cfg.url,
            path=cfg.path,
        )
    return get_vector_store(cfg.backend, dimension=dimension)


def build_ingest_pipeline(
    settings: Settings,
    embedding_provider: EmbeddingProvider,
    vector_store: VectorStore,
    llm_provider: LLMProvider,
) -> IngestPipeline:
    augmenter = None
    if settings.context.enabled:
        augmenter = ContextAugmenter(
            llm_provider,
            max_workers=settings.context.max_workers,
            queue_size=settings.context.queue_size,
        )
    indexer = Indexer(
        embedding_provider,
        vector_store,
        batch_size=settings.indexing.batch_size,
        max_workers=settings.indexing.max_workers,
        queue_size=settings.indexing.queue_size,
    )
    return IngestPipeline(
        indexer,
        augmenter=augmenter,
        separators=settings.chunking.separators,
        default_options=IngestOptions(
            chunk_size=settings.chunking.chunk_size,
            chunk_overlap=settings.chunking.chunk_overlap,
        ),
    )


def build_middleware(
    settings: Settings,
    embedding_provider: EmbeddingProvider,
    vector_store: VectorStore,
    llm_provider: LLMProvider,
) -> RAGMiddleware:
    cfg = settings.retrieval
    config = RetrievalConfig(
        vector_k=cfg.vector_k,
        lexical_k=cfg.lexical_k,
        top_k=cfg.top_k,
        lexical_scope=cfg.lexical_scope,
    )
    return RAGMiddleware(
        retriever=HybridRetriever(embedding_provider, vector_store, config),
        gate=QueryGate(llm_provider) if cfg.gate_enabled else None,
        expander=HypotheticalAnswerExpander(llm_provider) if cfg.expand_enabled else None,
        assembler=PromptAssembler(placement=cfg.placement),
        llm_provider=llm_provider,
        retrieval_config=config,
    )


def build_components(
    settings: Settings,
    embedding_provider: EmbeddingProvider | None = None,
    llm_provider: LLMProvider | None = None,
    vector_store: VectorStore | None = None,
) -> RAGComponents:
    """Build a full deployment; any dependency passed in is used as-is."""
    embedding_provider = embedding_provider or build_embedding_provider(settings)
    llm_provider = llm_provider or build_llm_provider(settings)
    vector_store = vector_store if vector_store is not None else build_vector_store(settings)

    logger.info(
        "Built components: embedding=%s llm=%s store=%s",
        embedding_provider.provider_name(),
        llm_provider.provider_name(),
        vector_store.store_name(),
    )
    return RAGComponents(
        embedding_provider=embedding_provider,
        llm_provider=llm_provider,
        vector_store=vector_store,
        ingest=build_ingest_pipeline(settings, embedding_provider, vector_store, llm_provider),
        middleware=build_middleware(settings, embedding_provider, vector_store, llm_provider),
    )
