"""End-to-end pipeline — ingestion trigger, chat middleware, prompt assembly."""

from contextual_rag.pipeline.assembler import ContextPlacement, PromptAssembler
from contextual_rag.pipeline.builder import RAGComponents, build_components
from contextual_rag.pipeline.ingest import IngestPipeline
from contextual_rag.pipeline.middleware import RAGMiddleware
from contextual_rag.pipeline.schemas import (
    AugmentOutcome,
    ConversationMessage,
    IngestOptions,
    IngestResult,
    SkipReason,
)

__all__ = [
    "AugmentOutcome",
    "ContextPlacement",
    "ConversationMessage",
    "IngestOptions",
    "IngestPipeline",
    "IngestResult",
    "PromptAssembler",
    "RAGComponents",
    "RAGMiddleware",
    "SkipReason",
    "build_components",
]
