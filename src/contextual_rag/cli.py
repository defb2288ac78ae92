"""CLI entry point — Typer app for ctxrag commands.

Usage:
    ctxrag ingest notes.txt handbook.md --chunk-size 800
    ctxrag ask "What is a mammal?" --answer
    ctxrag status
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

app = typer.Typer(
    name="ctxrag",
    help="Contextual RAG — ingest documents, augment chat turns.",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)

_INGEST_PATHS = typer.Argument(..., help="UTF-8 text files to ingest")
_SETTINGS = typer.Option(None, "--settings", help="Path to a settings YAML file")


@app.callback()
def main(
    log_level: str = typer.Option(
        os.getenv("CTXRAG_LOG_LEVEL", "WARNING"), "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _components(settings_path: Path | None):
    from contextual_rag.config import load_settings
    from contextual_rag.pipeline.builder import build_components

    settings = load_settings(settings_path)
    components = build_components(settings)

    store = components.vector_store
    store_path = Path(settings.vectorstore.path)
    if store.persists_locally and store_path.exists():
        store.load(str(store_path))
        logger.info("Loaded %d records from %s", store.count(), store_path)
    return settings, components


@app.command()
def ingest(
    paths: Annotated[list[Path], _INGEST_PATHS],
    chunk_size: int | None = typer.Option(
        None, "--chunk-size", help="Maximum characters per chunk",
    ),
    chunk_overlap: int | None = typer.Option(
        None, "--chunk-overlap", help="Characters repeated between chunks",
    ),
    source: str | None = typer.Option(
        None, "--source", help="Source label (defaults to the file name)",
    ),
    settings_path: Path | None = _SETTINGS,
) -> None:
    """Ingest text files into the vector store."""
    from contextual_rag.documents.schemas import Document
    from contextual_rag.errors import IngestionError, RAGError
    from contextual_rag.pipeline.schemas import IngestOptions

    settings, components = _components(settings_path)
    store = components.vector_store

    documents = [
        Document(
            text=path.read_text(encoding="utf-8"),
            metadata={"source": source or path.name},
        )
        for path in paths
    ]
    options = IngestOptions(
        chunk_size=chunk_size or settings.chunking.chunk_size,
        chunk_overlap=(
            chunk_overlap if chunk_overlap is not None else settings.chunking.chunk_overlap
        ),
    )

    try:
        result = components.ingest.ingest(documents, options)
    except IngestionError as exc:
        console.print(f"[bold red]Ingestion failed at {exc.stage}:[/] {exc}")
        if store.persists_locally and exc.committed:
            store.save(settings.vectorstore.path)
            console.print(f"  Records committed and saved: {exc.committed}")
        else:
            console.print(f"  Records committed: {exc.committed}")
        raise typer.Exit(code=1) from exc
    except RAGError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=2) from exc

    if store.persists_locally:
        store.save(settings.vectorstore.path)

    console.print(f"\n[bold green]Ingested:[/] {result.documents} document(s)")
    console.print(f"  Chunks: {result.chunks_created}")
    console.print(f"  Stored: {result.chunks_stored}")
    console.print(f"  Without context: {result.context_failures}")

    for w in result.warnings:
        console.print(f"  [yellow]Warning:[/] {w}")


@app.command()
def ask(
    message: str = typer.Argument(..., help="User message"),
    answer: bool = typer.Option(
        False, "--answer", "-a", help="Also send the conversation to the LLM",
    ),
    sources: list[str] | None = typer.Option(
        None, "--source", "-s", help="Restrict retrieval to these sources",
    ),
    settings_path: Path | None = _SETTINGS,
) -> None:
    """Run the chat middleware on a single user message."""
    from contextual_rag.pipeline.schemas import ConversationMessage

    _, components = _components(settings_path)
    middleware = components.middleware

    conversation = [ConversationMessage(role="user", content=message)]
    outcome = middleware.transform(conversation, sources=sources or None)

    if not outcome.applied:
        console.print(f"\n[yellow]Not augmented:[/] {outcome.skip_reason}")
    else:
        table = Table(title=f"Retrieved passages ({len(outcome.candidates)})")
        table.add_column("#", style="cyan")
        table.add_column("Score")
        table.add_column("Origin")
        table.add_column("Source")
        table.add_column("Text")
        for i, candidate in enumerate(outcome.candidates, start=1):
            table.add_row(
                str(i),
                f"{candidate.score:.3f}",
                str(candidate.origin),
                str(candidate.metadata.get("source", "")),
                candidate.text[:80],
            )
        console.print(table)

    if answer:
        reply = components.llm_provider.chat([m.to_dict() for m in outcome.conversation])
        console.print(f"\n[bold green]A:[/] {reply}")


@app.command()
def status(settings_path: Path | None = _SETTINGS) -> None:
    """Show installed providers, configured backends and record count."""
    from contextual_rag.embeddings.factory import available_providers as emb_providers
    from contextual_rag.llm.factory import available_providers as llm_providers
    from contextual_rag.vectorstore.factory import available_stores

    settings, components = _components(settings_path)

    console.print("\n[bold green]contextual-rag[/] v0.1.0\n")

    table = Table(title="Available Components")
    table.add_column("Layer", style="cyan")
    table.add_column("Available")
    table.add_column("Configured")

    table.add_row("Embedding Providers", ", ".join(emb_providers()), settings.embedding.provider)
    table.add_row("Vector Stores", ", ".join(available_stores()), settings.vectorstore.backend)
    table.add_row("LLM Providers", ", ".join(llm_providers()), settings.llm.provider)

    console.print(table)
    console.print(f"\nRecords in store: [bold]{components.vector_store.count()}[/]")


if __name__ == "__main__":
    app()
