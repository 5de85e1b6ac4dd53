"""CLI interface for convo-rag.

Requires the 'cli' extra: pip install convo-rag[cli]
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

try:
    import typer
    from pydantic import ValidationError
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.markdown import Markdown
    from rich.table import Table
except ImportError:
    print(
        "CLI dependencies not installed. Install with: pip install convo-rag[cli]",
        file=sys.stderr,
    )
    sys.exit(1)

from convo_rag import __version__
from convo_rag.completion.anthropic import AnthropicCompleter
from convo_rag.exceptions import ConvoRagError
from convo_rag.memory.backends import JsonFileHistoryBackend
from convo_rag.memory.store import SessionHistoryStore
from convo_rag.pipeline.pipeline import ConversationalPipeline
from convo_rag.prompts.registry import InMemoryTemplateRegistry, JsonFileTemplateRegistry
from convo_rag.retrieval.loader import load_passages
from convo_rag.retrieval.sparse import SparsePassageRetriever
from convo_rag.settings import ConvoRagSettings

app = typer.Typer(
    name="convo-rag",
    help="Conversational retrieval-augmented answers over your documents.",
    add_completion=False,
)
console = Console()

_EXIT_WORDS = frozenset({"exit", "quit", ":q"})


def _configure_logging(level: str) -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    package_logger = logging.getLogger("convo_rag")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(level)


def _load_settings(**overrides: Any) -> ConvoRagSettings:
    try:
        return ConvoRagSettings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        console.print(f"[red]Invalid settings:[/red] {e}")
        raise typer.Exit(code=2) from e


def build_pipeline(settings: ConvoRagSettings) -> ConversationalPipeline:
    """Wire a pipeline from settings: BM25 over local files plus Anthropic completers."""
    retriever = SparsePassageRetriever(top_k=settings.top_k)
    retriever.index(load_passages(settings.docs_dir))

    templates = (
        JsonFileTemplateRegistry(settings.templates_file)
        if settings.templates_file is not None
        else InMemoryTemplateRegistry()
    )
    backend = (
        JsonFileHistoryBackend(settings.history_file)
        if settings.history_file is not None
        else None
    )
    return ConversationalPipeline(
        retriever=retriever,
        rephrase_completer=AnthropicCompleter(
            settings.model,
            temperature=settings.rephrase_temperature,
            max_tokens=settings.max_response_tokens,
        ),
        answer_completer=AnthropicCompleter(
            settings.model,
            temperature=settings.answer_temperature,
            max_tokens=settings.max_response_tokens,
        ),
        templates=templates,
        store=SessionHistoryStore(backend),
        stage_timeout=settings.stage_timeout,
    )


def _build_or_exit(settings: ConvoRagSettings) -> ConversationalPipeline:
    try:
        return build_pipeline(settings)
    except ConvoRagError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
) -> None:
    if version:
        console.print(f"convo-rag {__version__}")
        raise typer.Exit()


@app.command()
def info() -> None:
    """Show information about the convo-rag installation."""
    table = Table(title="convo-rag info")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Version", __version__)
    table.add_row("Python", sys.version.split()[0])

    for dep_name in ["pydantic", "pydantic_settings", "rank_bm25", "anthropic"]:
        try:
            mod = __import__(dep_name)
            ver = getattr(mod, "__version__", "installed")
            table.add_row(dep_name, str(ver))
        except ImportError:
            table.add_row(dep_name, "[red]not installed[/red]")

    console.print(table)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to answer"),
    docs: Path | None = typer.Option(None, "--docs", "-d", help="File or directory of passages"),  # noqa: B008
    session: str | None = typer.Option(None, "--session", "-s", help="Session id"),
    history_file: Path | None = typer.Option(None, "--history-file", help="Persistent history JSON"),  # noqa: B008, E501
    model: str | None = typer.Option(None, "--model", "-m", help="Anthropic model"),
) -> None:
    """Answer a single question and record the turn."""
    settings = _load_settings(
        docs_dir=docs, session_id=session, history_file=history_file, model=model,
    )
    _configure_logging(settings.log_level)
    pipeline = _build_or_exit(settings)
    try:
        answer = asyncio.run(pipeline.run(settings.session_id, question))
    except (ConvoRagError, TimeoutError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from e
    console.print(Markdown(answer))


async def _chat_loop(pipeline: ConversationalPipeline, session_id: str) -> int:
    """Read lines until EOF or an exit word. Returns the number of answered turns."""
    answered = 0
    while True:
        try:
            line = await asyncio.to_thread(console.input, "[bold cyan]> [/bold cyan]")
        except EOFError:
            break
        text = line.strip()
        if not text:
            continue
        if text.lower() in _EXIT_WORDS:
            break
        try:
            answer = await pipeline.run(session_id, text)
        except (ConvoRagError, TimeoutError) as e:
            console.print(f"[red]Error:[/red] {e}")
            continue
        console.print(Markdown(answer))
        answered += 1
    return answered


@app.command()
def chat(
    docs: Path | None = typer.Option(None, "--docs", "-d", help="File or directory of passages"),  # noqa: B008
    session: str | None = typer.Option(None, "--session", "-s", help="Session id"),
    history_file: Path | None = typer.Option(None, "--history-file", help="Persistent history JSON"),  # noqa: B008, E501
    model: str | None = typer.Option(None, "--model", "-m", help="Anthropic model"),
) -> None:
    """Start an interactive conversation over your documents."""
    settings = _load_settings(
        docs_dir=docs, session_id=session, history_file=history_file, model=model,
    )
    _configure_logging(settings.log_level)
    pipeline = _build_or_exit(settings)

    history = pipeline.store.get_or_create(settings.session_id)
    console.print(
        f"[dim]Session {settings.session_id!r} ({history.turn_count} previous turns). "
        "Type 'exit' to quit.[/dim]"
    )
    answered = asyncio.run(_chat_loop(pipeline, settings.session_id))
    console.print(f"[dim]{answered} turns answered.[/dim]")


if __name__ == "__main__":
    app()
