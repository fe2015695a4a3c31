"""Command line interface for StyleReview."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from stylereview.config import AppConfig
from stylereview.errors import StyleReviewError
from stylereview.index.corpus import build_corpus_index
from stylereview.index.search import TOP_K, RelevanceRanker
from stylereview.ingestion.html_loader import MIN_CHUNK_CHARS, extract_chunks, load_document
from stylereview.review.pipeline import ReviewPipeline, make_embedder
from stylereview.utils.text import snippet


console = Console()
app = typer.Typer(help="StyleReview - style-guide grounded pull request reviews")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(code=1)


def _load_config() -> AppConfig:
    try:
        return AppConfig.from_env()
    except ValueError as exc:
        _fail(f"Invalid configuration: {exc}")


@app.command()
def chunks(
    guide: str = typer.Argument(..., help="Style guide path or URL"),
    min_chars: int = typer.Option(MIN_CHUNK_CHARS, help="Minimum passage length"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List the passages extracted from a style guide."""
    _setup_logging(verbose)
    try:
        passages = extract_chunks(load_document(guide), min_chars=min_chars)
    except StyleReviewError as exc:
        _fail(f"Cannot read style guide: {exc}")

    if not passages:
        console.print("[yellow]No passages found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#")
    table.add_column("Chars")
    table.add_column("Passage")
    for index, chunk in enumerate(passages):
        table.add_row(str(index), str(len(chunk.text)), snippet(chunk.text))
    console.print(table)


@app.command()
def rank(
    guide: str = typer.Argument(..., help="Style guide path or URL"),
    diff_file: Path = typer.Argument(..., help="File holding the diff to rank against", exists=True),
    top_k: int = typer.Option(TOP_K, help="Number of passages to show"),
    backend: Optional[str] = typer.Option(None, help="Embedding backend: openai or local"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show the style guide passages most relevant to a diff."""
    _setup_logging(verbose)
    config = _load_config()
    if backend is not None:
        config.embedding_backend = backend

    try:
        embedder = make_embedder(config)
        corpus = build_corpus_index(load_document(guide), embedder)
        query = embedder.embed(diff_file.read_text(encoding="utf-8"))
    except (StyleReviewError, ValueError) as exc:
        _fail(f"Ranking failed: {exc}")

    results = RelevanceRanker(top_k=top_k).rank(query, corpus)
    if not results:
        console.print("[yellow]No passages to rank.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Passage")
    for result in results:
        table.add_row(f"{result.score:.4f}", snippet(result.chunk.text))
    console.print(table)


@app.command()
def review(
    owner: str = typer.Argument(..., help="Repository owner"),
    repo: str = typer.Argument(..., help="Repository name"),
    number: str = typer.Argument(..., help="Pull request number"),
    guide: Optional[str] = typer.Option(None, help="Style guide path or URL"),
    workers: Optional[int] = typer.Option(None, help="Files reviewed in parallel"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Review a pull request and post one comment per changed file."""
    _setup_logging(verbose)
    config = _load_config()
    if guide is not None:
        config.style_guide = guide
    if workers is not None:
        config.max_workers = workers

    try:
        pipeline = ReviewPipeline.from_config(config)
    except (StyleReviewError, ValueError) as exc:
        _fail(f"Cannot build style guide corpus: {exc}")

    console.print(f"Reviewing [bold]{owner}/{repo}#{number}[/bold]...")
    try:
        report = pipeline.review_pull_request(owner, repo, number)
    except StyleReviewError as exc:
        _fail(f"Error fetching PR changes: {exc}")

    if not report.results:
        console.print("[yellow]No matching changed files.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Detail")
    for result in report.results:
        status = "[green]posted[/green]" if result.posted else "[red]failed[/red]"
        detail = snippet(result.generated_text) if result.posted else result.outcome.reason or ""
        table.add_row(result.filename, status, detail)
    console.print(table)
    console.print(f"Posted: {len(report.posted)}, failed: {len(report.failed)}")

    if report.failed:
        raise typer.Exit(code=1)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the HTTP review service."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from stylereview.web.app import app as web_app

    console.print(f"Starting review service on http://{host}:{port}")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")
