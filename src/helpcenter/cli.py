"""Command line interface for HelpCenter."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from helpcenter.config import AppConfig
from helpcenter.index.indexer import DocumentIndex
from helpcenter.index.search import Searcher
from helpcenter.rendering.markdown import parse
from helpcenter.utils.files import load_corpus


console = Console()
app = typer.Typer(help="HelpCenter - browse and search markdown help documents")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _load_index(content: Path | None) -> DocumentIndex:
    config = AppConfig(content_dir=content if content is not None else AppConfig().content_dir)
    content_dir = config.resolve_content_dir(Path.cwd())
    if not content_dir.is_dir():
        raise typer.BadParameter(f"Content directory not found: {content_dir}")
    corpus = load_corpus([content_dir], base_dir=content_dir, pattern=config.pattern)
    return DocumentIndex(corpus)


@app.command("list")
def list_documents(
    content: Path = typer.Option(None, "--content", help="Directory with markdown documents"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List every help document."""
    _setup_logging(verbose)
    index = _load_index(content)

    documents = index.list_documents()
    if not documents:
        console.print("[yellow]No documents found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Path")
    for document in documents:
        table.add_row(escape(document.id), escape(document.title), escape(document.path))
    console.print(table)


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    content: Path = typer.Option(None, "--content", help="Directory with markdown documents"),
    limit: int = typer.Option(AppConfig().search_limit, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search the help documents for a phrase."""
    _setup_logging(verbose)
    index = _load_index(content)
    searcher = Searcher(index)

    results = searcher.search(query)[: max(limit, 1)]
    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Document")
    table.add_column("Line")
    table.add_column("Snippet")

    for result in results:
        first = result.matches[0]
        table.add_row(
            str(result.score),
            escape(result.document.title),
            str(first.line_number),
            escape(first.text[:180]),
        )

    console.print(table)


@app.command()
def show(
    doc_id: str = typer.Argument(..., help="Document id as shown by 'list'"),
    content: Path = typer.Option(None, "--content", help="Directory with markdown documents"),
    html: bool = typer.Option(False, "--html", help="Print the rendered HTML"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Render a single document."""
    _setup_logging(verbose)
    index = _load_index(content)

    document = index.get_document(doc_id)
    if document is None:
        raise typer.BadParameter(f"Document not found: {doc_id}")

    parsed = parse(index.get_content(document.path))
    if html:
        typer.echo(parsed.html_content)
        return

    console.print(f"[bold]{escape(document.title)}[/bold]")
    frontmatter = parsed.frontmatter
    for label, value in (
        ("Author", frontmatter.author),
        ("Date", frontmatter.date),
        ("Category", frontmatter.category),
        ("Read time", frontmatter.read_time_minutes),
    ):
        if value is not None:
            console.print(f"{label}: {escape(str(value))}")
    console.print(escape(parsed.excerpt))


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    content: Path = typer.Option(None, "--content", help="Directory with markdown documents"),
) -> None:
    """Start the JSON API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from helpcenter.web.app import app as web_app, configure

    config = AppConfig(content_dir=content if content is not None else AppConfig().content_dir)
    content_dir = config.resolve_content_dir(Path.cwd())
    if not content_dir.is_dir():
        console.print("[yellow]Warning: content directory not found, the index will be empty.[/yellow]")
    configure(config)

    console.print(f"Starting web interface on http://{host}:{port} (content: {content_dir})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":  # pragma: no cover
    app()
