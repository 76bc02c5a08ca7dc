"""Command line interface for DocAnswer."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from docanswer.config import DB_PATH_ENV, AppConfig, LLMConfig
from docanswer.errors import DocAnswerError, DocumentNotFoundError
from docanswer.index.indexer import DEFAULT_IMPORT_USER, Indexer
from docanswer.index.scoring import MANUAL_WEIGHTS, STRUCTURED_WEIGHTS
from docanswer.index.search import Searcher
from docanswer.index.storage import SQLiteDocumentStore
from docanswer.ingestion.loader import load_json_records
from docanswer.ingestion.records import document_from_record
from docanswer.llm.classifier import MeetingNoteClassifier
from docanswer.llm.summarizer import Summarizer, SummaryRole, format_document_for_summary
from docanswer.models import DocumentType
from docanswer.query.analysis import SearchQuery
from docanswer.query.doctype import parse_type_filter, resolve_document_type
from docanswer.utils.text import truncate
from docanswer.web.app import app as web_app


console = Console()
app = typer.Typer(help="DocAnswer - keyword search and answers over business documents")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _resolve_db(db: Optional[Path]) -> Path:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _parse_type(value: Optional[str]) -> Optional[DocumentType]:
    try:
        return parse_type_filter(value)
    except ValueError:
        raise typer.BadParameter(f"Unknown document type: {value}") from None


@app.command()
def add(
    source: Path = typer.Argument(..., help="JSON file with one document or a list of documents."),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    user: str = typer.Option(DEFAULT_IMPORT_USER, "--user", help="Author user id"),
    company: Optional[str] = typer.Option(None, "--company", help="Tenant the documents belong to"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Store documents described in a JSON file."""
    _setup_logging(verbose)
    if not source.is_file():
        raise typer.BadParameter(f"File not found: {source}")

    resolved_db = _resolve_db(db)
    _ensure_db_parent(resolved_db)
    store = SQLiteDocumentStore(resolved_db)
    try:
        for record in load_json_records(source):
            record.setdefault("user_id", user)
            if company is not None:
                record.setdefault("company", company)
            try:
                document_id = store.add_document(record)
            except DocAnswerError as exc:
                console.print(f"[red]Skipped record: {exc}[/red]")
                continue
            console.print(f"Saved document [bold]{document_id}[/bold]: {record.get('title')}")
    finally:
        store.close()


@app.command("import")
def import_files(
    inputs: List[Path] = typer.Argument(
        ..., help="Files or folders with .json, .txt, .md or .pdf documents.", resolve_path=True
    ),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    doc_type: str = typer.Option(DocumentType.MANUAL.value, "--type", help="Type for text and PDF files"),
    user: str = typer.Option(DEFAULT_IMPORT_USER, "--user", help="Author user id"),
    company: Optional[str] = typer.Option(None, "--company", help="Tenant the documents belong to"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Import documents from files, skipping unchanged ones."""
    _setup_logging(verbose)
    document_type = _parse_type(doc_type) or DocumentType.MANUAL
    resolved_db = _resolve_db(db)
    _ensure_db_parent(resolved_db)

    store = SQLiteDocumentStore(resolved_db)
    indexer = Indexer(store, user_id=user, company=company, document_type=document_type)
    console.print(f"Importing into [bold]{resolved_db}[/bold]...")
    try:
        stats = indexer.index(inputs)
    finally:
        store.close()

    if not stats.processed_files:
        console.print("[yellow]No importable files found.[/yellow]")
        return
    console.print(
        f"Inserted: {stats.inserted}, updated: {stats.updated}, "
        f"skipped: {stats.skipped}, failed: {stats.failed}"
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Question to answer"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    doc_type: Optional[str] = typer.Option(None, "--type", help="Restrict to a document type"),
    company: Optional[str] = typer.Option(None, "--company", help="Tenant to search"),
    manual: bool = typer.Option(
        True, "--manual/--structured", help="Scoring for manual or file-structured documents"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Answer a question from the stored documents."""
    _setup_logging(verbose)
    if not query.strip():
        raise typer.BadParameter("Query must not be empty")

    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")

    document_type = resolve_document_type(_parse_type(doc_type), query)
    store = SQLiteDocumentStore(resolved_db)
    try:
        corpus = store.load_corpus(document_type=document_type, company=company)
    finally:
        store.close()

    searcher = Searcher(MANUAL_WEIGHTS if manual else STRUCTURED_WEIGHTS, top_k=AppConfig().top_k)
    result = searcher.search(SearchQuery(query, document_type), corpus)

    console.print(result.answer)
    if not result.results:
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Type")
    for item in result.results:
        table.add_row(
            f"{item.relevance_score:.1f}",
            item.document.id,
            item.document.title,
            item.document.document_type.value,
        )
    console.print(table)


@app.command("list")
def list_documents(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    user: Optional[str] = typer.Option(None, "--user", help="Only documents by this user"),
    company: Optional[str] = typer.Option(None, "--company", help="Only documents of this tenant"),
) -> None:
    """List stored documents."""
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Database not found, no documents.[/yellow]")
        return

    store = SQLiteDocumentStore(resolved_db)
    try:
        documents = store.list_documents(user_id=user, company=company)
    finally:
        store.close()

    if not documents:
        console.print("[yellow]No documents stored.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Sections")
    table.add_column("Updated")
    for record in documents:
        table.add_row(
            str(record["id"]),
            truncate(record["title"], 60),
            record["type"],
            ", ".join(record["sections"]),
            record["last_updated"] or "",
        )
    console.print(table)


@app.command()
def delete(
    document_id: int = typer.Argument(..., help="Document id"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Delete a stored document."""
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")

    store = SQLiteDocumentStore(resolved_db)
    try:
        deleted = store.delete_document(document_id)
    finally:
        store.close()

    if not deleted:
        console.print(f"[red]Document {document_id} not found.[/red]")
        raise typer.Exit(code=1)
    console.print(f"Deleted document {document_id}.")


@app.command()
def prune(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Remove imported documents whose files no longer exist."""
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Database not found, nothing to prune.[/yellow]")
        return

    store = SQLiteDocumentStore(resolved_db)
    try:
        removed = store.remove_missing_files()
    finally:
        store.close()
    console.print(f"Removed {removed} orphaned documents.")


@app.command()
def summarize(
    document_id: int = typer.Argument(..., help="Document id"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    role: SummaryRole = typer.Option(SummaryRole.EXECUTIVE, "--role", help="Audience of the summary"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Summarize a stored document with the configured LLM."""
    _setup_logging(verbose)
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")

    store = SQLiteDocumentStore(resolved_db)
    try:
        record = store.require_document(document_id)
    except DocumentNotFoundError as exc:
        console.print(f"[red]{exc}.[/red]")
        raise typer.Exit(code=1)
    finally:
        store.close()

    document = document_from_record(record)
    summarizer = Summarizer(LLMConfig.from_env())
    try:
        summary = summarizer.summarize(
            format_document_for_summary(document), role, document.document_type.value
        )
    except DocAnswerError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print(summary)


@app.command()
def classify(
    notes_file: Path = typer.Argument(..., help="Text or Markdown file with the meeting notes"),
    title: Optional[str] = typer.Option(None, "--title", help="Meeting title, defaults to the file name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Categorize meeting notes with the configured LLM."""
    _setup_logging(verbose)
    if not notes_file.is_file():
        raise typer.BadParameter(f"File not found: {notes_file}")

    notes = notes_file.read_text(encoding="utf-8")
    if not notes.strip():
        raise typer.BadParameter(f"No meeting notes in {notes_file}")

    classifier = MeetingNoteClassifier(LLMConfig.from_env())
    try:
        category = classifier.classify(title or notes_file.stem, notes)
    except DocAnswerError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print(category)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Start the web API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Warning: database not found, searches will find nothing.[/yellow]")

    # Requests without an explicit db use this path.
    os.environ[DB_PATH_ENV] = str(resolved_db)
    console.print(f"Starting web API on http://{host}:{port} (database: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":  # pragma: no cover
    app()
