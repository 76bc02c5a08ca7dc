"""FastAPI application exposing search, documents, summaries and classification."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from docanswer.config import AppConfig, LLMConfig
from docanswer.errors import (
    ClassificationError,
    DocumentNotFoundError,
    InvalidDocumentError,
    LLMUnavailableError,
    SummarizationError,
)
from docanswer.index.indexer import DEFAULT_IMPORT_USER, Indexer
from docanswer.index.scoring import MANUAL_WEIGHTS, STRUCTURED_WEIGHTS, ScoringWeights
from docanswer.index.search import AnswerResult, Searcher
from docanswer.index.storage import SQLiteDocumentStore
from docanswer.ingestion.records import document_from_record
from docanswer.llm.classifier import MeetingNoteClassifier
from docanswer.llm.summarizer import Summarizer, SummaryRole, format_document_for_summary
from docanswer.models import DocumentType, SearchableDocument
from docanswer.query.analysis import SearchQuery
from docanswer.query.doctype import parse_type_filter, resolve_document_type

LOGGER = logging.getLogger(__name__)

QUERY_REQUIRED = "検索クエリが必要です"
SEARCH_FAILED = "検索に失敗しました"

app = FastAPI(title="DocAnswer", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class DocumentPayload(BaseModel):
    title: str | None = None
    description: str = ""
    type: str | None = None
    sections: Dict[str, Any] | None = None
    tags: List[str] = Field(default_factory=list)
    priority: str | None = None
    user_id: str | None = None
    company: str | None = None


class IndexPayload(BaseModel):
    paths: List[str]
    db: str | None = None
    user_id: str = DEFAULT_IMPORT_USER
    company: str | None = None
    type: str | None = None


class SummarizePayload(BaseModel):
    content: str | None = None
    document_id: int | None = None
    role: SummaryRole = SummaryRole.EXECUTIVE
    document_type: str | None = None
    db: str | None = None


class ClassifyPayload(BaseModel):
    title: str | None = None
    notes: str | None = None


def _resolve_db_path(db: Path | str | None) -> Path:
    config = AppConfig(db_path=Path(db) if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _open_store(db: Path | str | None) -> SQLiteDocumentStore:
    resolved_db = _resolve_db_path(db)
    _ensure_db_parent(resolved_db)
    return SQLiteDocumentStore(resolved_db)


def _get_summarizer() -> Summarizer:
    return Summarizer(LLMConfig.from_env())


def _get_classifier() -> MeetingNoteClassifier:
    return MeetingNoteClassifier(LLMConfig.from_env())


def _parse_type(value: str | None) -> DocumentType | None:
    try:
        return parse_type_filter(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown document type: {value}") from None


def _load_corpus(
    db: Path | None, document_type: DocumentType | None, company: str | None
) -> List[SearchableDocument]:
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        return []
    store = SQLiteDocumentStore(resolved_db)
    try:
        return store.load_corpus(document_type=document_type, company=company)
    finally:
        store.close()


def _run_search(
    q: str | None,
    type_: str | None,
    company: str | None,
    db: Path | None,
    weights: ScoringWeights,
) -> tuple[str, AnswerResult, str | None]:
    query_text = (q or "").strip()
    if not query_text:
        raise HTTPException(status_code=400, detail=QUERY_REQUIRED)

    explicit = _parse_type(type_)
    document_type = resolve_document_type(explicit, query_text)
    try:
        corpus = _load_corpus(db, document_type, company)
    except Exception as exc:
        LOGGER.exception("Search failed: %s", exc)
        raise HTTPException(status_code=500, detail=SEARCH_FAILED) from exc

    searcher = Searcher(weights, top_k=AppConfig().top_k)
    result = searcher.search(SearchQuery(query_text, document_type), corpus)
    if explicit is not None:
        # Echo the requested filter, e.g. "general".
        label = type_.strip()
    else:
        label = document_type.value if document_type else None
    return query_text, result, label


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/search")
async def search_structured(
    q: str | None = None,
    type: str | None = None,
    company: str | None = None,
    db: Path | None = None,
) -> Dict[str, Any]:
    """Search documents structured from uploaded files."""
    query_text, result, document_type = _run_search(q, type, company, db, STRUCTURED_WEIGHTS)
    return {
        "success": True,
        "query": query_text,
        "documentType": document_type,
        "answer": result.answer,
        "sources": result.sources,
        "sectionCount": result.section_count,
    }


@app.get("/search-manual")
async def search_manual(
    q: str | None = None,
    type: str | None = None,
    company: str | None = None,
    db: Path | None = None,
) -> Dict[str, Any]:
    """Search manually entered documents."""
    query_text, result, document_type = _run_search(q, type, company, db, MANUAL_WEIGHTS)
    return {
        "success": True,
        "query": query_text,
        "documentType": document_type,
        "answer": result.answer,
        "sources": result.sources,
        "documentCount": result.result_count,
    }


@app.post("/documents")
async def save_document(payload: DocumentPayload, db: Path | None = None) -> Dict[str, Any]:
    store = _open_store(db)
    try:
        document_id = store.add_document(payload.model_dump())
    except InvalidDocumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    finally:
        store.close()
    return {"success": True, "documentId": document_id, "message": "文書が正常に保存されました"}


@app.get("/documents")
async def list_documents(
    user_id: str | None = None,
    company: str | None = None,
    db: Path | None = None,
) -> Dict[str, Any]:
    """List stored documents, newest first."""
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        return {
            "success": True,
            "documents": [],
            "stats": {"document_count": 0, "section_count": 0, "by_type": {}},
        }

    store = SQLiteDocumentStore(resolved_db)
    try:
        documents = store.list_documents(user_id=user_id, company=company)
        stats = store.get_stats()
    finally:
        store.close()
    return {"success": True, "documents": documents, "stats": stats}


@app.delete("/documents/{doc_id}")
async def delete_document(doc_id: int, db: Path | None = None) -> Dict[str, Any]:
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        raise HTTPException(status_code=404, detail="文書が見つかりません")

    store = SQLiteDocumentStore(resolved_db)
    try:
        deleted = store.delete_document(doc_id)
    finally:
        store.close()

    if not deleted:
        raise HTTPException(status_code=404, detail="文書が見つかりません")
    return {"success": True, "message": "文書が正常に削除されました"}


def _run_index_job(
    paths: List[Path], resolved_db: Path, user_id: str, company: str | None, document_type: DocumentType
) -> Dict[str, Any]:
    store = SQLiteDocumentStore(resolved_db)
    indexer = Indexer(store, user_id=user_id, company=company, document_type=document_type)
    try:
        stats = indexer.index(paths)
    finally:
        store.close()

    return {
        "inserted": stats.inserted,
        "updated": stats.updated,
        "skipped": stats.skipped,
        "failed": stats.failed,
        "processed_files": [str(path) for path in stats.processed_files],
    }


@app.post("/index")
async def index_documents(payload: IndexPayload) -> Dict[str, Any]:
    if not payload.paths:
        raise HTTPException(status_code=400, detail="No path provided")

    resolved_paths = []
    for raw in payload.paths:
        clean_path = raw.strip().replace("\r", "").replace("\n", "")
        if not clean_path:
            continue
        if "\0" in clean_path:
            raise HTTPException(status_code=400, detail="Invalid path: contains null byte")
        path = Path(clean_path).expanduser()
        if not path.exists():
            raise HTTPException(status_code=404, detail=f"Path not found: {clean_path}")
        resolved_paths.append(path)

    document_type = _parse_type(payload.type) or DocumentType.MANUAL
    resolved_db = _resolve_db_path(payload.db)
    _ensure_db_parent(resolved_db)

    try:
        stats = await asyncio.to_thread(
            _run_index_job, resolved_paths, resolved_db, payload.user_id, payload.company, document_type
        )
    except Exception as exc:  # pragma: no cover
        LOGGER.exception("Indexing failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return {"status": "ok", "db": str(resolved_db), "stats": stats}


@app.post("/summarize")
async def summarize(payload: SummarizePayload) -> Dict[str, Any]:
    content = payload.content
    document_type = payload.document_type or "general"

    if not content and payload.document_id is not None:
        resolved_db = _resolve_db_path(payload.db)
        if not resolved_db.exists():
            raise HTTPException(status_code=404, detail="文書が見つかりません")
        store = SQLiteDocumentStore(resolved_db)
        try:
            record = store.require_document(payload.document_id)
        except DocumentNotFoundError as exc:
            raise HTTPException(status_code=404, detail="文書が見つかりません") from exc
        finally:
            store.close()
        document = document_from_record(record)
        content = format_document_for_summary(document)
        if payload.document_type is None:
            document_type = document.document_type.value

    if not content or not content.strip():
        raise HTTPException(status_code=400, detail="要約する内容が必要です")

    summarizer = _get_summarizer()
    try:
        summary = await asyncio.to_thread(summarizer.summarize, content, payload.role, document_type)
    except LLMUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except SummarizationError as exc:
        raise HTTPException(status_code=502, detail="要約の生成に失敗しました") from exc

    return {"success": True, "summary": summary, "role": payload.role.value}


@app.post("/classify")
async def classify(payload: ClassifyPayload) -> Dict[str, Any]:
    """Categorize a meeting note."""
    if not (payload.title or "").strip() or not (payload.notes or "").strip():
        raise HTTPException(status_code=400, detail="議事録の内容が必要です")

    classifier = _get_classifier()
    try:
        category = await asyncio.to_thread(classifier.classify, payload.title, payload.notes)
    except LLMUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except ClassificationError as exc:
        raise HTTPException(status_code=502, detail="議事録の分類に失敗しました") from exc

    return {"success": True, "category": category}
