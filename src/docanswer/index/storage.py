"""SQLite document store backing the search corpus."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Sequence

from docanswer.errors import DocumentNotFoundError
from docanswer.ingestion.records import document_from_record, normalize_new_record
from docanswer.models import DocumentType, SearchableDocument

_COLUMNS = (
    "id, title, description, type, sections, tags, priority, user_id, company, "
    "source_path, sha256, created_at, last_updated"
)


class SQLiteDocumentStore:
    """Persistence layer for manually entered and imported documents."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id INTEGER PRIMARY KEY,
                    title TEXT NOT NULL,
                    description TEXT DEFAULT '',
                    type TEXT NOT NULL DEFAULT 'other',
                    sections TEXT NOT NULL DEFAULT '{}',
                    tags TEXT NOT NULL DEFAULT '[]',
                    priority TEXT,
                    user_id TEXT,
                    company TEXT,
                    source_path TEXT UNIQUE,
                    sha256 TEXT,
                    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')),
                    last_updated TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now'))
                )
                """
            )
            conn.execute(
                """
                CREATE TRIGGER IF NOT EXISTS documents_updated
                AFTER UPDATE OF title, description, type, sections, tags, priority, sha256
                ON documents
                BEGIN
                    UPDATE documents
                    SET last_updated = strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')
                    WHERE id = NEW.id;
                END;
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_type ON documents(type)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_company ON documents(company)"
            )

    def _insert(self, record: Mapping[str, Any], source_path: str | None, sha256: str | None) -> int:
        return self._conn.execute(
            """
            INSERT INTO documents(
                title, description, type, sections, tags, priority,
                user_id, company, source_path, sha256
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record["title"],
                record["description"],
                record["type"],
                json.dumps(record["sections"], ensure_ascii=False),
                json.dumps(record["tags"], ensure_ascii=False),
                record["priority"],
                record["user_id"],
                record["company"],
                source_path,
                sha256,
            ),
        ).lastrowid

    def add_document(self, record: Mapping[str, Any]) -> int:
        """Validate and store a new document, returning its id.

        Raises:
            InvalidDocumentError: if the record lacks a title or user id.
        """
        normalized = normalize_new_record(record)
        with self.transaction():
            return self._insert(normalized, None, None)

    def replace_source(
        self, records: Sequence[Mapping[str, Any]], source_path: Path | str, sha256: str
    ) -> List[str]:
        """Store every document imported from one file.

        A file with several records keys them as ``<path>#<index>``. When the
        file's hash changes, all documents previously imported from it are
        replaced, whatever their count was.

        Returns:
            One status per record: 'inserted', 'updated', or 'skipped' when
            the file is unchanged.
        """
        normalized = [normalize_new_record(record) for record in records]
        source = str(source_path)
        with self.transaction() as conn:
            existing = conn.execute(
                "SELECT id, sha256 FROM documents "
                "WHERE source_path = ? OR substr(source_path, 1, ?) = ?",
                (source, len(source) + 1, f"{source}#"),
            ).fetchall()

            if existing and all(row["sha256"] == sha256 for row in existing):
                return ["skipped"] * len(normalized)

            for row in existing:
                conn.execute("DELETE FROM documents WHERE id = ?", (row["id"],))

            status = "updated" if existing else "inserted"
            for index, record in enumerate(normalized):
                key = source if len(normalized) == 1 else f"{source}#{index}"
                self._insert(record, key, sha256)
            return [status] * len(normalized)

    def upsert_source(self, record: Mapping[str, Any], source_path: Path | str, sha256: str) -> str:
        """Store a single document imported from a file."""
        return self.replace_source([record], source_path, sha256)[0]

    def get_document(self, document_id: int) -> Dict[str, Any] | None:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM documents WHERE id = ?", (document_id,)
        ).fetchone()
        return _row_to_record(row) if row else None

    def require_document(self, document_id: int) -> Dict[str, Any]:
        record = self.get_document(document_id)
        if record is None:
            raise DocumentNotFoundError(document_id)
        return record

    def list_documents(
        self, *, user_id: str | None = None, company: str | None = None
    ) -> List[Dict[str, Any]]:
        """List stored documents, newest first."""
        clauses, params = _filters(user_id=user_id, company=company)
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM documents{clauses} ORDER BY last_updated DESC, id DESC",
            params,
        ).fetchall()
        return [_row_to_record(row) for row in rows]

    def load_corpus(
        self,
        *,
        document_type: DocumentType | None = None,
        company: str | None = None,
    ) -> List[SearchableDocument]:
        """Snapshot of the searchable corpus, newest first."""
        clauses, params = _filters(
            document_type=document_type.value if document_type else None,
            company=company,
        )
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM documents{clauses} ORDER BY last_updated DESC, id DESC",
            params,
        ).fetchall()
        return [document_from_record(_row_to_record(row)) for row in rows]

    def delete_document(self, document_id: int) -> bool:
        with self.transaction() as conn:
            cursor = conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))
        return cursor.rowcount > 0

    def remove_missing_files(self) -> int:
        """Remove imported documents whose source files no longer exist."""
        with self.transaction() as conn:
            rows = conn.execute(
                "SELECT id, source_path FROM documents WHERE source_path IS NOT NULL"
            ).fetchall()
            missing = [row for row in rows if not _source_file(row["source_path"]).exists()]
            for row in missing:
                conn.execute("DELETE FROM documents WHERE id = ?", (row["id"],))
        return len(missing)

    def get_stats(self) -> Dict[str, Any]:
        rows = self._conn.execute("SELECT type, sections FROM documents").fetchall()
        by_type: Dict[str, int] = {}
        section_count = 0
        for row in rows:
            by_type[row["type"]] = by_type.get(row["type"], 0) + 1
            section_count += len(json.loads(row["sections"] or "{}"))
        return {
            "document_count": len(rows),
            "section_count": section_count,
            "by_type": by_type,
        }


def _filters(**values: Any) -> tuple[str, list]:
    clauses = []
    params = []
    columns = {"user_id": "user_id", "company": "company", "document_type": "type"}
    for key, value in values.items():
        if value is not None:
            clauses.append(f"{columns[key]} = ?")
            params.append(value)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def _row_to_record(row: sqlite3.Row) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "title": row["title"],
        "description": row["description"] or "",
        "type": row["type"],
        "sections": json.loads(row["sections"] or "{}"),
        "tags": json.loads(row["tags"] or "[]"),
        "priority": row["priority"],
        "user_id": row["user_id"],
        "company": row["company"],
        "source_path": row["source_path"],
        "created_at": row["created_at"],
        "last_updated": row["last_updated"],
    }


def _source_file(source_path: str) -> Path:
    # Multi-record files are stored as "<path>#<index>".
    return Path(source_path.split("#", 1)[0])
