"""Document import pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from docanswer.index.storage import SQLiteDocumentStore
from docanswer.ingestion.loader import load_records
from docanswer.models import DocumentType
from docanswer.utils.files import compute_sha256, iter_document_paths

LOGGER = logging.getLogger(__name__)

DEFAULT_IMPORT_USER = "import"


def find_documents(paths: Sequence[Path]) -> list[Path]:
    """Find all importable files under the given paths."""
    return list(iter_document_paths(paths))


@dataclass(slots=True)
class IndexStats:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    processed_files: list[Path] = field(default_factory=list)

    def increment(self, status: str) -> None:
        if status == "inserted":
            self.inserted += 1
        elif status == "updated":
            self.updated += 1
        elif status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1


class Indexer:
    """Loads files into the document store, skipping unchanged ones."""

    def __init__(
        self,
        store: SQLiteDocumentStore,
        *,
        user_id: str = DEFAULT_IMPORT_USER,
        company: str | None = None,
        document_type: DocumentType = DocumentType.MANUAL,
    ) -> None:
        self.store = store
        self.user_id = user_id
        self.company = company
        self.document_type = document_type

    def index(self, paths: Sequence[Path]) -> IndexStats:
        """Import every supported file found under the given paths."""
        files = find_documents(paths)
        if not files:
            LOGGER.warning("No importable files found")
            return IndexStats()

        stats = IndexStats()
        for path in files:
            try:
                LOGGER.info("Processing: %s", path)
                for status in self._index_single(path):
                    stats.increment(status)
            except Exception as exc:
                LOGGER.error("Failed to process %s: %s", path, exc)
                stats.failed += 1
            stats.processed_files.append(path)
        return stats

    def _index_single(self, path: Path) -> list[str]:
        records = load_records(
            path,
            user_id=self.user_id,
            company=self.company,
            document_type=self.document_type,
        )
        sha256 = compute_sha256(path)
        if not records:
            LOGGER.warning("No documents extracted from %s", path)
            self.store.replace_source([], path, sha256)
            return ["skipped"]
        return self.store.replace_source(records, path, sha256)
