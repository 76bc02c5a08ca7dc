"""Turn files on disk into document records."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from docanswer.ingestion.pdf_loader import extract_text, get_pdf_metadata
from docanswer.ingestion.structure import structure_text
from docanswer.models import DocumentType

LOGGER = logging.getLogger(__name__)


def load_json_records(path: Path) -> List[Dict[str, Any]]:
    """Read one record or a list of records from a JSON file."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    raise ValueError(f"{path} does not contain a JSON object or list")


def record_from_text(
    text: str,
    *,
    title: str,
    document_type: DocumentType = DocumentType.MANUAL,
) -> Dict[str, Any]:
    return {
        "title": title,
        "type": document_type.value,
        "sections": structure_text(text),
    }


def load_records(
    path: Path,
    *,
    user_id: str,
    company: str | None = None,
    document_type: DocumentType = DocumentType.MANUAL,
) -> List[Dict[str, Any]]:
    """Load the records a file contributes to the corpus."""
    suffix = path.suffix.lower()
    if suffix == ".json":
        records = load_json_records(path)
    elif suffix == ".pdf":
        meta = get_pdf_metadata(path)
        records = [record_from_text(extract_text(path), title=meta["title"], document_type=document_type)]
    else:
        text = path.read_text(encoding="utf-8")
        records = [record_from_text(text, title=path.stem, document_type=document_type)]

    for record in records:
        record.setdefault("user_id", user_id)
        if company is not None:
            record.setdefault("company", company)
    LOGGER.debug("Loaded %d record(s) from %s", len(records), path)
    return records
