"""PDF text extraction using PyMuPDF (fitz)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator

import fitz  # PyMuPDF

from docanswer.utils.text import normalize_whitespace

LOGGER = logging.getLogger(__name__)


def iter_text_parts(path: Path) -> Iterator[str]:
    """Yield text content from a PDF file page by page."""
    try:
        doc = fitz.open(path)
    except Exception as exc:
        LOGGER.error("Failed to open PDF %s: %s", path, exc)
        return

    try:
        for index in range(len(doc)):
            try:
                page = doc[index]
                text = page.get_text() or ""
                normalized = normalize_whitespace(text.splitlines())
                if normalized:
                    yield normalized + "\n"
            except Exception as exc:  # pragma: no cover
                LOGGER.warning("Failed to read page %s in %s: %s", index, path, exc)
    finally:
        doc.close()


def get_pdf_metadata(path: Path) -> Dict[str, str]:
    """Extract title and page count from a PDF file."""
    doc = fitz.open(path)
    try:
        metadata = doc.metadata or {}
        return {
            "title": metadata.get("title") or path.stem,
            "page_count": str(len(doc)),
        }
    finally:
        doc.close()


def extract_text(path: Path) -> str:
    return "".join(iter_text_parts(path))
