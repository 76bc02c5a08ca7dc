"""Infer the document type a query is about."""

from __future__ import annotations

from typing import Any, Sequence, Tuple

from docanswer.models import DocumentType

DOCUMENT_TYPE_RULES: Sequence[Tuple[DocumentType, Tuple[str, ...]]] = (
    (DocumentType.MEETING, ("打ち合わせ", "資料", "meeting", "議事録")),
    (DocumentType.POLICY, ("規則", "規定", "policy")),
    (DocumentType.CONTRACT, ("契約", "規約", "contract")),
    (DocumentType.MANUAL, ("マニュアル", "手順", "manual")),
)


def detect_document_type(query: str) -> DocumentType | None:
    """Return the type the query points at, or ``None`` to search everything."""
    lowered = (query or "").lower()
    for document_type, cues in DOCUMENT_TYPE_RULES:
        if any(cue in lowered for cue in cues):
            return document_type
    return None


def parse_type_filter(value: Any) -> DocumentType | None:
    """Parse an explicit filter; blank means no filter.

    Raises:
        ValueError: if the value is not a known document type.
    """
    if value is None:
        return None
    if isinstance(value, DocumentType):
        return value
    text = str(value).strip().lower()
    if not text:
        return None
    if text == "general":
        return DocumentType.OTHER
    return DocumentType(text)


def resolve_document_type(explicit: DocumentType | None, query: str) -> DocumentType | None:
    if explicit is not None:
        return explicit
    return detect_document_type(query)
