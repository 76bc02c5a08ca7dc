"""Mapping between stored JSON records and ``SearchableDocument``."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from docanswer.errors import InvalidDocumentError
from docanswer.models import DocumentType, Priority, SearchableDocument, SectionContent

LOGGER = logging.getLogger(__name__)

DEFAULT_DOCUMENT_TYPE = DocumentType.MEETING
DEFAULT_PRIORITY = Priority.MEDIUM


def default_sections() -> Dict[str, Any]:
    return {"overview": "", "features": [], "pricing": [], "procedures": []}


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored timestamp; anything unreadable becomes "now" (UTC)."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str) and value.strip():
        text = value.strip().replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            LOGGER.debug("Unreadable timestamp %r", value)
        else:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
    return datetime.now(timezone.utc)


def parse_priority(value: Any) -> Priority | None:
    if isinstance(value, Priority):
        return value
    try:
        return Priority(str(value).strip().lower())
    except ValueError:
        return None


def parse_sections(value: Any) -> Dict[str, SectionContent]:
    if not isinstance(value, Mapping):
        return {}
    return {str(name): SectionContent.coerce(content) for name, content in value.items()}


def parse_tags(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value else ()
    if not isinstance(value, (list, tuple, set)):
        return ()
    return tuple(str(tag) for tag in value if tag)


def document_from_record(record: Mapping[str, Any]) -> SearchableDocument:
    """Build a document from a loosely-typed record with safe defaults."""
    title = record.get("title") or record.get("name") or ""
    return SearchableDocument(
        id=str(record.get("id", "")),
        title=str(title),
        sections=parse_sections(record.get("sections")),
        document_type=DocumentType.parse(record.get("type")),
        tags=parse_tags(record.get("tags")),
        priority_hint=parse_priority(record.get("priority")),
        last_updated=parse_timestamp(record.get("lastUpdated") or record.get("last_updated")),
        description=str(record.get("description") or ""),
        user_id=record.get("userId") or record.get("user_id"),
        company=record.get("companyName") or record.get("company"),
    )


def normalize_new_record(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a record about to be stored and fill in defaults.

    Raises:
        InvalidDocumentError: if ``title`` or ``user_id`` is missing.
    """
    title = record.get("title") or record.get("name")
    user_id = record.get("user_id") or record.get("userId")
    if not title or not user_id:
        raise InvalidDocumentError("タイトルとユーザーIDが必要です")

    sections = record.get("sections")
    if not isinstance(sections, Mapping) or not sections:
        sections = default_sections()

    priority = parse_priority(record.get("priority")) or DEFAULT_PRIORITY
    return {
        "title": str(title),
        "description": str(record.get("description") or ""),
        "type": DocumentType.parse(record.get("type") or DEFAULT_DOCUMENT_TYPE.value).value,
        "sections": {
            str(name): SectionContent.coerce(content).to_json()
            for name, content in sections.items()
        },
        "tags": list(parse_tags(record.get("tags"))),
        "priority": priority.value,
        "user_id": str(user_id),
        "company": record.get("company") or record.get("companyName"),
    }
