"""Core DocAnswer data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Tuple


class DocumentType(str, Enum):
    MEETING = "meeting"
    POLICY = "policy"
    CONTRACT = "contract"
    MANUAL = "manual"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "DocumentType":
        """Map a raw value to a document type, falling back to ``OTHER``."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if text == "general":
            return cls.OTHER
        try:
            return cls(text)
        except ValueError:
            return cls.OTHER


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class SectionContent:
    """Section body: either a single text or an ordered list of items."""

    kind: str
    items: Tuple[str, ...]

    TEXT = "text"
    LIST = "list"

    @classmethod
    def text(cls, value: str) -> "SectionContent":
        return cls(cls.TEXT, (value,))

    @classmethod
    def of_list(cls, values: List[str] | Tuple[str, ...]) -> "SectionContent":
        return cls(cls.LIST, tuple(values))

    @classmethod
    def coerce(cls, value: Any) -> "SectionContent":
        if isinstance(value, SectionContent):
            return value
        if value is None:
            return cls.text("")
        if isinstance(value, str):
            return cls.text(value)
        if isinstance(value, (list, tuple)):
            return cls.of_list([str(item) for item in value if item is not None])
        return cls.text(str(value))

    def flatten(self, separator: str = " ") -> str:
        if self.kind == self.TEXT:
            return self.items[0] if self.items else ""
        return separator.join(self.items)

    def is_empty(self) -> bool:
        return not any(item.strip() for item in self.items)

    def to_json(self) -> Any:
        if self.kind == self.TEXT:
            return self.flatten()
        return list(self.items)


@dataclass(frozen=True, slots=True)
class SearchableDocument:
    """One unit of searchable content with named sections."""

    id: str
    title: str
    sections: Dict[str, SectionContent] = field(default_factory=dict)
    document_type: DocumentType = DocumentType.OTHER
    tags: Tuple[str, ...] = ()
    priority_hint: Priority | None = None
    last_updated: datetime | None = None
    description: str = ""
    user_id: str | None = None
    company: str | None = None

    def section(self, name: str) -> SectionContent | None:
        return self.sections.get(name)

    def has_content(self, name: str) -> bool:
        content = self.sections.get(name)
        return content is not None and not content.is_empty()
