"""Query parsing: keywords, intent and priority in one pass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet

from docanswer.models import DocumentType
from docanswer.query.intent import Intent, classify_intent, detect_priority
from docanswer.query.keywords import extract_keywords


@dataclass(frozen=True, slots=True)
class SearchQuery:
    raw_text: str
    type_filter: DocumentType | None = None


@dataclass(frozen=True, slots=True)
class QueryAnalysis:
    keywords: FrozenSet[str]
    intent: Intent
    priority_multiplier: int = 1


def analyze_query(text: str) -> QueryAnalysis:
    lowered = (text or "").lower()
    return QueryAnalysis(
        keywords=extract_keywords(text),
        intent=classify_intent(lowered),
        priority_multiplier=detect_priority(lowered),
    )
