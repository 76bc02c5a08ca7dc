"""Relevance scoring of documents against an analysed query."""

from __future__ import annotations

from dataclasses import dataclass

from docanswer.models import Priority, SearchableDocument
from docanswer.query.analysis import QueryAnalysis
from docanswer.query.intent import matches_intent_section


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    """Points awarded per match type.

    Title matches must outweigh section matches and the intent-section bonus
    must outweigh any single keyword match.
    """

    title: float = 3.0
    tag: float = 2.0
    section: float = 1.0
    intent_section: float = 5.0
    high_priority_factor: float = 1.5
    prefer_recent: bool = True


# Manually entered documents carry tags and an author priority.
MANUAL_WEIGHTS = ScoringWeights()

# Documents structured from uploaded files have neither.
STRUCTURED_WEIGHTS = ScoringWeights(
    title=2.0,
    tag=0.0,
    section=1.0,
    intent_section=3.0,
    prefer_recent=False,
)


def has_intent_section(document: SearchableDocument, analysis: QueryAnalysis) -> bool:
    return any(
        matches_intent_section(analysis.intent, name) and document.has_content(name)
        for name in document.sections
    )


def score_document(
    document: SearchableDocument,
    analysis: QueryAnalysis,
    weights: ScoringWeights = MANUAL_WEIGHTS,
) -> float:
    """Score a document; 0 means it must not be returned."""
    score = 0.0
    keywords = analysis.keywords

    title = (document.title or "").lower()
    score += weights.title * sum(1 for keyword in keywords if keyword in title)

    if weights.tag:
        for tag in document.tags:
            tag_lower = tag.lower()
            score += weights.tag * sum(1 for keyword in keywords if keyword in tag_lower)

    for content in document.sections.values():
        text = content.flatten(" ").lower()
        score += weights.section * sum(1 for keyword in keywords if keyword in text)

    if has_intent_section(document, analysis):
        score += weights.intent_section

    if document.priority_hint is Priority.HIGH:
        score *= weights.high_priority_factor

    return score * analysis.priority_multiplier
