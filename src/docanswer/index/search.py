"""Keyword relevance search over an in-memory corpus."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from docanswer.index.answer import compose_answer
from docanswer.index.scoring import MANUAL_WEIGHTS, ScoringWeights, score_document
from docanswer.models import DocumentType, SearchableDocument
from docanswer.query.analysis import QueryAnalysis, SearchQuery, analyze_query
from docanswer.query.doctype import resolve_document_type

LOGGER = logging.getLogger(__name__)

DEFAULT_TOP_K = 5


@dataclass(frozen=True, slots=True)
class ScoredDocument:
    document: SearchableDocument
    relevance_score: float


@dataclass(slots=True)
class AnswerResult:
    answer: str
    analysis: QueryAnalysis
    document_type: DocumentType | None = None
    results: List[ScoredDocument] = field(default_factory=list)

    @property
    def sources(self) -> List[str]:
        return [item.document.title for item in self.results]

    @property
    def result_count(self) -> int:
        return len(self.results)

    @property
    def section_count(self) -> int:
        return sum(len(item.document.sections) for item in self.results)


class Searcher:
    """Scores, ranks and answers queries against a read-only corpus snapshot.

    The searcher holds no per-call state and can be shared between threads.
    """

    def __init__(self, weights: ScoringWeights = MANUAL_WEIGHTS, *, top_k: int = DEFAULT_TOP_K) -> None:
        self.weights = weights
        self.top_k = top_k

    def rank(
        self, analysis: QueryAnalysis, corpus: Iterable[SearchableDocument]
    ) -> List[ScoredDocument]:
        scored: List[ScoredDocument] = []
        for document in corpus:
            score = score_document(document, analysis, self.weights)
            if score > 0:
                scored.append(ScoredDocument(document, score))

        if self.weights.prefer_recent:
            # Stable sorts: recency first, then score, so score wins and
            # recency only breaks ties.
            scored.sort(key=_recency_key, reverse=True)
        scored.sort(key=lambda item: item.relevance_score, reverse=True)
        return scored[: self.top_k]

    def search(self, query: SearchQuery, corpus: Iterable[SearchableDocument]) -> AnswerResult:
        analysis = analyze_query(query.raw_text)
        document_type = resolve_document_type(query.type_filter, query.raw_text)
        if document_type is not None:
            corpus = (doc for doc in corpus if doc.document_type is document_type)

        results = self.rank(analysis, corpus)
        LOGGER.debug(
            "Query %r: intent=%s priority=%s type=%s -> %d results",
            query.raw_text,
            analysis.intent.value,
            analysis.priority_multiplier,
            document_type.value if document_type else None,
            len(results),
        )
        answer = compose_answer([item.document for item in results], analysis.intent)
        return AnswerResult(
            answer=answer,
            analysis=analysis,
            document_type=document_type,
            results=results,
        )


def _recency_key(item: ScoredDocument) -> float:
    updated = item.document.last_updated
    return updated.timestamp() if updated is not None else float("-inf")


def search(
    query: SearchQuery | str,
    corpus: Iterable[SearchableDocument],
    *,
    weights: ScoringWeights = MANUAL_WEIGHTS,
) -> AnswerResult:
    if isinstance(query, str):
        query = SearchQuery(query)
    return Searcher(weights).search(query, corpus)
