"""Compose a short answer from the best-ranked document."""

from __future__ import annotations

from typing import Sequence, Tuple

from docanswer.models import SearchableDocument
from docanswer.query.intent import Intent, matches_intent_section

NO_RESULTS_ANSWER = "該当する情報が見つかりませんでした。"
MORE_RESULTS_NOTE = "他にも関連する情報があります。"
OVERVIEW_SECTIONS = ("overview", "概要")
OVERVIEW_LABEL = "概要"


def select_section(document: SearchableDocument, intent: Intent) -> Tuple[str, str]:
    """Return ``(label, content)`` of the section that best answers the intent.

    Falls back to the overview, then to the first section, then to an empty
    overview.
    """
    for name, content in document.sections.items():
        if matches_intent_section(intent, name) and not content.is_empty():
            return _label(name), content.flatten("\n")

    for name in OVERVIEW_SECTIONS:
        content = document.section(name)
        if content is not None:
            return OVERVIEW_LABEL, content.flatten("\n")

    for name, content in document.sections.items():
        return _label(name), content.flatten("\n")

    return OVERVIEW_LABEL, ""


def _label(name: str) -> str:
    return OVERVIEW_LABEL if name in OVERVIEW_SECTIONS else name


def compose_answer(documents: Sequence[SearchableDocument], intent: Intent) -> str:
    if not documents:
        return NO_RESULTS_ANSWER

    best = documents[0]
    label, content = select_section(best, intent)
    answer = f"{best.title}について\n\n{label}\n{content}"
    if len(documents) > 1:
        answer += f"\n\n{MORE_RESULTS_NOTE}"
    return answer
