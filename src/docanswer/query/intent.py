"""Query intent and urgency classification."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Sequence, Tuple


class Intent(str, Enum):
    PRICING = "pricing"
    FEATURES = "features"
    PROCEDURES = "procedures"
    RULES = "rules"
    TERMS = "terms"
    SUPPORT = "support"
    GENERAL = "general"


# Evaluated in order, first match wins.
INTENT_RULES: Sequence[Tuple[Intent, Tuple[str, ...]]] = (
    (Intent.PRICING, ("料金", "価格", "費用", "price", "pricing", "cost", "fee")),
    (Intent.FEATURES, ("機能", "feature")),
    (Intent.PROCEDURES, ("手順", "流れ", "方法", "procedure", "how to")),
    (Intent.RULES, ("規則", "規定", "ポリシー", "rule", "regulation")),
    (Intent.TERMS, ("契約", "条項", "条件", "contract", "clause", "terms")),
    (Intent.SUPPORT, ("サポート", "支援", "support")),
)

# Section names that answer each intent, matched as substrings of the
# lowercased section name.
CANONICAL_SECTIONS: Dict[Intent, Tuple[str, ...]] = {
    Intent.PRICING: ("pricing", "料金", "価格", "費用"),
    Intent.FEATURES: ("features", "feature", "機能"),
    Intent.PROCEDURES: ("procedures", "procedure", "手順", "流れ"),
    Intent.RULES: ("rules", "規則", "規定"),
    Intent.TERMS: ("terms", "条項", "契約"),
    Intent.SUPPORT: ("support", "サポート"),
}

URGENT_CUES = ("緊急", "重要", "urgent", "important")
DETAIL_CUES = ("詳細", "詳しく", "detail")


def classify_intent(text: str) -> Intent:
    """Classify lowercased query text into an intent."""
    for intent, cues in INTENT_RULES:
        if any(cue in text for cue in cues):
            return intent
    return Intent.GENERAL


def detect_priority(text: str) -> int:
    """Return the query priority multiplier (1, 2 or 3)."""
    if any(cue in text for cue in URGENT_CUES):
        return 3
    if any(cue in text for cue in DETAIL_CUES):
        return 2
    return 1


def matches_intent_section(intent: Intent, section_name: str) -> bool:
    names = CANONICAL_SECTIONS.get(intent)
    if not names:
        return False
    lowered = section_name.lower()
    return any(name in lowered for name in names)
