"""Keyword extraction for free-text queries."""

from __future__ import annotations

from typing import FrozenSet

# Longest first so that "について" is removed before its pieces.
FILLER_PHRASES = ("について", "教えて", "とは", "の", "を")
PUNCTUATION = ("、", "。", "！", "？")


def strip_fillers(text: str) -> str:
    """Replace particles and punctuation with spaces."""
    for token in FILLER_PHRASES + PUNCTUATION:
        text = text.replace(token, " ")
    return text


def extract_keywords(text: str) -> FrozenSet[str]:
    """Return the lowercased query plus its significant tokens.

    Blank input yields an empty set so that nothing can match.
    """
    lowered = (text or "").lower().strip()
    if not lowered:
        return frozenset()

    words = [word for word in strip_fillers(lowered).split() if len(word) > 1]
    return frozenset([lowered, *words])
