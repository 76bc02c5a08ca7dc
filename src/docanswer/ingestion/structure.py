"""Split plain text into canonical sections by heading detection."""

from __future__ import annotations

import re
from typing import Dict, List, Sequence, Tuple

MAX_HEADING_CHARS = 100
LEAD_SECTION = "overview"

HEADING_PATTERNS = (
    re.compile(r"概要|について|introduction", re.IGNORECASE),
    re.compile(r"機能|できること|features", re.IGNORECASE),
    re.compile(r"料金|価格|pricing", re.IGNORECASE),
    re.compile(r"フロー|流れ|手順|flow", re.IGNORECASE),
    re.compile(r"お問い合わせ|サポート|contact|support", re.IGNORECASE),
    re.compile(r"^\d+\.\s*[^。\n]+"),
    re.compile(r"^[A-Z][A-Z\s]+[A-Z]$"),
)

# (category, title cues, content cues), first match wins.
SECTION_RULES: Sequence[Tuple[str, Tuple[str, ...], Tuple[str, ...]]] = (
    ("overview", ("概要", "について", "introduction", "overview"), ("企業様が",)),
    ("features", ("機能", "できること", "features"), ("パフォーマンス", "aiが改善")),
    ("pricing", ("料金", "価格", "pricing"), ("円", "プラン")),
    ("procedures", ("フロー", "流れ", "手順", "flow"), ("ステップ", "手順")),
    ("support", ("お問い合わせ", "サポート", "contact", "support"), ("連絡", "電話")),
)


def is_heading(line: str) -> bool:
    if len(line) >= MAX_HEADING_CHARS:
        return False
    return any(pattern.search(line) for pattern in HEADING_PATTERNS)


def classify_section(title: str, content: str) -> str:
    """Map a heading and its body onto a canonical section name."""
    title_lower = title.lower()
    content_lower = content.lower()
    for category, title_cues, content_cues in SECTION_RULES:
        if any(cue in title_lower for cue in title_cues):
            return category
        if any(cue in content_lower for cue in content_cues):
            return category
    return "other"


def structure_text(text: str) -> Dict[str, str]:
    """Group lines under detected headings, keyed by canonical section.

    Text before the first heading becomes the overview; sections that land
    on the same category are concatenated in order.
    """
    blocks: List[Tuple[str, List[str]]] = []
    lead: List[str] = []

    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line:
            continue
        if is_heading(line):
            blocks.append((line, []))
        elif blocks:
            blocks[-1][1].append(line)
        else:
            lead.append(line)

    sections: Dict[str, str] = {}
    if lead:
        sections[LEAD_SECTION] = " ".join(lead)

    for heading, lines in blocks:
        content = " ".join(lines)
        category = classify_section(heading, content)
        body = content or heading
        if category in sections and sections[category]:
            sections[category] = f"{sections[category]} {body}"
        else:
            sections[category] = body
    return sections
