"""Meeting-note categorization over a chat-completion API."""

from __future__ import annotations

import logging
from typing import Any

from docanswer.config import LLMConfig
from docanswer.errors import ClassificationError
from docanswer.llm.client import ChatClient

LOGGER = logging.getLogger(__name__)

FALLBACK_CATEGORY = "その他"
MEETING_CATEGORIES = (
    "営業・商談",
    "プロジェクト管理",
    "人事・採用",
    "経営・戦略",
    "技術・開発",
    "顧客対応",
    FALLBACK_CATEGORY,
)

CLASSIFY_SYSTEM_PROMPT = "あなたは議事録を適切なカテゴリに分類する専門家です。カテゴリ名のみを回答してください。"
CLASSIFY_TEMPERATURE = 0.3
CLASSIFY_MAX_TOKENS = 50


def build_classification_prompt(title: str, notes: str) -> str:
    candidates = "\n".join(f"- {category}" for category in MEETING_CATEGORIES)
    return (
        "以下の議事録を分析して、適切なカテゴリに分類してください。\n\n"
        f"カテゴリ候補:\n{candidates}\n\n"
        f"議事録タイトル: {title}\n"
        f"議事録内容:\n{notes}\n\n"
        "上記のカテゴリ候補から最も適切なカテゴリを1つ選んで、カテゴリ名のみを回答してください。"
    )


class MeetingNoteClassifier(ChatClient):
    """Assigns a meeting note to one of ``MEETING_CATEGORIES``."""

    request_error = ClassificationError

    def classify(self, title: str, notes: str) -> str:
        """Return the category; unknown or empty replies map to その他.

        Raises:
            ValueError: if the title or notes are empty.
            LLMUnavailableError: if no API key is configured.
            ClassificationError: if the provider request fails.
        """
        if not title or not title.strip() or not notes or not notes.strip():
            raise ValueError("Meeting note title and notes are required")

        reply = self.complete(
            [
                {"role": "system", "content": CLASSIFY_SYSTEM_PROMPT},
                {"role": "user", "content": build_classification_prompt(title, notes)},
            ],
            temperature=CLASSIFY_TEMPERATURE,
            max_tokens=CLASSIFY_MAX_TOKENS,
        )
        if reply not in MEETING_CATEGORIES:
            LOGGER.debug("Unexpected category %r, using %s", reply, FALLBACK_CATEGORY)
            return FALLBACK_CATEGORY
        return reply


def classify_meeting_note(
    title: str, notes: str, *, config: LLMConfig | None = None, client: Any = None
) -> str:
    return MeetingNoteClassifier(config, client=client).classify(title, notes)
