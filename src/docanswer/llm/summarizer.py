"""Audience-specific document summaries over a chat-completion API."""

from __future__ import annotations

from enum import Enum
from typing import Dict

from docanswer.errors import SummarizationError
from docanswer.llm.client import ChatClient
from docanswer.models import SearchableDocument


class SummaryRole(str, Enum):
    EXECUTIVE = "executive"
    SALES = "sales"
    BACKOFFICE = "backoffice"


SYSTEM_PROMPT = "あなたはビジネス文書を正確かつ簡潔に要約するアシスタントです。"

ROLE_PROMPTS: Dict[SummaryRole, Dict[str, str]] = {
    SummaryRole.EXECUTIVE: {
        "base": (
            "あなたは経営層向けの要約を作成する専門家です。以下の文書を要約してください。\n\n"
            "要約の要件:\n"
            "- 意思決定に必要な重要な情報のみを抽出\n"
            "- 数値データ（金額、期間、数量など）を明確に記載\n"
            "- リスクや課題を明確に示す\n"
            "- アクションアイテムや次のステップを箇条書きで記載"
        ),
        "meeting": "議事録の要約として、会議の目的と主要な決定事項、重要な数値、リスク、次回までのアクションアイテムを含めてください。",
        "contract": "契約書の要約として、契約の概要、重要な条項（金額、期間、条件）、リスク要因、承認が必要な事項を含めてください。",
        "chat": "チャットログの要約として、主要な話題と結論、決定事項、懸念事項、次のアクションを含めてください。",
    },
    SummaryRole.SALES: {
        "base": (
            "あなたは営業担当者向けの要約を作成する専門家です。以下の文書を要約してください。\n\n"
            "要約の要件:\n"
            "- 顧客や案件に関する情報を重視\n"
            "- 商談の進捗状況を明確に\n"
            "- 次アクションやフォローアップ事項を明確に"
        ),
        "meeting": "議事録の要約として、顧客名・案件名、商談の進捗、顧客の要望や懸念、次回のフォローアップ事項を含めてください。",
        "contract": "契約書の要約として、顧客情報、契約内容の概要、重要な条件（金額、期間、支払条件）、注意すべき条項を含めてください。",
        "chat": "チャットログの要約として、顧客や案件に関する話題、進捗や決定事項、次アクションを含めてください。",
    },
    SummaryRole.BACKOFFICE: {
        "base": (
            "あなたはバックオフィス担当者向けの要約を作成する専門家です。以下の文書を要約してください。\n\n"
            "要約の要件:\n"
            "- 業務プロセスや手順に関する情報を重視\n"
            "- 法的・規制に関する事項を明確に\n"
            "- チェックリストや確認事項を明確に"
        ),
        "meeting": "議事録の要約として、議題、決定事項の詳細、業務プロセスの変更点、確認事項、期限を含めてください。",
        "contract": "契約書の要約として、契約の詳細な内容、法的条項の要点、業務プロセスへの影響、管理すべき期限を含めてください。",
        "chat": "チャットログの要約として、業務に関する話題、手順の変更、確認事項、共有すべき情報を含めてください。",
    },
}


def build_prompt(content: str, role: SummaryRole, document_type: str = "general") -> str:
    prompts = ROLE_PROMPTS[role]
    parts = [prompts["base"]]
    addendum = prompts.get(document_type)
    if addendum:
        parts.append(addendum)
    parts.append(f"文書:\n{content}")
    return "\n\n".join(parts)


def format_document_for_summary(document: SearchableDocument) -> str:
    """Render a document's title and sections as plain text."""
    lines = [document.title]
    if document.description:
        lines.append(document.description)
    for name, content in document.sections.items():
        text = content.flatten("\n").strip()
        if text:
            lines.append(f"[{name}]\n{text}")
    return "\n\n".join(lines)


class Summarizer(ChatClient):
    """Summarizes text with an OpenAI-compatible chat-completion client."""

    request_error = SummarizationError

    def summarize(
        self,
        content: str,
        role: SummaryRole = SummaryRole.EXECUTIVE,
        document_type: str = "general",
    ) -> str:
        if not content or not content.strip():
            raise ValueError("Nothing to summarize")

        summary = self.complete(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(content, role, document_type)},
            ]
        )
        if not summary:
            raise SummarizationError("Empty summary returned")
        return summary
