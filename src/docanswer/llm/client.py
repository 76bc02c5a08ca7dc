"""Lazily created OpenAI-compatible chat-completion client."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Type

from docanswer.config import LLMConfig
from docanswer.errors import LLMRequestError, LLMUnavailableError

LOGGER = logging.getLogger(__name__)


class ChatClient:
    """Sends chat-completion requests described by an ``LLMConfig``.

    The provider client is only built on the first request, so a missing API
    key surfaces as ``LLMUnavailableError`` at call time.
    """

    request_error: Type[LLMRequestError] = LLMRequestError

    def __init__(self, config: LLMConfig | None = None, client: Any = None) -> None:
        self.config = config or LLMConfig.from_env()
        self._client = client

    def _ensure_client(self) -> Any:
        if self._client is None:
            if not self.config.enabled:
                raise LLMUnavailableError("OPENAI_API_KEY is not set")
            from openai import OpenAI

            self._client = OpenAI(api_key=self.config.api_key, base_url=self.config.base_url)
        return self._client

    def complete(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Return the stripped reply text, possibly empty."""
        client = self._ensure_client()
        try:
            response = client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                temperature=self.config.temperature if temperature is None else temperature,
                max_tokens=self.config.max_tokens if max_tokens is None else max_tokens,
            )
        except Exception as exc:
            LOGGER.exception("Chat completion request failed: %s", exc)
            raise self.request_error(str(exc)) from exc

        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()
