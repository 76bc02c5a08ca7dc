"""Application configuration defaults."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from docanswer.index.search import DEFAULT_TOP_K

DEFAULT_LLM_MODEL = "gpt-4o-mini"
DB_PATH_ENV = "DOCANSWER_DB"


def _get_default_db_path() -> Path:
    """Get the default database path based on platform and execution context."""
    configured = os.getenv(DB_PATH_ENV)
    if configured:
        return Path(configured).expanduser()

    user_db = Path.home() / "Documents" / "DocAnswer" / "docanswer.db"

    if getattr(sys, "frozen", False):
        return user_db

    # When running from source, prefer local data/ if it exists
    local_db = Path("data/docanswer.db")
    if local_db.exists():
        return local_db

    return user_db


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    top_k: int = DEFAULT_TOP_K

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path


@dataclass(slots=True)
class LLMConfig:
    """Chat-completion settings used by the summarizer."""

    api_key: str | None = None
    base_url: str | None = None
    model: str = DEFAULT_LLM_MODEL
    temperature: float = 0.2
    max_tokens: int = 800

    @classmethod
    def from_env(cls) -> "LLMConfig":
        return cls(
            api_key=os.getenv("OPENAI_API_KEY") or None,
            base_url=os.getenv("OPENAI_BASE_URL") or None,
            model=os.getenv("DOCANSWER_LLM_MODEL", DEFAULT_LLM_MODEL),
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)
