"""Centralised settings for the Chapter Digest backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Chat / summarisation model
    # ------------------------------------------------------------------
    llm_provider: str = field(
        default_factory=lambda: os.environ.get("LLM_PROVIDER", "gemini")
    )
    gemini_api_key: str = field(
        default_factory=lambda: os.environ.get(
            "GEMINI_API_KEY", os.environ.get("GOOGLE_API_KEY", "")
        )
    )
    gemini_chat_model: str = field(
        default_factory=lambda: os.environ.get("GEMINI_CHAT_MODEL", "gemini-2.5-flash")
    )
    openai_chat_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    )
    ollama_chat_model: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_CHAT_MODEL", "ministral-3:8b")
    )
    ollama_base_url: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
    )
    llm_temperature: float = field(
        default_factory=lambda: float(os.environ.get("LLM_TEMPERATURE", "0"))
    )

    @property
    def chat_model(self) -> str:
        """Model identifier for the active ``llm_provider``."""
        if self.llm_provider == "openai":
            return self.openai_chat_model
        if self.llm_provider == "ollama":
            return self.ollama_chat_model
        return self.gemini_chat_model

    # ------------------------------------------------------------------
    # Provider call policy
    # ------------------------------------------------------------------
    llm_timeout: float = field(
        default_factory=lambda: float(os.environ.get("LLM_TIMEOUT", "120.0"))
    )
    llm_max_retries: int = field(
        default_factory=lambda: int(os.environ.get("LLM_MAX_RETRIES", "2"))
    )
    llm_retry_base_delay: float = field(
        default_factory=lambda: float(os.environ.get("LLM_RETRY_BASE_DELAY", "2.0"))
    )
    pipeline_timeout: float = field(
        default_factory=lambda: float(os.environ.get("PIPELINE_TIMEOUT", "600.0"))
    )

    # ------------------------------------------------------------------
    # Summarisation pipeline
    # ------------------------------------------------------------------
    chunk_size: int = field(
        default_factory=lambda: int(os.environ.get("CHUNK_SIZE", "6000"))
    )
    summary_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("SUMMARY_CONCURRENCY", "1"))
    )

    # ------------------------------------------------------------------
    # Scraper
    # ------------------------------------------------------------------
    fetch_mode: str = field(
        default_factory=lambda: os.environ.get("FETCH_MODE", "auto")
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    navigation_timeout: float = field(
        default_factory=lambda: float(os.environ.get("NAVIGATION_TIMEOUT", "120.0"))
    )
    content_wait_timeout: float = field(
        default_factory=lambda: float(os.environ.get("CONTENT_WAIT_TIMEOUT", "15.0"))
    )
    browser_headless: bool = field(
        default_factory=lambda: _env_bool("BROWSER_HEADLESS", "true")
    )
    content_selector: str = field(
        default_factory=lambda: os.environ.get("CONTENT_SELECTOR", "#chr-content")
    )
    nav_link_selector: str = field(
        default_factory=lambda: os.environ.get("NAV_LINK_SELECTOR", ".btn-group a")
    )
    prev_link_id: str = field(
        default_factory=lambda: os.environ.get("PREV_LINK_ID", "prev_chap")
    )
    next_link_id: str = field(
        default_factory=lambda: os.environ.get("NEXT_LINK_ID", "next_chap")
    )

    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------
    host: str = field(
        default_factory=lambda: os.environ.get("HOST", "127.0.0.1")
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "3000"))
    )


# Module-level singleton — import this everywhere:
#   from backend.config import settings
settings = Settings()
