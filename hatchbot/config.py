from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from hatchbot.errors import ConfigError


load_dotenv(".env.local")
load_dotenv()

DEFAULT_BASE_URL = "http://localhost:3000"


def _base_url_from_env() -> str:
    raw = os.getenv("DISCORD_SEARCH_BASE_URL") or os.getenv("NEXT_PUBLIC_BASE_URL") or DEFAULT_BASE_URL
    return raw.rstrip("/")


def _optional(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass
class Settings:
    app_name: str = "Escape Hatch Podcast Search"
    command_name: str = "pdc"
    discord_bot_token: str | None = field(default_factory=lambda: _optional("DISCORD_BOT_TOKEN"))
    discord_app_id: str | None = field(default_factory=lambda: _optional("DISCORD_APP_ID"))
    discord_guild_id: str | None = field(default_factory=lambda: _optional("DISCORD_GUILD_ID"))
    search_base_url: str = field(default_factory=_base_url_from_env)
    feedback_sheet_id: str | None = field(default_factory=lambda: _optional("DISCORD_FEEDBACK_SHEET_ID"))
    feedback_sheet_tab: str = field(default_factory=lambda: os.getenv("DISCORD_FEEDBACK_SHEET_TAB") or "Feedback")
    google_service_account_json: str | None = field(
        default_factory=lambda: _optional("GOOGLE_SERVICE_ACCOUNT_JSON")
    )
    anthropic_api_key: str | None = field(default_factory=lambda: _optional("ANTHROPIC_API_KEY"))
    summary_model: str = field(default_factory=lambda: os.getenv("SUMMARY_MODEL", "claude-3-haiku-20240307"))
    summary_max_chars: int = field(default_factory=lambda: int(os.getenv("SUMMARY_MAX_CHARS", "900")))
    result_cache_ttl_minutes: float = field(
        default_factory=lambda: float(os.getenv("RESULT_CACHE_TTL_MINUTES", "15"))
    )
    http_timeout_seconds: float = field(default_factory=lambda: float(os.getenv("HTTP_TIMEOUT_SECONDS", "30")))
    summary_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("SUMMARY_TIMEOUT_SECONDS", "20"))
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def __post_init__(self) -> None:
        self.search_base_url = self.search_base_url.rstrip("/")

    @property
    def uses_localhost(self) -> bool:
        return "localhost" in self.search_base_url or "127.0.0.1" in self.search_base_url

    @property
    def result_cache_ttl_seconds(self) -> float:
        return self.result_cache_ttl_minutes * 60

    def require_token(self) -> str:
        if not self.discord_bot_token:
            raise ConfigError("Missing DISCORD_BOT_TOKEN in env.")
        return self.discord_bot_token

    def require_app_id(self) -> str:
        if not self.discord_app_id:
            raise ConfigError("Missing DISCORD_APP_ID in env.")
        return self.discord_app_id


settings = Settings()
