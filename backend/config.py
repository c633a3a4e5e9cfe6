from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load the .env from the project root regardless of the working directory
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(ENV_PATH)

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "deepseek/deepseek-chat"


@dataclass(frozen=True)
class Settings:
    openrouter_api_key: str
    openrouter_api_url: str = DEFAULT_API_URL
    openrouter_model: str = DEFAULT_MODEL
    llm_timeout_seconds: float = 60.0
    port: int = 5000
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: int = 15 * 60
    trusted_proxy_hops: int = 1
    log_level: str = "INFO"
    environment: str = "development"

    @property
    def has_api_key(self) -> bool:
        return bool(self.openrouter_api_key)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


def get_settings() -> Settings:
    """Read configuration from the environment.

    Called per request rather than cached so a key added to the environment
    after startup is picked up without a restart.
    """
    return Settings(
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY", "").strip(),
        openrouter_api_url=os.getenv("OPENROUTER_API_URL", "").strip() or DEFAULT_API_URL,
        openrouter_model=os.getenv("OPENROUTER_MODEL", "").strip() or DEFAULT_MODEL,
        llm_timeout_seconds=_float_env("LLM_TIMEOUT_SECONDS", 60.0),
        port=_int_env("PORT", 5000),
        rate_limit_max_requests=_int_env("RATE_LIMIT_MAX_REQUESTS", 10),
        rate_limit_window_seconds=_int_env("RATE_LIMIT_WINDOW_SECONDS", 15 * 60),
        trusted_proxy_hops=_int_env("TRUSTED_PROXY_HOPS", 1),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        environment=os.getenv("APP_ENV", "development").strip() or "development",
    )


def mask_key(value: str | None) -> str:
    if not value or not isinstance(value, str):
        return ""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"
