"""OpenRouter chat-completion gateway.

One blocking POST per call. Failures are classified by upstream status code
and raised to the caller; nothing is retried here.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .config import Settings
from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7
MAX_TOKENS = 2000


class LLMError(Exception):
    """Base class for gateway failures. `status_code` is what the API answers with."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(LLMError):
    def __init__(self, message: str = "OpenRouter API key not configured") -> None:
        super().__init__(message)


class AuthenticationError(LLMError):
    def __init__(self, message: str = "Invalid API key or authentication error") -> None:
        super().__init__(message)


class UpstreamRateLimitError(LLMError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded for AI service") -> None:
        super().__init__(message)


class QuotaExceededError(LLMError):
    status_code = 402

    def __init__(
        self,
        message: str = "Payment required or quota exceeded for the AI service. "
        "Please check your subscription or API usage.",
    ) -> None:
        super().__init__(message)


class UpstreamError(LLMError):
    def __init__(self, details: str) -> None:
        super().__init__("Failed to generate fitness plan", details=details)


_STATUS_ERRORS = {
    401: AuthenticationError,
    402: QuotaExceededError,
    429: UpstreamRateLimitError,
}


class OpenRouterClient:
    def __init__(
        self,
        api_key: str,
        api_url: str,
        model: str,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenRouterClient":
        return cls(
            api_key=settings.openrouter_api_key,
            api_url=settings.openrouter_api_url,
            model=settings.openrouter_model,
            timeout=settings.llm_timeout_seconds,
        )

    def build_payload(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }

    def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise ConfigurationError()

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            resp = requests.post(self.api_url, json=self.build_payload(prompt), headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"OpenRouter request failed: {e}")
            raise UpstreamError(str(e)) from e

        if resp.status_code in _STATUS_ERRORS:
            logger.warning(f"OpenRouter rejected request with status {resp.status_code}")
            raise _STATUS_ERRORS[resp.status_code]()
        if not resp.ok:
            logger.error(f"OpenRouter returned status {resp.status_code}: {resp.text[:200]}")
            raise UpstreamError(f"Request failed with status code {resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamError(f"Malformed completion response: {e!r}") from e
        if not isinstance(content, str):
            raise UpstreamError("Completion response has no text content")

        logger.info(f"OpenRouter completion received: {len(content)} chars from {self.model}")
        return content
