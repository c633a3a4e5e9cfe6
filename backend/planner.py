from __future__ import annotations

import logging
from typing import Optional, Protocol

from .config import get_settings
from .llm import OpenRouterClient
from .models import GeneratePlanResponse, PlanRequest
from .normalizer import normalize_completion
from .prompts import build_plan_prompt

logger = logging.getLogger(__name__)

STRUCTURED_MESSAGE = "Plan generated successfully"
FALLBACK_MESSAGE = "Response provided in human-readable format"


class CompletionClient(Protocol):
    def complete(self, prompt: str) -> str: ...


class Planner:
    """Prompt -> LLM -> normalizer for one validated request.

    Without an explicit client, an OpenRouter client is built from the
    current environment on every call.
    """

    def __init__(self, client: Optional[CompletionClient] = None) -> None:
        self.client = client

    def _client(self) -> CompletionClient:
        if self.client is not None:
            return self.client
        return OpenRouterClient.from_settings(get_settings())

    def generate_plan(self, req: PlanRequest) -> GeneratePlanResponse:
        prompt = build_plan_prompt(req)
        raw = self._client().complete(prompt)
        result = normalize_completion(raw, req)
        logger.info(
            f"Plan generated for goal={req.goal.value} days={req.days_per_week} "
            f"structured={result.structured is not None} source={result.source}"
        )
        return GeneratePlanResponse(
            success=True,
            data=result.structured,
            raw_response=result.readable_text,
            message=STRUCTURED_MESSAGE if result.structured is not None else FALLBACK_MESSAGE,
        )
