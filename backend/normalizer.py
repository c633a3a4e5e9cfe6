"""Turn raw LLM completions into a structured plan plus a readable report.

Upstream text is untrusted. The model may answer with clean JSON, wrap it in a
markdown fence, bury it in prose, or skip JSON entirely. Nothing in here
raises on bad input: the worst case is `structured=None` with the raw text
passed through.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from .models import PlanRequest
from .renderer import render_plan_text

logger = logging.getLogger(__name__)

PLAN_SHAPE_KEYS = ("plan", "weeklySchedule", "nutritionGuidelines")


@dataclass
class NormalizedResult:
    structured: Optional[Dict[str, Any]]
    readable_text: str
    source: str  # "json" | "extracted" | "raw"


def _loads(text: str) -> Tuple[bool, Any]:
    """Parse JSON, reporting failure as a flag instead of an exception."""
    try:
        return True, json.loads(text)
    except (ValueError, RecursionError):
        return False, None


def _strip_code_fence(text: str) -> str:
    content = text.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]
    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]
    return content.strip()


def unwrap_plan(root: Dict[str, Any]) -> Dict[str, Any]:
    """Accept either `{"plan": {...}}` or the plan object itself."""
    inner = root.get("plan")
    return inner if isinstance(inner, dict) else root


def has_plan_shape(value: Any) -> bool:
    return isinstance(value, dict) and any(k in value for k in PLAN_SHAPE_KEYS)


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index just past the `}` closing the `{` at `start`, or None if unclosed.

    Braces inside JSON string literals are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def iter_json_candidates(text: str) -> Iterator[str]:
    """Yield substrings that look like JSON objects, longest first.

    Candidates are the greedy span from the first `{` to the last `}` plus
    every balanced span starting at a `{`. Duplicates are dropped.
    """
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last < first:
        return

    spans = {(first, last + 1)}
    pos = first
    while pos != -1 and pos < last:
        end = _balanced_end(text, pos)
        if end is not None:
            spans.add((pos, end))
        pos = text.find("{", pos + 1)

    seen = set()
    for start, end in sorted(spans, key=lambda s: (-(s[1] - s[0]), s[0])):
        candidate = text[start:end]
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def extract_plan_json(text: str) -> Optional[Dict[str, Any]]:
    """Find the longest embedded JSON object that looks like a plan."""
    for candidate in iter_json_candidates(text):
        ok, parsed = _loads(candidate)
        if ok and has_plan_shape(parsed):
            return parsed
    return None


def parse_completion(raw: str) -> Tuple[Optional[Dict[str, Any]], str]:
    """Return (plan, source) for a raw completion; plan is None on failure."""
    if not isinstance(raw, str) or not raw.strip():
        return None, "raw"

    ok, parsed = _loads(raw)
    if not ok:
        ok, parsed = _loads(_strip_code_fence(raw))
    if ok and isinstance(parsed, dict):
        return unwrap_plan(parsed), "json"

    extracted = extract_plan_json(raw)
    if extracted is not None:
        return unwrap_plan(extracted), "extracted"
    return None, "raw"


def normalize_completion(raw: str, req: PlanRequest) -> NormalizedResult:
    structured, source = parse_completion(raw)
    if structured is None:
        logger.info("No structured plan found in completion; passing raw text through")
        text = raw if isinstance(raw, str) else ""
        return NormalizedResult(structured=None, readable_text=text, source="raw")

    logger.debug(f"Structured plan parsed via {source}: keys={sorted(structured)}")
    return NormalizedResult(
        structured=structured,
        readable_text=render_plan_text(structured, req),
        source=source,
    )
