from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .models import Goal, PlanRequest

VALID_GOALS = tuple(g.value for g in Goal)

GOAL_ERROR = "Valid goal is required (Gain Muscle, Lose Fat, or Both)"
DAYS_ERROR = "Days per week must be between 1 and 7"
SESSION_ERROR = "Session length must be between 15 and 180 minutes"


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


def _as_number(value: Any) -> Optional[float]:
    # bool is an int subclass; "true" is not a day count
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _in_range(value: Any, low: int, high: int) -> bool:
    number = _as_number(value)
    # 3.5 days is as invalid as 9 days
    return number is not None and number.is_integer() and low <= number <= high


def validate_plan_request(payload: Mapping[str, Any]) -> ValidationResult:
    """Check an inbound plan payload before an LLM call is spent on it.

    Rules run in order and the first failure wins. Optional numeric fields
    are only range-checked when present and non-null.
    """
    goal = payload.get("goal")
    if not isinstance(goal, str) or goal not in VALID_GOALS:
        return ValidationResult(False, GOAL_ERROR)

    days = payload.get("daysPerWeek")
    if days is not None and not _in_range(days, 1, 7):
        return ValidationResult(False, DAYS_ERROR)

    session = payload.get("sessionLength")
    if session is not None and not _in_range(session, 15, 180):
        return ValidationResult(False, SESSION_ERROR)

    return ValidationResult(True)


def parse_plan_request(payload: Mapping[str, Any]) -> PlanRequest:
    """Build a PlanRequest from a validated payload, applying defaults for
    missing or null optional fields."""
    present = {k: v for k, v in payload.items() if v is not None}
    for key in ("daysPerWeek", "sessionLength"):
        number = _as_number(present.get(key))
        if number is not None:
            present[key] = int(number)
    return PlanRequest.model_validate(present)
