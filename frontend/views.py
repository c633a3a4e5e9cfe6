"""Table builders for the structured plan view.

Kept free of Streamlit calls so the app and the PDF export share them.
"""

from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from pydantic import ValidationError

from backend.models import DaySchedule, Macros, PlanDocument, flatten_text

STRUCTURED_VIEW_KEYS = ("goal", "weeklySchedule", "nutritionGuidelines")


def has_structured_view(data: Any) -> bool:
    return isinstance(data, dict) and any(data.get(k) for k in STRUCTURED_VIEW_KEYS)


def coerce_plan(data: Any) -> Optional[PlanDocument]:
    """Lenient typed view of a parsed plan; None means show the raw text instead."""
    if not has_structured_view(data):
        return None
    try:
        return PlanDocument.model_validate(data)
    except ValidationError:
        return None


def _cell(value: Any) -> str:
    value = flatten_text(value)
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _label(key: str) -> str:
    # "mealTiming" -> "Meal Timing"
    spaced = "".join(f" {c}" if c.isupper() else c for c in key)
    return spaced.replace("_", " ").strip().title()


def overview_table(plan: PlanDocument) -> pd.DataFrame:
    rows = [
        ("Goal", plan.goal),
        ("Summary", plan.summary),
        ("Progression", plan.progression),
        ("Safety Notes", plan.safety_notes),
        ("Estimated Results", plan.estimated_results),
    ]
    return pd.DataFrame(
        [{"Field": k, "Details": _cell(v)} for k, v in rows if v not in (None, "")],
        columns=["Field", "Details"],
    )


def day_title(day: DaySchedule, index: int) -> str:
    title = _cell(day.day) or f"Day {index}"
    if day.focus:
        title += f": {_cell(day.focus)}"
    return title


def day_details(day: DaySchedule) -> List[Tuple[str, str]]:
    return [(label, _cell(v)) for label, v in (("Duration", day.duration), ("Intensity", day.intensity)) if v]


def exercises_table(day: DaySchedule) -> pd.DataFrame:
    columns = ["#", "Exercise", "Sets", "Reps", "Rest", "Notes"]
    rows = [
        {
            "#": n,
            "Exercise": _cell(ex.name),
            "Sets": _cell(ex.sets),
            "Reps": _cell(ex.reps),
            "Rest": _cell(ex.rest),
            "Notes": _cell(ex.notes),
        }
        for n, ex in enumerate(day.exercises or [], start=1)
    ]
    return pd.DataFrame(rows, columns=columns)


def schedule_tables(plan: PlanDocument) -> List[Tuple[str, pd.DataFrame]]:
    return [(day_title(day, i), exercises_table(day)) for i, day in enumerate(plan.weekly_schedule or [], start=1)]


def nutrition_table(plan: PlanDocument) -> pd.DataFrame:
    nutrition = plan.nutrition_guidelines
    rows: List[Dict[str, str]] = []
    if nutrition is not None:
        if nutrition.calories:
            rows.append({"Field": "Calories", "Details": _cell(nutrition.calories)})
        if isinstance(nutrition.macros, str):
            if nutrition.macros:
                rows.append({"Field": "Macros", "Details": nutrition.macros})
        elif isinstance(nutrition.macros, Macros):
            for key in ("protein", "carbs", "fats"):
                value = getattr(nutrition.macros, key)
                if value:
                    rows.append({"Field": key.title(), "Details": _cell(value)})
        if nutrition.meal_timing:
            rows.append({"Field": "Meal Timing", "Details": _cell(nutrition.meal_timing)})
        if nutrition.supplements:
            rows.append({"Field": "Supplements", "Details": _cell(nutrition.supplements)})
        for key, value in (nutrition.model_extra or {}).items():
            if value not in (None, ""):
                rows.append({"Field": _label(key), "Details": _cell(value)})
    return pd.DataFrame(rows, columns=["Field", "Details"])
