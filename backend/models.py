from enum import Enum
from typing import Annotated, List, Optional, Dict, Any, Union
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# LLM output is untrusted: numbers and strings show up interchangeably
Scalar = Union[str, int, float]


def flatten_text(value: Any) -> Any:
    """Collapse lists and objects into one display string; scalars pass through."""
    if value is None or isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, list):
        return ", ".join(str(flatten_text(v)) for v in value if v not in (None, ""))
    if isinstance(value, dict):
        return "; ".join(f"{k}: {flatten_text(v)}" for k, v in value.items() if v not in (None, ""))
    return str(value)


def _entries(value: Any, key: str) -> Any:
    # a bare string (or single object) stands in for a one-item list
    if value is None:
        return None
    items = value if isinstance(value, list) else [value]
    return [item if isinstance(item, dict) else {key: flatten_text(item)} for item in items if item is not None]


def _schedule(value: Any) -> Any:
    # some models key the schedule by day name instead of using a list
    if isinstance(value, dict):
        return [
            {"day": day, **entry} if isinstance(entry, dict) else {"day": day, "focus": flatten_text(entry)}
            for day, entry in value.items()
        ]
    return _entries(value, "day")


def _macros(value: Any) -> Any:
    return value if isinstance(value, dict) else flatten_text(value)


def _nutrition(value: Any) -> Any:
    if value is None or isinstance(value, dict):
        return value
    return {"notes": flatten_text(value)}


Text = Annotated[Optional[Scalar], BeforeValidator(flatten_text)]


class Goal(str, Enum):
    GAIN_MUSCLE = "Gain Muscle"
    LOSE_FAT = "Lose Fat"
    BOTH = "Both"


class PlanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    goal: Goal
    equipment_access: str = Field(default="None", alias="equipmentAccess")
    days_per_week: int = Field(default=3, ge=1, le=7, alias="daysPerWeek")
    session_length: int = Field(default=45, ge=15, le=180, alias="sessionLength")
    experience: str = Field(default="Beginner", description="Beginner | Intermediate | Advanced")
    injuries: str = "None"
    preferences: str = "None"
    dietary_notes: str = Field(default="None", alias="dietaryNotes")


class ExerciseEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Text = None
    sets: Text = None
    reps: Text = None
    rest: Text = None
    notes: Text = None


class DaySchedule(BaseModel):
    model_config = ConfigDict(extra="allow")

    day: Text = None
    focus: Text = None
    duration: Text = None
    intensity: Text = None
    exercises: Annotated[Optional[List[ExerciseEntry]], BeforeValidator(lambda v: _entries(v, "name"))] = None


class Macros(BaseModel):
    model_config = ConfigDict(extra="allow")

    protein: Text = None
    carbs: Text = None
    fats: Text = None


class NutritionBlock(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    calories: Text = None
    # "40/30/30" style answers stay as text
    macros: Annotated[Optional[Union[Macros, str]], BeforeValidator(_macros)] = None
    meal_timing: Text = Field(default=None, alias="mealTiming")
    supplements: Text = None


class PlanDocument(BaseModel):
    """Typed view of a parsed plan for display. Every field is optional and
    list or object values are flattened to text rather than rejected."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    goal: Text = None
    summary: Text = None
    weekly_schedule: Annotated[Optional[List[DaySchedule]], BeforeValidator(_schedule)] = Field(
        default=None, alias="weeklySchedule"
    )
    nutrition_guidelines: Annotated[Optional[NutritionBlock], BeforeValidator(_nutrition)] = Field(
        default=None, alias="nutritionGuidelines"
    )
    progression: Text = None
    safety_notes: Text = Field(default=None, alias="safetyNotes")
    estimated_results: Text = Field(default=None, alias="estimatedResults")



class GeneratePlanResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: Optional[Dict[str, Any]] = None
    raw_response: str = Field(alias="rawResponse")
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class DebugConfigResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    env_path: str = Field(alias="envPath")
    env_exists: bool = Field(alias="envExists")
    has_openrouter_key: bool = Field(alias="hasOpenRouterKey")
    openrouter_key_preview: str = Field(alias="openRouterKeyPreview")
    openrouter_api_url: str = Field(alias="openRouterApiUrl")
    openrouter_model: str = Field(alias="openRouterModel")
    python_version: str = Field(alias="pythonVersion")
    environment: str
