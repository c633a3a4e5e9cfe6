from __future__ import annotations

from typing import Any, List, Mapping

from .models import PlanRequest

# Render-time defaults. The parsed plan itself is never filled in.
DEFAULT_FOCUS = "General Fitness"
DEFAULT_SETS = "3"
DEFAULT_REPS = "10-12"
DEFAULT_MACROS = {
    "protein": "20-30% of daily calories",
    "carbs": "40-50% of daily calories",
    "fats": "20-30% of daily calories",
}

GETTING_STARTED_TIPS = [
    ("Start Slow", "Begin with lighter weights and focus on proper form"),
    ("Stay Consistent", "Stick to the schedule for best results"),
    ("Listen to Your Body", "Rest when needed and don't push through pain"),
    ("Track Progress", "Keep a workout journal to monitor improvements"),
    ("Stay Hydrated", "Drink plenty of water before, during, and after workouts"),
]


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ", ".join(_text(v) for v in value if v not in (None, ""))
    if isinstance(value, Mapping):
        return "; ".join(f"{k}: {_text(v)}" for k, v in value.items() if v not in (None, ""))
    return str(value)


def _or(value: Any, default: str) -> str:
    return _text(value) if value not in (None, "") else default


def _user_supplied(value: str) -> bool:
    return bool(value) and value != "None"


def _render_exercise(lines: List[str], number: int, exercise: Any) -> None:
    if not isinstance(exercise, Mapping):
        exercise = {"name": exercise}
    lines.append(f"{number}. **{_or(exercise.get('name'), 'Unknown Exercise')}**")
    lines.append(f"   • Sets: {_or(exercise.get('sets'), DEFAULT_SETS)}")
    lines.append(f"   • Reps: {_or(exercise.get('reps'), DEFAULT_REPS)}")
    if exercise.get("rest"):
        lines.append(f"   • Rest: {_text(exercise['rest'])}")
    if exercise.get("notes"):
        lines.append(f"   • Notes: {_text(exercise['notes'])}")
    lines.append("")


def _render_schedule(lines: List[str], schedule: list, req: PlanRequest) -> None:
    lines += ["## 📅 **WEEKLY WORKOUT SCHEDULE**", ""]
    for index, day in enumerate(schedule, start=1):
        if not isinstance(day, Mapping):
            continue
        lines.append(f"### **{_or(day.get('day'), f'Day {index}')}**")
        lines.append(f"**Focus:** {_or(day.get('focus'), DEFAULT_FOCUS)}")
        lines.append(f"**Duration:** {_or(day.get('duration'), f'{req.session_length} minutes')}")
        if day.get("intensity"):
            lines.append(f"**Intensity:** {_text(day['intensity'])}")
        lines.append("")

        exercises = day.get("exercises")
        if isinstance(exercises, list) and exercises:
            lines.append("**Exercises:**")
            for number, exercise in enumerate(exercises, start=1):
                _render_exercise(lines, number, exercise)
        lines += ["---", ""]


def _render_nutrition(lines: List[str], nutrition: Any) -> None:
    lines += ["## 🍎 **NUTRITION GUIDELINES**", ""]
    if not isinstance(nutrition, Mapping):
        lines += [_text(nutrition), ""]
        return

    if nutrition.get("calories"):
        lines += [f"**Daily Calorie Target:** {_text(nutrition['calories'])}", ""]

    macros = nutrition.get("macros")
    if isinstance(macros, Mapping) and macros:
        lines.append("**Macronutrient Breakdown:**")
        lines.append(f"• **Protein:** {_or(macros.get('protein'), DEFAULT_MACROS['protein'])}")
        lines.append(f"• **Carbohydrates:** {_or(macros.get('carbs'), DEFAULT_MACROS['carbs'])}")
        lines.append(f"• **Fats:** {_or(macros.get('fats'), DEFAULT_MACROS['fats'])}")
        lines.append("")
    elif macros:
        lines += [f"**Macronutrient Breakdown:** {_text(macros)}", ""]

    if nutrition.get("mealTiming"):
        lines += [f"**Meal Timing:** {_text(nutrition['mealTiming'])}", ""]
    if nutrition.get("supplements"):
        lines += [f"**Supplement Recommendations:** {_text(nutrition['supplements'])}", ""]


def _section(lines: List[str], title: str, body: str) -> None:
    lines += [f"## {title}", "", body, ""]


def render_plan_text(plan: Mapping[str, Any], req: PlanRequest) -> str:
    """Render a parsed plan as a Markdown-flavoured report.

    Sections appear in a fixed order and only when the plan has content for
    them. The trailing injury/preference/dietary sections come from the
    request, not the model output. Output depends only on the inputs.
    """
    lines: List[str] = [
        "🏋️‍♂️ **YOUR PERSONALIZED FITNESS PLAN** 🏋️‍♂️",
        "",
        f"**Goal:** {req.goal.value}",
        f"**Experience Level:** {req.experience}",
        f"**Workout Frequency:** {req.days_per_week} days per week",
        f"**Session Duration:** {req.session_length} minutes",
        f"**Equipment Access:** {req.equipment_access}",
        "",
    ]

    if plan.get("summary"):
        _section(lines, "📋 **PLAN OVERVIEW**", _text(plan["summary"]))

    schedule = plan.get("weeklySchedule")
    if isinstance(schedule, list) and schedule:
        _render_schedule(lines, schedule, req)

    if plan.get("nutritionGuidelines"):
        _render_nutrition(lines, plan["nutritionGuidelines"])

    if plan.get("progression"):
        _section(lines, "📈 **PROGRESSION PLAN**", _text(plan["progression"]))
    if plan.get("estimatedResults"):
        _section(lines, "🎯 **EXPECTED RESULTS**", _text(plan["estimatedResults"]))
    if plan.get("safetyNotes"):
        _section(lines, "⚠️ **SAFETY NOTES**", _text(plan["safetyNotes"]))

    if _user_supplied(req.injuries):
        lines += [
            "## 🏥 **INJURY CONSIDERATIONS**",
            "",
            f"Based on your reported injuries/conditions: {req.injuries}",
            "Please consult with a healthcare professional before starting this plan "
            "and modify exercises as needed.",
            "",
        ]
    if _user_supplied(req.preferences):
        _section(lines, "💭 **PERSONAL PREFERENCES**",
                 f"Your preferences have been considered: {req.preferences}")
    if _user_supplied(req.dietary_notes):
        _section(lines, "🥗 **DIETARY CONSIDERATIONS**", f"Your dietary notes: {req.dietary_notes}")

    lines += ["## 🚀 **GETTING STARTED**", ""]
    lines += [f"{n}. **{title}:** {tip}" for n, (title, tip) in enumerate(GETTING_STARTED_TIPS, start=1)]
    lines += [
        "",
        "**Remember:** This plan is personalized for you, but always consult with a fitness "
        "professional if you have any concerns.",
        "",
        "Good luck on your fitness journey! 💪",
    ]
    return "\n".join(lines)
