import copy

from backend.models import PlanRequest
from backend.renderer import GETTING_STARTED_TIPS, render_plan_text


def make_request(**overrides):
    base = {"goal": "Gain Muscle", "daysPerWeek": 4, "sessionLength": 60, "experience": "Intermediate"}
    base.update(overrides)
    return PlanRequest(**base)


PLAN = {
    "summary": "Upper/lower split.",
    "weeklySchedule": [
        {
            "day": "Day 1",
            "exercises": [
                {"name": "Bench Press", "sets": 4, "reps": "6-8", "rest": "2 minutes", "notes": "Pause on chest"},
                {"name": "Cable Row"},
            ],
        },
        {"day": "Day 2", "focus": "Lower", "duration": "50 minutes", "intensity": "High"},
    ],
    "nutritionGuidelines": {"calories": "3000 kcal", "macros": {"protein": "180 g"}, "supplements": "Creatine"},
    "progression": "Add 2.5 kg when all reps are hit.",
    "estimatedResults": "1-2 kg lean mass in 3 months.",
    "safetyNotes": "Warm up thoroughly.",
}


def test_header_uses_request_values():
    text = render_plan_text({}, make_request(equipmentAccess="Home gym"))
    assert "**Goal:** Gain Muscle" in text
    assert "**Experience Level:** Intermediate" in text
    assert "**Workout Frequency:** 4 days per week" in text
    assert "**Session Duration:** 60 minutes" in text
    assert "**Equipment Access:** Home gym" in text


def test_section_order():
    text = render_plan_text(PLAN, make_request(injuries="Lower back pain", preferences="No running", dietaryNotes="Vegan"))
    headers = [
        "PLAN OVERVIEW",
        "WEEKLY WORKOUT SCHEDULE",
        "NUTRITION GUIDELINES",
        "PROGRESSION PLAN",
        "EXPECTED RESULTS",
        "SAFETY NOTES",
        "INJURY CONSIDERATIONS",
        "PERSONAL PREFERENCES",
        "DIETARY CONSIDERATIONS",
        "GETTING STARTED",
    ]
    positions = [text.index(h) for h in headers]
    assert positions == sorted(positions)


def test_empty_sections_are_omitted():
    text = render_plan_text({"summary": "", "weeklySchedule": [], "nutritionGuidelines": {}}, make_request())
    for header in ("PLAN OVERVIEW", "WEEKLY WORKOUT SCHEDULE", "NUTRITION GUIDELINES", "PROGRESSION PLAN"):
        assert header not in text
    assert "GETTING STARTED" in text


def test_exercise_defaults_and_optional_fields():
    text = render_plan_text(PLAN, make_request())
    assert "1. **Bench Press**\n   • Sets: 4\n   • Reps: 6-8\n   • Rest: 2 minutes\n   • Notes: Pause on chest" in text
    assert "2. **Cable Row**\n   • Sets: 3\n   • Reps: 10-12\n\n" in text
    assert "undefined" not in text
    assert text.count("Rest:") == 1


def test_day_defaults():
    text = render_plan_text(PLAN, make_request())
    assert "### **Day 1**\n**Focus:** General Fitness\n**Duration:** 60 minutes\n" in text
    assert "### **Day 2**\n**Focus:** Lower\n**Duration:** 50 minutes\n**Intensity:** High\n" in text


def test_exercises_header_only_for_non_empty_list():
    text = render_plan_text({"weeklySchedule": [{"day": "Rest", "exercises": []}, {"day": "Mobility"}]}, make_request())
    assert "### **Rest**" in text
    assert "**Exercises:**" not in text
    text = render_plan_text({"weeklySchedule": [{"day": "Day 1", "exercises": ["Plank"]}]}, make_request())
    assert text.count("**Exercises:**") == 1


def test_nutrition_macro_defaults():
    text = render_plan_text(PLAN, make_request())
    assert "**Daily Calorie Target:** 3000 kcal" in text
    assert "• **Protein:** 180 g" in text
    assert "• **Carbohydrates:** 40-50% of daily calories" in text
    assert "• **Fats:** 20-30% of daily calories" in text
    assert "**Supplement Recommendations:** Creatine" in text
    assert "Meal Timing" not in text


def test_injury_section_only_for_real_injuries():
    with_injury = render_plan_text(PLAN, make_request(injuries="Lower back pain"))
    assert "INJURY CONSIDERATIONS" in with_injury
    assert "Lower back pain" in with_injury

    assert "INJURY CONSIDERATIONS" not in render_plan_text(PLAN, make_request(injuries="None"))
    assert "INJURY CONSIDERATIONS" not in render_plan_text(PLAN, make_request(injuries=""))


def test_getting_started_tips_always_present():
    text = render_plan_text({}, make_request())
    for n, (title, tip) in enumerate(GETTING_STARTED_TIPS, start=1):
        assert f"{n}. **{title}:** {tip}" in text
    assert len(GETTING_STARTED_TIPS) == 5


def test_rendering_is_deterministic_and_pure():
    plan = copy.deepcopy(PLAN)
    req = make_request(injuries="Bad knee")
    first = render_plan_text(plan, req)
    second = render_plan_text(plan, req)
    assert first == second
    assert plan == PLAN


def test_tolerates_odd_shapes():
    odd = {
        "weeklySchedule": ["Day 1: rest", {"day": "Day 2", "exercises": ["Plank", None]}],
        "nutritionGuidelines": "Eat mostly whole foods.",
        "summary": ["Lift", "Walk"],
    }
    text = render_plan_text(odd, make_request())
    assert "### **Day 2**" in text
    assert "1. **Plank**" in text
    assert "2. **Unknown Exercise**" in text
    assert "Eat mostly whole foods." in text
    assert "Lift, Walk" in text
