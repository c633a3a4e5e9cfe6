import json

from .models import PlanRequest

SYSTEM_PROMPT = (
    "You are a certified fitness trainer and nutritionist. Provide safe, effective, "
    "and personalized fitness plans. Always prioritize safety and proper form."
)


def plan_json_example(goal: str) -> dict:
    """The JSON shape the normalizer knows how to read back."""
    return {
        "plan": {
            "goal": goal,
            "summary": "Brief overview of the plan",
            "weeklySchedule": [
                {
                    "day": "Day 1",
                    "focus": "Workout focus area",
                    "exercises": [
                        {
                            "name": "Exercise name",
                            "sets": 3,
                            "reps": "10-12",
                            "rest": "60 seconds",
                            "notes": "Form cues or modifications",
                        }
                    ],
                    "duration": "45 minutes",
                    "intensity": "Moderate",
                }
            ],
            "nutritionGuidelines": {
                "calories": "Daily calorie target",
                "macros": {
                    "protein": "Protein target",
                    "carbs": "Carb target",
                    "fats": "Fat target",
                },
                "mealTiming": "Meal timing recommendations",
                "supplements": "Supplement recommendations if any",
            },
            "progression": "How to progress over time",
            "safetyNotes": "Important safety considerations",
            "estimatedResults": "Expected results timeline",
        }
    }


def build_plan_prompt(req: PlanRequest) -> str:
    goal = req.goal.value
    example = json.dumps(plan_json_example(goal), indent=2)
    return (
        "Generate a comprehensive fitness plan for a person with the following goals and constraints:\n\n"
        f"GOAL: {goal}\n"
        f"EQUIPMENT ACCESS: {req.equipment_access}\n"
        f"DAYS PER WEEK: {req.days_per_week}\n"
        f"SESSION LENGTH: {req.session_length} minutes\n"
        f"EXPERIENCE LEVEL: {req.experience}\n"
        f"INJURIES/CONDITIONS: {req.injuries}\n"
        f"PREFERENCES: {req.preferences}\n"
        f"DIETARY NOTES: {req.dietary_notes}\n\n"
        "Please provide a structured response in the following JSON format:\n\n"
        f"{example}\n\n"
        "If you cannot provide JSON, provide a clear, structured text response with the same "
        "information organized in sections."
    )
