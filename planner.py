# planner.py
import copy
from typing import Dict, Iterable, List

from meal_bank import (
    CONDITION_RECOMMENDATIONS,
    DEFAULT_EXERCISES,
    DIABETES_BREAKFAST,
    FITNESS_EXERCISES,
    FITNESS_MEALS,
    FITNESS_RECOMMENDATIONS,
    SNACKS,
    STANDARD_MEALS,
    WEIGHT_MANAGEMENT_EXERCISES,
)

# Order in which condition blocks are applied
CONDITION_PRIORITY = ["diabetes", "hypertension", "heart_disease", "weight_management"]
CONDITION_TAGS = ["daily_fitness"] + CONDITION_PRIORITY

CONDITION_LABELS = {
    "daily_fitness": "Daily Fitness & Healthy Living",
    "diabetes": "Diabetes",
    "hypertension": "High Blood Pressure",
    "heart_disease": "Heart Disease",
    "weight_management": "Weight Management",
}


def normalize_diet_type(diet_type: str) -> str:
    return "veg" if (diet_type or "").strip().lower() == "veg" else "non-veg"


def normalize_conditions(conditions: Iterable[str]) -> List[str]:
    """Known tags only, duplicates collapsed, in fixed tag order."""
    tags = {str(c).strip().lower() for c in (conditions or [])}
    return [t for t in CONDITION_TAGS if t in tags]


def _fitness_plan(diet_type: str) -> Dict:
    meals = []
    for meal in FITNESS_MEALS:
        items = []
        for item in meal["items"]:
            name = item["name"][diet_type] if isinstance(item["name"], dict) else item["name"]
            items.append({"name": name, "portion": item["portion"]})
        meals.append({"name": meal["name"], "items": items})

    return {
        "meals": meals,
        "exercises": copy.deepcopy(FITNESS_EXERCISES),
        "recommendations": list(FITNESS_RECOMMENDATIONS),
    }


def generate_diet_plan(diet_type: str, conditions: Iterable[str] = ()) -> Dict:
    """
    Returns {"meals": [...], "exercises": [...], "recommendations": [...]}.

    daily_fitness short-circuits to the high-activity template. Otherwise the
    4-meal template for the diet type is built and each condition block is
    appended in priority order (diabetes also swaps the breakfast items).
    """
    diet = normalize_diet_type(diet_type)
    tags = normalize_conditions(conditions)

    if "daily_fitness" in tags:
        return _fitness_plan(diet)

    meals: List[Dict] = copy.deepcopy(STANDARD_MEALS[diet]) + [copy.deepcopy(SNACKS)]
    exercises: List[Dict] = []
    recommendations: List[str] = []

    for tag in CONDITION_PRIORITY:
        if tag not in tags:
            continue
        if tag == "diabetes":
            meals[0]["items"] = copy.deepcopy(DIABETES_BREAKFAST)
        if tag == "weight_management":
            exercises.extend(copy.deepcopy(WEIGHT_MANAGEMENT_EXERCISES))
        recommendations.extend(CONDITION_RECOMMENDATIONS[tag])

    if not exercises:
        exercises = copy.deepcopy(DEFAULT_EXERCISES)

    return {
        "meals": meals,
        "exercises": exercises,
        "recommendations": recommendations,
    }


def meal_text(plan: Dict) -> str:
    """Flattens a plan's meals to one line, e.g. for swap suggestions."""
    parts = []
    for meal in plan.get("meals", []):
        names = ", ".join(i["name"] for i in meal.get("items", []))
        parts.append(f"{meal['name']}: {names}")
    return "; ".join(parts)
