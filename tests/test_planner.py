from meal_bank import (
    CONDITION_RECOMMENDATIONS,
    DEFAULT_EXERCISES,
    FITNESS_EXERCISES,
    FITNESS_RECOMMENDATIONS,
    WEIGHT_MANAGEMENT_EXERCISES,
)
from planner import generate_diet_plan, meal_text, normalize_conditions, normalize_diet_type


def _names(meal):
    return [i["name"] for i in meal["items"]]


def test_veg_with_diabetes():
    plan = generate_diet_plan("veg", ["diabetes"])
    assert [m["name"] for m in plan["meals"]] == ["Breakfast", "Lunch", "Dinner", "Snacks"]
    assert _names(plan["meals"][0]) == ["Steel-cut oats", "Cinnamon", "Chia seeds"]
    assert _names(plan["meals"][1]) == ["Quinoa bowl", "Mixed vegetables", "Chickpeas"]
    assert "Monitor blood glucose levels regularly" in plan["recommendations"]
    assert plan["exercises"] == DEFAULT_EXERCISES


def test_non_veg_without_conditions():
    plan = generate_diet_plan("non-veg")
    assert _names(plan["meals"][0]) == ["Eggs", "Whole grain toast", "Avocado"]
    assert plan["recommendations"] == []
    assert [e["name"] for e in plan["exercises"]] == ["Walking", "Light stretching"]


def test_daily_fitness_uses_fitness_template():
    plan = generate_diet_plan("non-veg", ["diabetes", "daily_fitness"])
    assert [m["name"] for m in plan["meals"]] == [
        "Breakfast", "Mid-Morning Snack", "Lunch", "Evening Snack", "Dinner",
    ]
    assert plan["meals"][2]["items"][0]["name"] == "Grilled Chicken"
    assert plan["meals"][4]["items"][0]["name"] == "Fish/Lean Meat"
    assert plan["exercises"] == FITNESS_EXERCISES
    assert plan["recommendations"] == FITNESS_RECOMMENDATIONS

    veg = generate_diet_plan("veg", ["daily_fitness"])
    assert veg["meals"][2]["items"][0]["name"] == "Lentils Curry"
    assert veg["meals"][4]["items"][0]["name"] == "Tofu Stir Fry"


def test_condition_blocks_in_priority_order():
    plan = generate_diet_plan("veg", ["weight_management", "hypertension", "diabetes"])
    assert plan["recommendations"] == (
        CONDITION_RECOMMENDATIONS["diabetes"]
        + CONDITION_RECOMMENDATIONS["hypertension"]
        + CONDITION_RECOMMENDATIONS["weight_management"]
    )


def test_weight_management_replaces_default_exercises():
    plan = generate_diet_plan("non-veg", ["weight_management"])
    assert plan["exercises"] == WEIGHT_MANAGEMENT_EXERCISES
    assert plan["meals"][0]["items"][0]["name"] == "Eggs"


def test_unknown_and_duplicate_tags():
    plan = generate_diet_plan("veg", ["diabetes", "Diabetes", "gout"])
    assert plan["recommendations"] == CONDITION_RECOMMENDATIONS["diabetes"]
    assert normalize_conditions(["gout", "heart_disease", "daily_fitness"]) == [
        "daily_fitness", "heart_disease",
    ]


def test_diet_type_normalization():
    assert normalize_diet_type(" VEG ") == "veg"
    assert normalize_diet_type("non-veg") == "non-veg"
    assert normalize_diet_type("vegan") == "non-veg"
    assert normalize_diet_type(None) == "non-veg"


def test_each_call_returns_fresh_lists():
    first = generate_diet_plan("veg", ["heart_disease"])
    first["meals"][0]["items"].clear()
    first["recommendations"].append("extra")
    first["exercises"][0]["name"] = "changed"

    second = generate_diet_plan("veg", ["heart_disease"])
    assert len(second["meals"][0]["items"]) == 3
    assert "extra" not in second["recommendations"]
    assert second["exercises"][0]["name"] == "Walking"

    fit = generate_diet_plan("veg", ["daily_fitness"])
    fit["recommendations"].clear()
    assert generate_diet_plan("veg", ["daily_fitness"])["recommendations"] == FITNESS_RECOMMENDATIONS


def test_meal_text():
    text = meal_text(generate_diet_plan("veg", ["diabetes"]))
    assert text.startswith("Breakfast: Steel-cut oats, Cinnamon, Chia seeds; Lunch:")
    assert text.endswith("Snacks: Almonds, Apple, Carrot sticks")
