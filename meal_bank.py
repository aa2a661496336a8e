# meal_bank.py
# Fixed meal / exercise / advice tables used by planner.py. Portions are household measures.

# High-activity template: 5 meals, proteins at lunch/dinner depend on diet type
FITNESS_MEALS = [
    {"name": "Breakfast", "items": [
        {"name": "Oats with Milk", "portion": "1 cup"},
        {"name": "Mixed Fruits", "portion": "1 cup"},
        {"name": "Nuts and Seeds Mix", "portion": "1 handful"},
    ]},
    {"name": "Mid-Morning Snack", "items": [
        {"name": "Greek Yogurt", "portion": "1 cup"},
        {"name": "Honey", "portion": "1 tsp"},
        {"name": "Mixed Berries", "portion": "1/2 cup"},
    ]},
    {"name": "Lunch", "items": [
        {"name": {"veg": "Lentils Curry", "non-veg": "Grilled Chicken"}, "portion": "150g"},
        {"name": "Brown Rice", "portion": "1 cup"},
        {"name": "Mixed Vegetables", "portion": "1 cup"},
        {"name": "Salad", "portion": "1 bowl"},
    ]},
    {"name": "Evening Snack", "items": [
        {"name": "Protein Shake", "portion": "1 glass"},
        {"name": "Banana", "portion": "1 medium"},
    ]},
    {"name": "Dinner", "items": [
        {"name": {"veg": "Tofu Stir Fry", "non-veg": "Fish/Lean Meat"}, "portion": "150g"},
        {"name": "Quinoa/Brown Rice", "portion": "1 cup"},
        {"name": "Steamed Vegetables", "portion": "1 cup"},
    ]},
]

FITNESS_EXERCISES = [
    {"name": "Morning Cardio (Running/Cycling)", "duration": "30 minutes", "frequency": "5-6 times per week"},
    {"name": "Strength Training", "duration": "45 minutes", "frequency": "3-4 times per week"},
    {"name": "Yoga/Stretching", "duration": "20 minutes", "frequency": "Daily"},
    {"name": "Evening Walk", "duration": "20 minutes", "frequency": "Daily"},
]

FITNESS_RECOMMENDATIONS = [
    "Stay hydrated by drinking 8-10 glasses of water daily",
    "Eat protein-rich foods within 30 minutes after workout",
    "Get 7-8 hours of quality sleep",
    "Include a mix of cardio and strength training",
    "Take rest days to allow muscle recovery",
    "Monitor your progress and adjust intensity gradually",
    "Maintain a food diary to track nutrition",
    "Consider pre and post-workout nutrition timing",
]

# Standard 4-meal template keyed by diet type
STANDARD_MEALS = {
    "veg": [
        {"name": "Breakfast", "items": [
            {"name": "Oatmeal with berries", "portion": "1 cup"},
            {"name": "Greek yogurt", "portion": "1/2 cup"},
            {"name": "Flaxseeds", "portion": "1 tablespoon"},
        ]},
        {"name": "Lunch", "items": [
            {"name": "Quinoa bowl", "portion": "1 cup"},
            {"name": "Mixed vegetables", "portion": "2 cups"},
            {"name": "Chickpeas", "portion": "1/2 cup"},
        ]},
        {"name": "Dinner", "items": [
            {"name": "Lentil soup", "portion": "1 cup"},
            {"name": "Whole grain bread", "portion": "1 slice"},
            {"name": "Mixed green salad", "portion": "2 cups"},
        ]},
    ],
    "non-veg": [
        {"name": "Breakfast", "items": [
            {"name": "Eggs", "portion": "2 whole"},
            {"name": "Whole grain toast", "portion": "1 slice"},
            {"name": "Avocado", "portion": "1/2 medium"},
        ]},
        {"name": "Lunch", "items": [
            {"name": "Grilled chicken breast", "portion": "4 oz"},
            {"name": "Brown rice", "portion": "1/2 cup"},
            {"name": "Steamed broccoli", "portion": "1 cup"},
        ]},
        {"name": "Dinner", "items": [
            {"name": "Baked salmon", "portion": "4 oz"},
            {"name": "Roasted sweet potato", "portion": "1 medium"},
            {"name": "Asparagus", "portion": "1 cup"},
        ]},
    ],
}

SNACKS = {"name": "Snacks", "items": [
    {"name": "Almonds", "portion": "1/4 cup"},
    {"name": "Apple", "portion": "1 medium"},
    {"name": "Carrot sticks", "portion": "1 cup"},
]}

# Low-glycemic breakfast that replaces the standard one for diabetes
DIABETES_BREAKFAST = [
    {"name": "Steel-cut oats", "portion": "1/2 cup"},
    {"name": "Cinnamon", "portion": "1 teaspoon"},
    {"name": "Chia seeds", "portion": "1 tablespoon"},
]

CONDITION_RECOMMENDATIONS = {
    "diabetes": [
        "Monitor blood glucose levels regularly",
        "Eat smaller meals throughout the day to maintain steady glucose levels",
        "Prioritize low glycemic index foods",
        "Limit refined carbohydrates and added sugars",
    ],
    "hypertension": [
        "Limit sodium intake to less than 2,300mg per day",
        "Increase potassium-rich foods like bananas and leafy greens",
        "Consider the DASH diet approach",
        "Limit alcohol consumption",
    ],
    "heart_disease": [
        "Focus on heart-healthy omega-3 fatty acids",
        "Reduce saturated and trans fats",
        "Increase fiber intake to help lower cholesterol",
        "Consider adding soluble fiber from oats and barley",
    ],
    "weight_management": [
        "Create a moderate calorie deficit of 500 calories per day",
        "Prioritize protein to maintain muscle mass",
        "Drink water before meals to increase fullness",
        "Track food intake with a journal or app",
    ],
}

WEIGHT_MANAGEMENT_EXERCISES = [
    {"name": "High-intensity interval training", "duration": "20 minutes", "frequency": "3 times per week"},
    {"name": "Strength training", "duration": "30 minutes", "frequency": "2-3 times per week"},
]

DEFAULT_EXERCISES = [
    {"name": "Walking", "duration": "30 minutes", "frequency": "Daily"},
    {"name": "Light stretching", "duration": "15 minutes", "frequency": "Daily"},
]
