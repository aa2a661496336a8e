# config.py
# Clinical thresholds + settings (kept in one place so they are easy to review)

# Physiologically plausible input ranges (inclusive). Anything outside is rejected
# before an assessment is attempted.
VALIDATION = {
    "systolic": (60, 200),
    "diastolic": (40, 120),
    "heart_rate": (40, 200),
    "temperature": (35, 42),
    "oxygen_level": (70, 100),
    "glucose_level": (40, 400),
}

ASSESSMENT = {
    # Blood pressure (mmHg)
    "bp_crisis_sys": 180,
    "bp_crisis_dia": 110,
    "bp_high_sys": 140,
    "bp_high_dia": 90,
    "bp_low_sys": 90,
    "bp_low_dia": 60,

    # Heart rate (bpm)
    "hr_high": 120,
    "hr_low": 50,

    # Temperature (°C)
    "temp_high_fever": 39.0,
    "temp_mild_fever": 37.8,

    # Oxygen saturation (%)
    "o2_critical": 90,
    "o2_low": 94,

    # Glucose (mg/dL)
    "glucose_very_high": 300,
    "glucose_low": 70,
}

PREGNANCY = {
    "term_days": 280,
    "conception_offset_days": 14,
    "first_trimester_end_days": 84,
    "second_trimester_end_days": 182,
    # trimester boundaries by completed week
    "second_trimester_week": 13,
    "third_trimester_week": 27,
    # weekly weight gain (lb) after the first trimester
    "weekly_gain_min": 0.5,
    "weekly_gain_max": 1.0,
    "bp_high_sys": 140,
    "bp_high_dia": 90,
}

HISTORY = {
    "vitals_limit": 10,
    "chat_limit": 50,
}

APP = {
    "title": "Care Portal",
    "disclaimer": (
        "Educational support tool only. Not medical advice. "
        "Assessments are rule-based and do not diagnose or replace clinician care. "
        "If readings are concerning or you feel unwell, seek medical care."
    )
}
