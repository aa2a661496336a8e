# pregnancy.py
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Union

from config import PREGNANCY

MILESTONE_WINDOWS = {
    "firstUltrasound": "8-14 weeks",
    "geneticTesting": "10-13 weeks",
    "genderReveal": "18-22 weeks",
    "glucoseTest": "24-28 weeks",
    "groupBStrep": "36 weeks",
}

WARNING_SYMPTOMS = {
    "severe headache",
    "blurred vision",
    "severe abdominal pain",
    "vaginal bleeding",
    "reduced fetal movement",
    "severe swelling",
}

WEEKLY_RECOMMENDATIONS = {
    1: {
        "nutrition": [
            "Take prenatal vitamins with folic acid",
            "Stay hydrated with 8-10 glasses of water daily",
            "Eat small, frequent meals to manage morning sickness",
            "Focus on protein-rich foods",
        ],
        "exercise": [
            "Light walking for 20-30 minutes daily",
            "Gentle stretching exercises",
            "Avoid high-impact activities",
        ],
        "lifestyle": [
            "Get plenty of rest",
            "Avoid alcohol and smoking",
            "Limit caffeine intake",
        ],
        "medical": [
            "Schedule first prenatal visit",
            "Get necessary blood tests",
            "Discuss any medications with healthcare provider",
        ],
    },
    2: {
        "nutrition": [
            "Increase calcium intake",
            "Add iron-rich foods to diet",
            "Continue prenatal vitamins",
            "Monitor weight gain",
        ],
        "exercise": [
            "Moderate walking or swimming",
            "Prenatal yoga classes",
            "Kegel exercises",
            "Avoid exercises that risk falling",
        ],
        "lifestyle": [
            "Start planning nursery",
            "Consider childbirth classes",
            "Sleep on left side for better blood flow",
        ],
        "medical": [
            "Schedule regular prenatal check-ups",
            "Get anatomy ultrasound",
            "Monitor blood pressure",
        ],
    },
    3: {
        "nutrition": [
            "Eat frequent, small meals",
            "Focus on nutrient-dense foods",
            "Monitor fluid intake",
            "Watch for heartburn triggers",
        ],
        "exercise": [
            "Gentle walking",
            "Stretching exercises",
            "Pelvic floor exercises",
            "Avoid strenuous activities",
        ],
        "lifestyle": [
            "Prepare hospital bag",
            "Finalize birth plan",
            "Practice relaxation techniques",
            "Monitor fetal movements",
        ],
        "medical": [
            "Weekly check-ups in final month",
            "Monitor for labor signs",
            "Get Group B strep test",
            "Discuss birth plan with healthcare provider",
        ],
    },
}


def _as_date(value: Union[str, date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip()).date()
    except ValueError:
        raise ValueError(f"Invalid date format: {value!r}")


def trimester_for_week(week: int) -> int:
    if week < PREGNANCY["second_trimester_week"]:
        return 1
    if week < PREGNANCY["third_trimester_week"]:
        return 2
    return 3


def calculate_pregnancy(
    lmp_date: Union[str, date, datetime],
    today: Optional[date] = None,
) -> Dict:
    """
    Due date, current week/trimester and milestone dates from the last menstrual period.
    Raises ValueError for an unparseable or future LMP date.
    """
    lmp = _as_date(lmp_date)
    today = today or date.today()
    if lmp > today:
        raise ValueError("Last Menstrual Period date cannot be in the future")

    days = (today - lmp).days
    week = days // 7
    due = lmp + timedelta(days=PREGNANCY["term_days"])

    return {
        "lmp_date": lmp.isoformat(),
        "due_date": due.isoformat(),
        "conception_date": (lmp + timedelta(days=PREGNANCY["conception_offset_days"])).isoformat(),
        "days_pregnant": days,
        "current_week": week,
        "trimester": trimester_for_week(week),
        "trimester_ends": {
            "first": (lmp + timedelta(days=PREGNANCY["first_trimester_end_days"])).isoformat(),
            "second": (lmp + timedelta(days=PREGNANCY["second_trimester_end_days"])).isoformat(),
            "third": due.isoformat(),
        },
        "milestones": dict(MILESTONE_WINDOWS),
    }


def weekly_recommendations(week: int) -> Dict[str, List[str]]:
    if week <= 12:
        block = WEEKLY_RECOMMENDATIONS[1]
    elif week <= 26:
        block = WEEKLY_RECOMMENDATIONS[2]
    else:
        block = WEEKLY_RECOMMENDATIONS[3]
    return {k: list(v) for k, v in block.items()}


def _parse_bp(blood_pressure: str):
    try:
        sys_s, dia_s = str(blood_pressure).split("/")
        return float(sys_s), float(dia_s)
    except ValueError:
        return None


def health_alerts(
    week: int,
    symptoms: Iterable[str] = (),
    blood_pressure: Optional[str] = None,
    weekly_gain: Optional[float] = None,
) -> List[Dict]:
    alerts: List[Dict] = []

    for symptom in symptoms or []:
        if symptom and symptom.strip().lower() in WARNING_SYMPTOMS:
            alerts.append({
                "level": "high",
                "type": "symptom",
                "message": f"Immediate medical attention recommended for: {symptom.strip()}",
            })

    if blood_pressure:
        bp = _parse_bp(blood_pressure)
        if bp and (bp[0] >= PREGNANCY["bp_high_sys"] or bp[1] >= PREGNANCY["bp_high_dia"]):
            alerts.append({
                "level": "high",
                "type": "blood_pressure",
                "message": "Blood pressure is elevated. Contact healthcare provider.",
            })

    # Gain targets only apply after the first trimester
    if weekly_gain is not None and week > 12:
        if weekly_gain < PREGNANCY["weekly_gain_min"]:
            alerts.append({
                "level": "medium",
                "type": "weight",
                "message": "Weight gain is below recommended range. Discuss nutrition with healthcare provider.",
            })
        elif weekly_gain > PREGNANCY["weekly_gain_max"]:
            alerts.append({
                "level": "medium",
                "type": "weight",
                "message": "Weight gain is above recommended range. Discuss with healthcare provider.",
            })

    return alerts
