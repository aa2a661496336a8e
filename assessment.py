# assessment.py
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from config import ASSESSMENT
from vitals import FIELDS, VitalsReading


class Assessment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    needs_urgent_care: bool = Field(default=False, alias="needsUrgentCare")
    needs_attention: bool = Field(default=False, alias="needsAttention")
    concerns: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


def _get(vitals: Union[VitalsReading, Mapping], field: str) -> Optional[float]:
    if isinstance(vitals, Mapping):
        value = vitals.get(field, vitals.get(FIELDS[field][0]))
    else:
        value = getattr(vitals, field, None)
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def assess_vitals(vitals: Union[VitalsReading, Mapping[str, Any]]) -> Assessment:
    """
    Classifies one validated reading.

    Vitals are evaluated in a fixed order (blood pressure, heart rate,
    temperature, oxygen, glucose) and each contributes at most one concern.
    An absent value simply never triggers.
    """
    result = Assessment()

    def urgent(concern: str, *recs: str) -> None:
        result.needs_urgent_care = True
        result.concerns.append(concern)
        result.recommendations.extend(recs)

    def attention(concern: str, *recs: str) -> None:
        result.needs_attention = True
        result.concerns.append(concern)
        result.recommendations.extend(recs)

    sys_bp = _get(vitals, "systolic")
    dia_bp = _get(vitals, "diastolic")
    hr = _get(vitals, "heart_rate")
    temp = _get(vitals, "temperature")
    o2 = _get(vitals, "oxygen_level")
    glucose = _get(vitals, "glucose_level")

    # Blood pressure
    def bp_at_least(s: float, d: float) -> bool:
        return (sys_bp is not None and sys_bp >= s) or (dia_bp is not None and dia_bp >= d)

    if bp_at_least(ASSESSMENT["bp_crisis_sys"], ASSESSMENT["bp_crisis_dia"]):
        urgent(
            "Hypertensive crisis",
            "Seek emergency medical care",
            "Avoid strenuous activities until assessed",
        )
    elif bp_at_least(ASSESSMENT["bp_high_sys"], ASSESSMENT["bp_high_dia"]):
        attention(
            "High blood pressure",
            "Schedule appointment with healthcare provider",
            "Reduce salt intake",
        )
    elif (sys_bp is not None and sys_bp <= ASSESSMENT["bp_low_sys"]) or (
        dia_bp is not None and dia_bp <= ASSESSMENT["bp_low_dia"]
    ):
        attention(
            "Low blood pressure",
            "Stay hydrated",
            "Monitor for dizziness or fainting",
        )

    # Heart rate
    if hr is not None:
        if hr >= ASSESSMENT["hr_high"]:
            attention("Elevated heart rate", "Rest and monitor heart rate")
        elif hr <= ASSESSMENT["hr_low"]:
            attention("Low heart rate", "Consult healthcare provider")

    # Temperature
    if temp is not None:
        if temp >= ASSESSMENT["temp_high_fever"]:
            urgent("High fever", "Take fever medication and seek medical attention")
        elif temp >= ASSESSMENT["temp_mild_fever"]:
            attention("Mild fever", "Monitor temperature and rest")

    # Oxygen
    if o2 is not None:
        if o2 <= ASSESSMENT["o2_critical"]:
            urgent("Low oxygen saturation", "Seek immediate medical attention")
        elif o2 <= ASSESSMENT["o2_low"]:
            attention("Below normal oxygen level", "Monitor oxygen levels closely")

    # Glucose
    if glucose is not None:
        if glucose >= ASSESSMENT["glucose_very_high"]:
            urgent(
                "High blood sugar",
                "Take insulin as prescribed and contact healthcare provider",
            )
        elif glucose <= ASSESSMENT["glucose_low"]:
            urgent(
                "Low blood sugar",
                "Consume fast-acting carbohydrates and monitor levels",
            )

    return result


def severity(assessment: Union[Assessment, Mapping]) -> str:
    """Collapses an assessment to "urgent" | "attention" | "normal" for display."""
    if isinstance(assessment, Mapping):
        urgent_flag = assessment.get("needsUrgentCare", assessment.get("needs_urgent_care"))
        attention_flag = assessment.get("needsAttention", assessment.get("needs_attention"))
    else:
        urgent_flag, attention_flag = assessment.needs_urgent_care, assessment.needs_attention
    if urgent_flag:
        return "urgent"
    if attention_flag:
        return "attention"
    return "normal"
