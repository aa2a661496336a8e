import pytest

from assessment import Assessment, assess_vitals, severity
from vitals import read_vitals


def _vitals(**overrides):
    base = {
        "systolic": 120,
        "diastolic": 80,
        "heart_rate": 72,
        "temperature": 36.8,
        "oxygen_level": 98,
        "glucose_level": 100,
    }
    base.update(overrides)
    return base


def test_hypertensive_crisis_is_urgent():
    result = assess_vitals(_vitals(systolic=185, diastolic=95, heart_rate=80, temperature=37.0,
                                   oxygen_level=97, glucose_level=90))
    assert result.needs_urgent_care is True
    assert result.needs_attention is False
    assert result.concerns == ["Hypertensive crisis"]
    assert result.recommendations == [
        "Seek emergency medical care",
        "Avoid strenuous activities until assessed",
    ]


def test_normal_reading_has_no_concerns():
    result = assess_vitals(_vitals(systolic=130, diastolic=85, heart_rate=70, glucose_level=110))
    assert result == Assessment()
    assert severity(result) == "normal"


def test_low_oxygen_is_urgent():
    result = assess_vitals(_vitals(oxygen_level=89))
    assert result.needs_urgent_care
    assert result.concerns == ["Low oxygen saturation"]
    assert result.recommendations == ["Seek immediate medical attention"]


def test_concerns_follow_fixed_vital_order():
    reading = {
        "glucoseLevel": 350,
        "oxygenLevel": 93,
        "temperature": 39.5,
        "heartRate": 130,
        "diastolic": 80,
        "systolic": 150,
    }
    result = assess_vitals(reading)
    assert result.concerns == [
        "High blood pressure",
        "Elevated heart rate",
        "High fever",
        "Below normal oxygen level",
        "High blood sugar",
    ]
    assert result.needs_urgent_care and result.needs_attention
    assert severity(result) == "urgent"


def test_one_concern_per_vital():
    # crisis also satisfies the high threshold; only the most severe row applies
    result = assess_vitals(_vitals(systolic=190, diastolic=115))
    assert result.concerns == ["Hypertensive crisis"]
    result = assess_vitals(_vitals(temperature=40.0))
    assert result.concerns == ["High fever"]


@pytest.mark.parametrize("overrides, concern, urgent", [
    ({"systolic": 180}, "Hypertensive crisis", True),
    ({"diastolic": 110}, "Hypertensive crisis", True),
    ({"systolic": 140}, "High blood pressure", False),
    ({"diastolic": 90}, "High blood pressure", False),
    ({"systolic": 90}, "Low blood pressure", False),
    ({"diastolic": 60}, "Low blood pressure", False),
    ({"heart_rate": 120}, "Elevated heart rate", False),
    ({"heart_rate": 50}, "Low heart rate", False),
    ({"temperature": 39.0}, "High fever", True),
    ({"temperature": 37.8}, "Mild fever", False),
    ({"oxygen_level": 90}, "Low oxygen saturation", True),
    ({"oxygen_level": 94}, "Below normal oxygen level", False),
    ({"glucose_level": 300}, "High blood sugar", True),
    ({"glucose_level": 70}, "Low blood sugar", True),
])
def test_thresholds_are_inclusive(overrides, concern, urgent):
    result = assess_vitals(_vitals(**overrides))
    assert result.concerns == [concern]
    assert result.needs_urgent_care is urgent
    assert result.needs_attention is (not urgent)


@pytest.mark.parametrize("overrides", [
    {"systolic": 139, "diastolic": 89},
    {"systolic": 91, "diastolic": 61},
    {"heart_rate": 119},
    {"heart_rate": 51},
    {"temperature": 37.7},
    {"oxygen_level": 95},
    {"glucose_level": 299},
    {"glucose_level": 71},
])
def test_just_inside_thresholds_is_quiet(overrides):
    assert assess_vitals(_vitals(**overrides)).concerns == []


def test_urgent_and_attention_can_both_be_set():
    result = assess_vitals(_vitals(heart_rate=130, glucose_level=350))
    assert result.needs_urgent_care and result.needs_attention
    assert result.concerns == ["Elevated heart rate", "High blood sugar"]


def test_absent_fields_never_trigger():
    result = assess_vitals({"systolic": 120, "diastolic": 80})
    assert result.concerns == []
    assert not result.needs_urgent_care and not result.needs_attention


def test_same_input_same_output(normal_vitals):
    reading = read_vitals(dict(normal_vitals, temperature=38.2))
    assert assess_vitals(reading) == assess_vitals(reading)
    assert assess_vitals(reading).concerns == ["Mild fever"]


def test_flags_imply_concerns():
    for overrides in ({"systolic": 200}, {"oxygen_level": 92}, {"glucose_level": 45}, {}):
        result = assess_vitals(_vitals(**overrides))
        if result.needs_urgent_care or result.needs_attention:
            assert result.concerns
        else:
            assert result.concerns == [] and result.recommendations == []


def test_to_json_uses_camel_case():
    data = assess_vitals(_vitals(oxygen_level=89)).to_json()
    assert data == {
        "needsUrgentCare": True,
        "needsAttention": False,
        "concerns": ["Low oxygen saturation"],
        "recommendations": ["Seek immediate medical attention"],
    }
    assert severity(data) == "urgent"
    assert severity({"needsAttention": True}) == "attention"
