from datetime import date

import pytest

from pregnancy import calculate_pregnancy, health_alerts, trimester_for_week, weekly_recommendations


def test_due_date_and_progress():
    info = calculate_pregnancy("2024-01-01", today=date(2024, 3, 1))
    assert info["due_date"] == "2024-10-07"
    assert info["conception_date"] == "2024-01-15"
    assert info["days_pregnant"] == 60
    assert info["current_week"] == 8
    assert info["trimester"] == 1
    assert info["trimester_ends"] == {
        "first": "2024-03-25",
        "second": "2024-07-01",
        "third": "2024-10-07",
    }
    assert info["milestones"]["glucoseTest"] == "24-28 weeks"


def test_lmp_today_is_week_zero():
    info = calculate_pregnancy(date(2024, 5, 1), today=date(2024, 5, 1))
    assert info["current_week"] == 0
    assert info["trimester"] == 1


@pytest.mark.parametrize("week, trimester", [(0, 1), (12, 1), (13, 2), (26, 2), (27, 3), (40, 3)])
def test_trimester_boundaries(week, trimester):
    assert trimester_for_week(week) == trimester


def test_future_lmp_rejected():
    with pytest.raises(ValueError):
        calculate_pregnancy("2024-06-01", today=date(2024, 5, 1))


def test_bad_date_rejected():
    with pytest.raises(ValueError, match="Invalid date format"):
        calculate_pregnancy("not-a-date")


def test_weekly_recommendations_by_trimester():
    assert weekly_recommendations(12)["medical"][0] == "Schedule first prenatal visit"
    assert weekly_recommendations(13)["nutrition"][0] == "Increase calcium intake"
    assert weekly_recommendations(27)["lifestyle"][0] == "Prepare hospital bag"


def test_weekly_recommendations_are_copies():
    weekly_recommendations(5)["exercise"].clear()
    assert weekly_recommendations(5)["exercise"]


def test_warning_symptoms():
    alerts = health_alerts(20, symptoms=["Severe Headache", "nausea"])
    assert len(alerts) == 1
    assert alerts[0]["level"] == "high"
    assert alerts[0]["type"] == "symptom"
    assert "Severe Headache" in alerts[0]["message"]


def test_blood_pressure_alert():
    assert health_alerts(20, blood_pressure="145/85")[0]["type"] == "blood_pressure"
    assert health_alerts(20, blood_pressure="120/95")[0]["type"] == "blood_pressure"
    assert health_alerts(20, blood_pressure="120/80") == []
    assert health_alerts(20, blood_pressure="bad") == []


def test_weight_gain_only_after_first_trimester():
    assert health_alerts(10, weekly_gain=0.1) == []
    low = health_alerts(20, weekly_gain=0.2)
    assert [a["level"] for a in low] == ["medium"]
    assert "below" in low[0]["message"]
    assert "above" in health_alerts(30, weekly_gain=1.5)[0]["message"]
    assert health_alerts(30, weekly_gain=0.8) == []
