import json
from datetime import datetime

import pytest

from config import VALIDATION
from vitals import (
    FIELDS,
    VitalsReading,
    VitalsValidationError,
    parse_vitals,
    read_vitals,
    validate_vitals,
)


@pytest.mark.parametrize("field", list(VALIDATION))
def test_boundaries_are_inclusive(field, normal_vitals):
    lo, hi = VALIDATION[field]
    camel = FIELDS[field][0]
    for value in (lo, hi):
        payload = dict(normal_vitals, **{camel: value})
        reading = read_vitals(payload)
        assert getattr(reading, field) == value


@pytest.mark.parametrize("field", list(VALIDATION))
def test_one_unit_beyond_is_rejected(field, normal_vitals):
    lo, hi = VALIDATION[field]
    camel = FIELDS[field][0]
    for value in (lo - 1, hi + 1):
        payload = dict(normal_vitals, **{camel: value})
        with pytest.raises(VitalsValidationError) as exc:
            read_vitals(payload)
        assert len(exc.value.errors) == 1
        assert exc.value.errors[0].startswith(camel)


def test_every_bad_field_reported_in_field_order(normal_vitals):
    payload = dict(normal_vitals, glucoseLevel=500, systolic=20, heartRate="fast")
    with pytest.raises(VitalsValidationError) as exc:
        read_vitals(payload)
    prefixes = [e.split(":")[0] for e in exc.value.errors]
    assert prefixes == ["systolic", "heartRate", "glucoseLevel"]
    assert "missing or not" in exc.value.errors[1]


def test_nested_blood_pressure_and_envelope():
    body = {
        "userId": "p-1",
        "vitals": {
            "bloodPressure": {"systolic": "118", "diastolic": 76},
            "heartRate": 64,
            "temperature": "36.6",
            "oxygenLevel": 99,
            "glucoseLevel": 95.0,
        },
    }
    reading = read_vitals(body)
    assert reading.systolic == 118
    assert reading.temperature == pytest.approx(36.6)
    assert reading.glucose_level == 95
    assert reading.patient_id == "p-1"


def test_snake_case_keys_accepted():
    reading = read_vitals({
        "systolic": 110, "diastolic": 70, "heart_rate": 60,
        "temperature": 36.5, "oxygen_level": 97, "glucose_level": 90,
    }, patient_id="p-2")
    assert reading.heart_rate == 60
    assert reading.patient_id == "p-2"


@pytest.mark.parametrize("bad", [None, "", "abc", True, float("nan")])
def test_missing_or_non_numeric_is_a_validation_error(bad, normal_vitals):
    payload = dict(normal_vitals, oxygenLevel=bad)
    with pytest.raises(VitalsValidationError) as exc:
        read_vitals(payload)
    assert exc.value.errors == ["oxygenLevel: oxygen level is missing or not a whole number"]


def test_absent_field_is_a_validation_error(normal_vitals):
    normal_vitals.pop("temperature")
    with pytest.raises(VitalsValidationError) as exc:
        parse_vitals(normal_vitals)
    assert exc.value.errors == ["temperature: temperature is missing or not a number"]


def test_fractional_value_for_whole_number_field(normal_vitals):
    with pytest.raises(VitalsValidationError):
        read_vitals(dict(normal_vitals, heartRate=72.5))


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        read_vitals("not a mapping")


def test_parse_does_not_range_check(normal_vitals):
    reading = parse_vitals(dict(normal_vitals, systolic=250))
    assert reading.systolic == 250
    assert validate_vitals(reading) == [
        "systolic: systolic blood pressure must be between 60 and 200 (got 250)"
    ]


def test_validate_accepts_mapping(normal_vitals):
    assert validate_vitals(normal_vitals) == []
    assert len(validate_vitals({})) == len(VALIDATION)


def test_reading_is_immutable(normal_vitals):
    reading = read_vitals(normal_vitals, recorded_at=datetime(2025, 1, 1, 8, 0))
    assert reading.recorded_at == datetime(2025, 1, 1, 8, 0)
    with pytest.raises(Exception):
        reading.systolic = 130


def test_dump_uses_original_field_names(normal_vitals):
    reading = read_vitals(normal_vitals, patient_id="p-3")
    dumped = reading.model_dump(by_alias=True)
    assert {"heartRate", "oxygenLevel", "glucoseLevel", "recordedAt", "patientId"} <= set(dumped)


def test_direct_construction_skips_ranges():
    reading = VitalsReading(
        systolic=59, diastolic=80, heart_rate=72, temperature=36.8, oxygen_level=98, glucose_level=100
    )
    assert validate_vitals(reading)[0].startswith("systolic")


def test_huge_json_integer_is_a_validation_error(normal_vitals):
    body = json.loads(json.dumps(normal_vitals).replace('"systolic": 120', '"systolic": ' + "9" * 400))
    with pytest.raises(VitalsValidationError) as exc:
        read_vitals(body)
    assert len(exc.value.errors) == 1
    assert exc.value.errors[0].startswith("systolic: systolic blood pressure must be between 60 and 200")


def test_huge_values_for_other_fields(normal_vitals):
    with pytest.raises(VitalsValidationError) as exc:
        read_vitals(dict(normal_vitals, temperature=10 ** 400, heartRate="9" * 400))
    assert [e.split(":")[0] for e in exc.value.errors] == ["heartRate", "temperature"]
    assert "missing or not a number" in exc.value.errors[1]


def test_validate_reads_bodies_like_the_parser(normal_vitals):
    as_strings = dict(normal_vitals, systolic="120", heartRate=" 72 ", temperature="36.8")
    assert validate_vitals(as_strings) == []
    assert read_vitals(as_strings).systolic == 120

    nested = {
        "bloodPressure": {"systolic": 118, "diastolic": 76},
        "heartRate": 64, "temperature": 36.6, "oxygenLevel": 99, "glucoseLevel": 95,
    }
    assert validate_vitals(nested) == []
    assert validate_vitals({"userId": "p-1", "vitals": nested}) == []
    assert validate_vitals(dict(nested, bloodPressure={"systolic": 250, "diastolic": 76})) == [
        "systolic: systolic blood pressure must be between 60 and 200 (got 250)"
    ]


def test_numeric_envelope_id_becomes_a_string(normal_vitals):
    reading = read_vitals({"userId": 42, "vitals": normal_vitals})
    assert reading.patient_id == "42"
    assert parse_vitals(dict(normal_vitals, patientId=7)).patient_id == "7"
