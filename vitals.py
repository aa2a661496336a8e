# vitals.py
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from config import VALIDATION

# field -> (camelCase name, label, whole number?)
FIELDS = {
    "systolic": ("systolic", "systolic blood pressure", True),
    "diastolic": ("diastolic", "diastolic blood pressure", True),
    "heart_rate": ("heartRate", "heart rate", True),
    "temperature": ("temperature", "temperature", False),
    "oxygen_level": ("oxygenLevel", "oxygen level", True),
    "glucose_level": ("glucoseLevel", "glucose level", True),
}


class VitalsValidationError(ValueError):
    """Raised when a vitals submission is rejected. `errors` holds one message per bad field."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class VitalsReading(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    systolic: int
    diastolic: int
    heart_rate: int = Field(alias="heartRate")
    temperature: float
    oxygen_level: int = Field(alias="oxygenLevel")
    glucose_level: int = Field(alias="glucoseLevel")
    recorded_at: datetime = Field(default_factory=datetime.now, alias="recordedAt")
    patient_id: Optional[str] = Field(default=None, alias="patientId")


def _lookup(body: Mapping, field: str) -> Any:
    camel = FIELDS[field][0]
    if field in ("systolic", "diastolic"):
        bp = body.get("bloodPressure") or body.get("blood_pressure")
        if isinstance(bp, Mapping) and field in bp:
            return bp[field]
    if camel in body:
        return body[camel]
    return body.get(field)


def _to_number(value: Any, whole: bool) -> Optional[Union[int, float]]:
    if value is None or isinstance(value, bool):
        return None
    # ints of any size stay exact; float() overflows on very large ones
    if isinstance(value, int) and whole:
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if whole:
            try:
                return int(value)
            except ValueError:
                pass
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    if whole:
        if not number.is_integer():
            return None
        return int(number)
    return number


def _missing(field: str) -> str:
    camel, label, whole = FIELDS[field]
    kind = "a whole number" if whole else "a number"
    return f"{camel}: {label} is missing or not {kind}"


def _out_of_range(field: str, value: Union[int, float]) -> Optional[str]:
    lo, hi = VALIDATION[field]
    if value < lo or value > hi:
        camel, label, _ = FIELDS[field]
        shown = value if isinstance(value, int) else f"{value:g}"
        return f"{camel}: {label} must be between {lo} and {hi} (got {shown})"
    return None


def _coerce(body: Mapping, check_range: bool) -> Tuple[Dict[str, Union[int, float]], List[str]]:
    values: Dict[str, Union[int, float]] = {}
    errors: List[str] = []
    for field, (_, _, whole) in FIELDS.items():
        number = _to_number(_lookup(body, field), whole)
        if number is None:
            errors.append(_missing(field))
            continue
        values[field] = number
        if check_range:
            problem = _out_of_range(field, number)
            if problem:
                errors.append(problem)
    return values, errors


def _unwrap(payload: Mapping) -> Tuple[Mapping, Optional[str]]:
    # Accepts {"userId": ..., "vitals": {...}} as well as a bare vitals body
    inner = payload.get("vitals")
    if isinstance(inner, Mapping):
        owner = payload.get("userId") or payload.get("patientId")
        body = inner
    else:
        owner = payload.get("patientId") or payload.get("userId")
        body = payload
    return body, str(owner) if owner is not None else None


def _build(
    payload: Mapping,
    patient_id: Optional[str],
    recorded_at: Optional[datetime],
    check_range: bool,
) -> VitalsReading:
    if not isinstance(payload, Mapping):
        raise VitalsValidationError(["vitals payload must be an object"])

    body, body_patient = _unwrap(payload)
    values, errors = _coerce(body, check_range)
    if errors:
        raise VitalsValidationError(errors)

    return VitalsReading(
        **values,
        recorded_at=recorded_at or datetime.now(),
        patient_id=patient_id or body_patient,
    )


def parse_vitals(
    payload: Mapping,
    patient_id: Optional[str] = None,
    recorded_at: Optional[datetime] = None,
) -> VitalsReading:
    """
    Normalizes a submitted vitals body (nested or flat, camelCase or snake_case)
    into a VitalsReading. Only presence and numeric type are checked here;
    ranges are left to validate_vitals.
    """
    return _build(payload, patient_id, recorded_at, check_range=False)


def validate_vitals(reading: Union[VitalsReading, Mapping]) -> List[str]:
    """
    Returns errors in fixed field order; empty list means valid.
    A raw body is normalized exactly as parse_vitals would read it.
    """
    if isinstance(reading, Mapping):
        body, _ = _unwrap(reading)
        return _coerce(body, check_range=True)[1]

    errors: List[str] = []
    for field in VALIDATION:
        value = getattr(reading, field, None)
        if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append(_missing(field))
            continue
        problem = _out_of_range(field, value)
        if problem:
            errors.append(problem)
    return errors


def read_vitals(
    payload: Mapping,
    patient_id: Optional[str] = None,
    recorded_at: Optional[datetime] = None,
) -> VitalsReading:
    """Parse + range-check in one pass. Raises VitalsValidationError carrying every problem found."""
    return _build(payload, patient_id, recorded_at, check_range=True)
