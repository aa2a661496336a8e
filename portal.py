# portal.py
# Patient/doctor use-cases on top of an injected PortalStore (and ChatHub for live delivery).
import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional

from assessment import assess_vitals, severity
from chat import ChatHub
from config import HISTORY
from planner import generate_diet_plan, normalize_conditions, normalize_diet_type
from pregnancy import calculate_pregnancy, health_alerts, weekly_recommendations
from storage import PortalStore
from vitals import read_vitals

logger = logging.getLogger(__name__)


class PortalError(Exception):
    pass


class NotFoundError(PortalError):
    pass


class AccessDeniedError(PortalError):
    pass


class ConflictError(PortalError):
    pass


def _require_user(store: PortalStore, user_id: str, role: Optional[str] = None) -> Dict:
    user = store.get_user(user_id)
    if not user or (role and user["role"] != role):
        raise NotFoundError(f"{(role or 'user').capitalize()} not found")
    return user


def _can_view_patient(store: PortalStore, viewer_id: str, patient_id: str) -> bool:
    if viewer_id == patient_id:
        return True
    viewer = store.get_user(viewer_id)
    return bool(viewer and viewer["role"] == "doctor" and store.are_connected(viewer_id, patient_id))


# -------------------------
# Vitals
# -------------------------

def submit_vitals(
    store: PortalStore,
    patient_id: str,
    payload: Mapping,
    recorded_at: Optional[datetime] = None,
) -> Dict:
    """Validate -> assess -> persist. Raises VitalsValidationError before anything is stored."""
    _require_user(store, patient_id, role="patient")
    reading = read_vitals(payload, patient_id=patient_id, recorded_at=recorded_at)
    assessment = assess_vitals(reading)

    record = store.add_vitals(reading, assessment)
    if assessment.needs_urgent_care:
        logger.warning(
            "Urgent vitals recorded for patient %s: %s", patient_id, ", ".join(assessment.concerns)
        )
    return record


def vitals_history(
    store: PortalStore,
    viewer_id: str,
    patient_id: str,
    limit: int = HISTORY["vitals_limit"],
) -> List[Dict]:
    if not _can_view_patient(store, viewer_id, patient_id):
        raise AccessDeniedError("Not authorized to view these vitals")
    return store.vitals_history(patient_id, limit=limit)


def vitals_message(record: Dict) -> str:
    """Chat-ready summary of a stored reading and its assessment."""
    a = record["assessment"]
    lines = [
        f"Vitals recorded {record['recorded_at']:%Y-%m-%d %H:%M}",
        f"BP {record['systolic']}/{record['diastolic']} mmHg, HR {record['heart_rate']} bpm, "
        f"Temp {record['temperature']:.1f} °C, SpO2 {record['oxygen_level']}%, "
        f"Glucose {record['glucose_level']} mg/dL",
        f"Status: {severity(a)}",
    ]
    if a["concerns"]:
        lines.append("Concerns: " + "; ".join(a["concerns"]))
    return "\n".join(lines)


def share_vitals(
    store: PortalStore,
    hub: Optional[ChatHub],
    patient_id: str,
    vitals_id: int,
    doctor_id: str,
    method: str = "chat",
) -> Dict:
    if method not in ("chat", "email"):
        raise ValueError(f"Unknown share method: {method}")
    _require_user(store, doctor_id, role="doctor")

    record = store.get_vitals(vitals_id)
    if not record:
        raise NotFoundError("Vitals record not found")
    if record["patient_id"] != patient_id:
        raise AccessDeniedError("Not authorized to share this record")

    message = None
    if method == "chat":
        message = send_message(store, hub, patient_id, doctor_id, vitals_message(record))

    share = store.add_vitals_share(vitals_id, doctor_id, method)
    share["message"] = message
    return share


# -------------------------
# Diet plans
# -------------------------

def create_diet_plan(store: PortalStore, patient_id: str, diet_type: str, conditions: Iterable[str]) -> Dict:
    _require_user(store, patient_id)
    diet = normalize_diet_type(diet_type)
    tags = normalize_conditions(conditions)
    plan = generate_diet_plan(diet, tags)
    return store.save_diet_plan(patient_id, diet, tags, plan)


def get_diet_plan(store: PortalStore, patient_id: str) -> Dict:
    plan = store.get_diet_plan(patient_id)
    if not plan:
        raise NotFoundError("Diet plan not found")
    return plan


# -------------------------
# Pregnancy
# -------------------------

def track_pregnancy(
    store: PortalStore,
    patient_id: str,
    lmp_date,
    notes: Optional[str] = None,
    today: Optional[date] = None,
) -> Dict:
    _require_user(store, patient_id, role="patient")
    info = calculate_pregnancy(lmp_date, today=today)
    return store.save_pregnancy_tracker(patient_id, info, notes=notes)


def pregnancy_overview(
    store: PortalStore,
    patient_id: str,
    today: Optional[date] = None,
    symptoms: Iterable[str] = (),
    blood_pressure: Optional[str] = None,
    weekly_gain: Optional[float] = None,
) -> Dict:
    tracker = store.get_pregnancy_tracker(patient_id)
    if not tracker:
        raise NotFoundError("No pregnancy tracker found for this patient")

    # week moves on from the day the tracker was saved
    info = calculate_pregnancy(tracker["lmp_date"], today=today)
    week = info["current_week"]
    return {
        "tracker": tracker,
        "pregnancy_info": info,
        "weekly_recommendations": weekly_recommendations(week),
        "health_alerts": health_alerts(week, symptoms, blood_pressure, weekly_gain),
    }


def log_pregnancy_check(
    store: PortalStore,
    patient_id: str,
    symptoms: Iterable[str] = (),
    weight: Optional[float] = None,
    weekly_gain: Optional[float] = None,
    blood_pressure: Optional[str] = None,
    today: Optional[date] = None,
) -> Dict:
    """Records the day's symptoms and weight on the tracker, then returns the overview with alerts."""
    day = (today or date.today()).isoformat()
    symptoms = [s.strip() for s in symptoms or [] if s and s.strip()]

    weight_entries = []
    if weight is not None or weekly_gain is not None:
        weight_entries.append({"date": day, "weight": weight, "weekly_gain": weekly_gain})

    tracker = store.append_pregnancy_logs(
        patient_id,
        symptoms=[{"date": day, "type": s} for s in symptoms],
        weight_entries=weight_entries,
    )
    if not tracker:
        raise NotFoundError("No pregnancy tracker found for this patient")

    return pregnancy_overview(store, patient_id, today, symptoms, blood_pressure, weekly_gain)


# -------------------------
# Connections
# -------------------------

def request_connection(store: PortalStore, patient_id: str, doctor_id: str, reason: str = "") -> Dict:
    _require_user(store, patient_id, role="patient")
    _require_user(store, doctor_id, role="doctor")

    if store.are_connected(patient_id, doctor_id):
        raise ConflictError("Already connected with this doctor")
    existing = store.find_open_request(doctor_id, patient_id)
    if existing:
        if existing["status"] == "approved":
            raise ConflictError("Already connected with this doctor")
        raise ConflictError("Connection request already exists")

    return store.add_connection_request(doctor_id, patient_id, reason)


def pending_requests(store: PortalStore, doctor_id: str) -> List[Dict]:
    out = []
    for req in store.list_pending_requests(doctor_id):
        patient = store.get_user(req["patient_id"])
        req["patient"] = (
            {"name": patient["name"], "age": patient["age"]} if patient else {"name": "Unknown", "age": None}
        )
        out.append(req)
    return out


def respond_to_request(store: PortalStore, doctor_id: str, request_id: int, status: str) -> Dict:
    if status not in ("approved", "rejected"):
        raise ValueError(f"Unknown request status: {status}")

    req = store.get_connection_request(request_id)
    if not req:
        raise NotFoundError("Connection request not found")
    if req["doctor_id"] != doctor_id:
        raise AccessDeniedError("Not authorized to update this request")

    req = store.set_request_status(request_id, status)
    if status == "approved":
        store.connect(req["doctor_id"], req["patient_id"])
        logger.info("Doctor %s connected with patient %s", req["doctor_id"], req["patient_id"])
    return req


def connected_users(store: PortalStore, user_id: str) -> List[Dict]:
    _require_user(store, user_id)
    out = []
    for other_id in store.connected_user_ids(user_id):
        u = store.get_user(other_id)
        if u:
            out.append({k: u[k] for k in ("id", "name", "role", "specialization", "has_active_chat")})
    return out


def doctor_alerts(store: PortalStore, doctor_id: str) -> List[Dict]:
    """Latest reading of each connected patient that needs care, urgent first."""
    _require_user(store, doctor_id, role="doctor")
    alerts = []
    for patient_id in store.connected_user_ids(doctor_id):
        patient = store.get_user(patient_id)
        if not patient or patient["role"] != "patient":
            continue
        latest = store.latest_vitals(patient_id)
        if not latest:
            continue
        level = severity(latest["assessment"])
        if level != "normal":
            alerts.append({"patient": {"id": patient_id, "name": patient["name"]}, "level": level, "vitals": latest})

    alerts.sort(key=lambda a: 0 if a["level"] == "urgent" else 1)
    return alerts


# -------------------------
# Health records
# -------------------------

def add_health_record(store: PortalStore, author_id: str, patient_id: str, data: Mapping) -> Dict:
    author = _require_user(store, author_id)
    _require_user(store, patient_id, role="patient")

    if author["role"] == "doctor":
        if not store.are_connected(author_id, patient_id):
            raise AccessDeniedError("Not authorized to add records for this patient")
    elif author_id != patient_id:
        raise AccessDeniedError("Patients can only add their own health records")

    missing = [k for k in ("title", "description", "condition") if not str(data.get(k) or "").strip()]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")

    return store.add_health_record(patient_id, author_id, dict(data))


def list_health_records(store: PortalStore, viewer_id: str, patient_id: str) -> List[Dict]:
    records = store.health_records_for(patient_id)
    if _can_view_patient(store, viewer_id, patient_id):
        return records
    shared = [r for r in records if viewer_id in r["shared_with"]]
    if not shared:
        raise AccessDeniedError("Not authorized to view these records")
    return shared


def _own_record(store: PortalStore, user_id: str, record_id: int) -> Dict:
    record = store.get_health_record(record_id)
    if not record:
        raise NotFoundError("Health record not found")
    if record["created_by"] != user_id:
        raise AccessDeniedError("Only the author can change this health record")
    return record


def update_health_record(store: PortalStore, doctor_id: str, record_id: int, data: Mapping) -> Dict:
    _require_user(store, doctor_id, role="doctor")
    _own_record(store, doctor_id, record_id)
    return store.update_health_record(record_id, doctor_id, dict(data))


def delete_health_record(store: PortalStore, user_id: str, record_id: int) -> None:
    _own_record(store, user_id, record_id)
    store.delete_health_record(record_id)


def share_health_record(store: PortalStore, patient_id: str, record_id: int) -> Dict:
    record = store.get_health_record(record_id)
    if not record:
        raise NotFoundError("Health record not found")
    if record["patient_id"] != patient_id:
        raise AccessDeniedError("Not authorized to share this record")

    shared = list(record["shared_with"])
    for other_id in store.connected_user_ids(patient_id):
        other = store.get_user(other_id)
        if other and other["role"] == "doctor" and other_id not in shared:
            shared.append(other_id)
    return store.set_record_shared_with(record_id, shared)


# -------------------------
# Chat
# -------------------------

def send_message(
    store: PortalStore,
    hub: Optional[ChatHub],
    sender_id: str,
    recipient_id: str,
    content: str,
) -> Dict:
    if not store.are_connected(sender_id, recipient_id):
        raise AccessDeniedError("Not connected with this user")
    content = (content or "").strip()
    if not content:
        raise ValueError("Message content is empty")

    message = store.add_chat_message(sender_id, recipient_id, content)
    for uid in (sender_id, recipient_id):
        store.update_user(uid, {"has_active_chat": True})

    delivered = hub.deliver(recipient_id, dict(message)) if hub is not None else False
    message["delivered"] = delivered
    return message


def conversation(
    store: PortalStore,
    user_id: str,
    other_id: str,
    limit: int = HISTORY["chat_limit"],
) -> List[Dict]:
    if not store.are_connected(user_id, other_id):
        raise AccessDeniedError("Not connected with this user")
    return store.conversation(user_id, other_id, limit=limit)
