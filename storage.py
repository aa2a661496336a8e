# storage.py
import os
import json
import logging
import uuid
from datetime import date, datetime
from typing import Dict, List, Optional

from sqlalchemy import (
    create_engine, MetaData, Table, Column,
    Integer, Float, String, Boolean, DateTime, Text
)
from sqlalchemy.engine import Engine
from sqlalchemy.sql import select, insert, update, delete, and_, or_
from sqlalchemy.pool import NullPool, StaticPool

logger = logging.getLogger(__name__)


def _get_db_url() -> str:
    return os.getenv("DATABASE_URL", "").strip()


_engine = None


def make_engine(db_url: str = "") -> Engine:
    if not db_url:
        return create_engine("sqlite:///care_portal.db", connect_args={"check_same_thread": False})
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every checkout sees an empty database
        return create_engine(db_url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    if db_url.startswith("sqlite"):
        return create_engine(db_url, connect_args={"check_same_thread": False})
    return create_engine(db_url, pool_pre_ping=True, poolclass=NullPool)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = make_engine(_get_db_url())
    return _engine


metadata = MetaData()

users = Table(
    "users", metadata,
    Column("id", String(40), primary_key=True),
    Column("email", String(200), nullable=False, unique=True),
    Column("name", String(200), nullable=False),
    Column("role", String(20), nullable=False),
    Column("phone", String(40), nullable=True),
    Column("address", Text, nullable=True),
    Column("specialization", String(120), nullable=True),
    Column("experience", Integer, nullable=True),
    Column("education", Text, nullable=True),
    Column("languages_json", Text, nullable=True),
    Column("bio", Text, nullable=True),
    Column("age", Integer, nullable=True),
    Column("has_active_chat", Boolean, nullable=False, default=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

connections = Table(
    "connections", metadata,
    Column("user_id", String(40), primary_key=True),
    Column("other_id", String(40), primary_key=True),
    Column("created_at", DateTime, nullable=False),
)

connection_requests = Table(
    "connection_requests", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("doctor_id", String(40), nullable=False),
    Column("patient_id", String(40), nullable=False),
    Column("reason", Text, nullable=True),
    Column("status", String(20), nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

vitals = Table(
    "vitals", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("patient_id", String(40), nullable=False),
    Column("systolic", Integer, nullable=False),
    Column("diastolic", Integer, nullable=False),
    Column("heart_rate", Integer, nullable=False),
    Column("temperature", Float, nullable=False),
    Column("oxygen_level", Integer, nullable=False),
    Column("glucose_level", Integer, nullable=False),
    Column("recorded_at", DateTime, nullable=False),
    Column("needs_urgent_care", Boolean, nullable=False),
    Column("needs_attention", Boolean, nullable=False),
    Column("concerns_json", Text, nullable=False),
    Column("recommendations_json", Text, nullable=False),
)

vitals_shares = Table(
    "vitals_shares", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("vitals_id", Integer, nullable=False),
    Column("doctor_id", String(40), nullable=False),
    Column("share_method", String(20), nullable=False),
    Column("shared_at", DateTime, nullable=False),
)

health_records = Table(
    "health_records", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("patient_id", String(40), nullable=False),
    Column("title", String(200), nullable=False),
    Column("description", Text, nullable=False),
    Column("condition", String(200), nullable=False),
    Column("diagnosis", Text, nullable=True),
    Column("date", DateTime, nullable=False),
    Column("created_by", String(40), nullable=False),
    Column("updated_by", String(40), nullable=True),
    Column("shared_with_json", Text, nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

diet_plans = Table(
    "diet_plans", metadata,
    Column("patient_id", String(40), primary_key=True),
    Column("diet_type", String(20), nullable=False),
    Column("conditions_json", Text, nullable=False),
    Column("plan_json", Text, nullable=False),
    Column("created_at", DateTime, nullable=False),
)

pregnancy_trackers = Table(
    "pregnancy_trackers", metadata,
    Column("patient_id", String(40), primary_key=True),
    Column("lmp_date", String(10), nullable=False),
    Column("due_date", String(10), nullable=False),
    Column("current_week", Integer, nullable=False),
    Column("trimester", Integer, nullable=False),
    Column("notes", Text, nullable=True),
    Column("info_json", Text, nullable=False),
    Column("symptoms_json", Text, nullable=False),
    Column("weight_log_json", Text, nullable=False),
    Column("created_at", DateTime, nullable=False),
)

chats = Table(
    "chats", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("sender_id", String(40), nullable=False),
    Column("receiver_id", String(40), nullable=False),
    Column("content", Text, nullable=False),
    Column("created_at", DateTime, nullable=False),
)

USER_FIELDS = (
    "name", "email", "phone", "address", "specialization",
    "experience", "education", "bio", "age",
)


def _loads(text: Optional[str], default):
    try:
        return json.loads(text) if text else default
    except ValueError:
        logger.warning("Could not decode stored JSON column; using default")
        return default


def _as_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    return datetime.fromisoformat(str(value))


def _user_row(row) -> Dict:
    d = dict(row._mapping)
    d["languages"] = _loads(d.pop("languages_json"), [])
    d["has_active_chat"] = bool(d["has_active_chat"])
    return d


def _vitals_row(row) -> Dict:
    d = dict(row._mapping)
    d["assessment"] = {
        "needsUrgentCare": bool(d.pop("needs_urgent_care")),
        "needsAttention": bool(d.pop("needs_attention")),
        "concerns": _loads(d.pop("concerns_json"), []),
        "recommendations": _loads(d.pop("recommendations_json"), []),
    }
    return d


def _record_row(row) -> Dict:
    d = dict(row._mapping)
    d["shared_with"] = _loads(d.pop("shared_with_json"), [])
    return d


class PortalStore:
    """
    Repository over the portal tables. Takes an engine so callers (and tests)
    decide where the data lives; every method runs in its own transaction.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine if engine is not None else get_engine()

    def init_db(self) -> None:
        metadata.create_all(self.engine)

    # ---- users ----

    def create_user(self, email: str, name: str, role: str, **profile) -> Dict:
        if role not in ("patient", "doctor"):
            raise ValueError(f"Unknown role: {role}")
        now = datetime.now()
        user_id = uuid.uuid4().hex
        payload = {k: profile.get(k) for k in USER_FIELDS if k not in ("name", "email")}
        payload.update(
            id=user_id,
            email=email.strip().lower(),
            name=name.strip(),
            role=role,
            languages_json=json.dumps(list(profile.get("languages") or [])),
            has_active_chat=False,
            created_at=now,
            updated_at=now,
        )
        with self.engine.begin() as conn:
            conn.execute(insert(users).values(**payload))
        logger.info("Created %s account %s", role, user_id)
        return self.get_user(user_id)

    def get_user(self, user_id: str) -> Optional[Dict]:
        with self.engine.begin() as conn:
            row = conn.execute(select(users).where(users.c.id == user_id)).fetchone()
        return _user_row(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[Dict]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(users).where(users.c.email == email.strip().lower())
            ).fetchone()
        return _user_row(row) if row else None

    def update_user(self, user_id: str, data: Dict) -> Optional[Dict]:
        payload = {k: data[k] for k in USER_FIELDS if k in data}
        if "languages" in data:
            payload["languages_json"] = json.dumps(list(data["languages"] or []))
        if "has_active_chat" in data:
            payload["has_active_chat"] = bool(data["has_active_chat"])
        payload["updated_at"] = datetime.now()
        with self.engine.begin() as conn:
            conn.execute(update(users).where(users.c.id == user_id).values(**payload))
        return self.get_user(user_id)

    def list_doctors(self) -> List[Dict]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(users).where(users.c.role == "doctor").order_by(users.c.name)
            ).fetchall()
        return [_user_row(r) for r in rows]

    # ---- connections ----

    def connect(self, user_id: str, other_id: str) -> None:
        now = datetime.now()
        with self.engine.begin() as conn:
            for a, b in ((user_id, other_id), (other_id, user_id)):
                exists = conn.execute(
                    select(connections.c.user_id).where(
                        and_(connections.c.user_id == a, connections.c.other_id == b)
                    )
                ).fetchone()
                if not exists:
                    conn.execute(insert(connections).values(user_id=a, other_id=b, created_at=now))

    def are_connected(self, user_id: str, other_id: str) -> bool:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(connections.c.user_id).where(
                    and_(connections.c.user_id == user_id, connections.c.other_id == other_id)
                )
            ).fetchone()
        return row is not None

    def connected_user_ids(self, user_id: str) -> List[str]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(connections.c.other_id)
                .where(connections.c.user_id == user_id)
                .order_by(connections.c.created_at)
            ).fetchall()
        return [r[0] for r in rows]

    # ---- connection requests ----

    def add_connection_request(self, doctor_id: str, patient_id: str, reason: str = "") -> Dict:
        now = datetime.now()
        with self.engine.begin() as conn:
            result = conn.execute(insert(connection_requests).values(
                doctor_id=doctor_id,
                patient_id=patient_id,
                reason=reason or None,
                status="pending",
                created_at=now,
                updated_at=now,
            ))
            request_id = result.inserted_primary_key[0]
        return self.get_connection_request(request_id)

    def get_connection_request(self, request_id: int) -> Optional[Dict]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(connection_requests).where(connection_requests.c.id == request_id)
            ).fetchone()
        return dict(row._mapping) if row else None

    def find_open_request(self, doctor_id: str, patient_id: str) -> Optional[Dict]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(connection_requests).where(and_(
                    connection_requests.c.doctor_id == doctor_id,
                    connection_requests.c.patient_id == patient_id,
                    connection_requests.c.status.in_(["pending", "approved"]),
                ))
            ).fetchone()
        return dict(row._mapping) if row else None

    def list_pending_requests(self, doctor_id: str) -> List[Dict]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(connection_requests).where(and_(
                    connection_requests.c.doctor_id == doctor_id,
                    connection_requests.c.status == "pending",
                )).order_by(connection_requests.c.created_at)
            ).fetchall()
        return [dict(r._mapping) for r in rows]

    def set_request_status(self, request_id: int, status: str) -> Optional[Dict]:
        with self.engine.begin() as conn:
            conn.execute(
                update(connection_requests)
                .where(connection_requests.c.id == request_id)
                .values(status=status, updated_at=datetime.now())
            )
        return self.get_connection_request(request_id)

    # ---- vitals ----

    def add_vitals(self, reading, assessment) -> Dict:
        """Stores a VitalsReading together with the Assessment computed for it."""
        with self.engine.begin() as conn:
            result = conn.execute(insert(vitals).values(
                patient_id=reading.patient_id,
                systolic=reading.systolic,
                diastolic=reading.diastolic,
                heart_rate=reading.heart_rate,
                temperature=float(reading.temperature),
                oxygen_level=reading.oxygen_level,
                glucose_level=reading.glucose_level,
                recorded_at=reading.recorded_at,
                needs_urgent_care=assessment.needs_urgent_care,
                needs_attention=assessment.needs_attention,
                concerns_json=json.dumps(assessment.concerns),
                recommendations_json=json.dumps(assessment.recommendations),
            ))
            vitals_id = result.inserted_primary_key[0]
        return self.get_vitals(vitals_id)

    def get_vitals(self, vitals_id: int) -> Optional[Dict]:
        with self.engine.begin() as conn:
            row = conn.execute(select(vitals).where(vitals.c.id == vitals_id)).fetchone()
        return _vitals_row(row) if row else None

    def vitals_history(self, patient_id: str, limit: Optional[int] = 10) -> List[Dict]:
        q = (
            select(vitals)
            .where(vitals.c.patient_id == patient_id)
            .order_by(vitals.c.recorded_at.desc(), vitals.c.id.desc())
        )
        if limit:
            q = q.limit(limit)
        with self.engine.begin() as conn:
            rows = conn.execute(q).fetchall()
        return [_vitals_row(r) for r in rows]

    def latest_vitals(self, patient_id: str) -> Optional[Dict]:
        rows = self.vitals_history(patient_id, limit=1)
        return rows[0] if rows else None

    def add_vitals_share(self, vitals_id: int, doctor_id: str, share_method: str) -> Dict:
        now = datetime.now()
        with self.engine.begin() as conn:
            result = conn.execute(insert(vitals_shares).values(
                vitals_id=vitals_id,
                doctor_id=doctor_id,
                share_method=share_method,
                shared_at=now,
            ))
            share_id = result.inserted_primary_key[0]
        return {
            "id": share_id,
            "vitals_id": vitals_id,
            "doctor_id": doctor_id,
            "share_method": share_method,
            "shared_at": now,
        }

    def vitals_shares(self, vitals_id: int) -> List[Dict]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(vitals_shares)
                .where(vitals_shares.c.vitals_id == vitals_id)
                .order_by(vitals_shares.c.shared_at)
            ).fetchall()
        return [dict(r._mapping) for r in rows]

    # ---- health records ----

    def add_health_record(self, patient_id: str, created_by: str, data: Dict) -> Dict:
        now = datetime.now()
        with self.engine.begin() as conn:
            result = conn.execute(insert(health_records).values(
                patient_id=patient_id,
                title=data["title"],
                description=data["description"],
                condition=data["condition"],
                diagnosis=data.get("diagnosis"),
                date=_as_datetime(data.get("date")) or now,
                created_by=created_by,
                updated_by=None,
                shared_with_json=json.dumps([]),
                created_at=now,
                updated_at=now,
            ))
            record_id = result.inserted_primary_key[0]
        return self.get_health_record(record_id)

    def get_health_record(self, record_id: int) -> Optional[Dict]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(health_records).where(health_records.c.id == record_id)
            ).fetchone()
        return _record_row(row) if row else None

    def health_records_for(self, patient_id: str) -> List[Dict]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(health_records)
                .where(health_records.c.patient_id == patient_id)
                .order_by(health_records.c.date.desc(), health_records.c.created_at.desc())
            ).fetchall()
        return [_record_row(r) for r in rows]

    def update_health_record(self, record_id: int, updated_by: str, data: Dict) -> Optional[Dict]:
        payload = {
            k: data[k] for k in ("title", "description", "condition", "diagnosis", "date") if k in data
        }
        if payload.get("date") is not None:
            payload["date"] = _as_datetime(payload["date"])
        payload.update(updated_by=updated_by, updated_at=datetime.now())
        with self.engine.begin() as conn:
            conn.execute(
                update(health_records).where(health_records.c.id == record_id).values(**payload)
            )
        return self.get_health_record(record_id)

    def delete_health_record(self, record_id: int) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(delete(health_records).where(health_records.c.id == record_id))
        return result.rowcount > 0

    def set_record_shared_with(self, record_id: int, user_ids: List[str]) -> Optional[Dict]:
        with self.engine.begin() as conn:
            conn.execute(
                update(health_records)
                .where(health_records.c.id == record_id)
                .values(shared_with_json=json.dumps(list(user_ids)), updated_at=datetime.now())
            )
        return self.get_health_record(record_id)

    # ---- diet plans (latest wins) ----

    def save_diet_plan(self, patient_id: str, diet_type: str, conditions: List[str], plan: Dict) -> Dict:
        now = datetime.now()
        with self.engine.begin() as conn:
            conn.execute(delete(diet_plans).where(diet_plans.c.patient_id == patient_id))
            conn.execute(insert(diet_plans).values(
                patient_id=patient_id,
                diet_type=diet_type,
                conditions_json=json.dumps(list(conditions)),
                plan_json=json.dumps(plan),
                created_at=now,
            ))
        return self.get_diet_plan(patient_id)

    def get_diet_plan(self, patient_id: str) -> Optional[Dict]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(diet_plans).where(diet_plans.c.patient_id == patient_id)
            ).fetchone()
        if not row:
            return None
        d = dict(row._mapping)
        d["conditions"] = _loads(d.pop("conditions_json"), [])
        d.update(_loads(d.pop("plan_json"), {}))
        return d

    # ---- pregnancy trackers (latest wins) ----

    def save_pregnancy_tracker(self, patient_id: str, info: Dict, notes: Optional[str] = None,
                               symptoms: Optional[List] = None, weight_log: Optional[List] = None) -> Dict:
        now = datetime.now()
        with self.engine.begin() as conn:
            conn.execute(delete(pregnancy_trackers).where(pregnancy_trackers.c.patient_id == patient_id))
            conn.execute(insert(pregnancy_trackers).values(
                patient_id=patient_id,
                lmp_date=info["lmp_date"],
                due_date=info["due_date"],
                current_week=info["current_week"],
                trimester=info["trimester"],
                notes=notes or None,
                info_json=json.dumps(info),
                symptoms_json=json.dumps(symptoms or []),
                weight_log_json=json.dumps(weight_log or []),
                created_at=now,
            ))
        return self.get_pregnancy_tracker(patient_id)

    def get_pregnancy_tracker(self, patient_id: str) -> Optional[Dict]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(pregnancy_trackers).where(pregnancy_trackers.c.patient_id == patient_id)
            ).fetchone()
        if not row:
            return None
        d = dict(row._mapping)
        d["info"] = _loads(d.pop("info_json"), {})
        d["symptoms"] = _loads(d.pop("symptoms_json"), [])
        d["weight_log"] = _loads(d.pop("weight_log_json"), [])
        return d

    def append_pregnancy_logs(self, patient_id: str, symptoms: Optional[List[Dict]] = None,
                              weight_entries: Optional[List[Dict]] = None) -> Optional[Dict]:
        """Adds entries to the tracker's symptom and weight logs; None when there is no tracker."""
        tracker = self.get_pregnancy_tracker(patient_id)
        if not tracker:
            return None
        with self.engine.begin() as conn:
            conn.execute(
                update(pregnancy_trackers)
                .where(pregnancy_trackers.c.patient_id == patient_id)
                .values(
                    symptoms_json=json.dumps(tracker["symptoms"] + list(symptoms or [])),
                    weight_log_json=json.dumps(tracker["weight_log"] + list(weight_entries or [])),
                )
            )
        return self.get_pregnancy_tracker(patient_id)

    # ---- chats ----

    def add_chat_message(self, sender_id: str, receiver_id: str, content: str) -> Dict:
        now = datetime.now()
        with self.engine.begin() as conn:
            result = conn.execute(insert(chats).values(
                sender_id=sender_id,
                receiver_id=receiver_id,
                content=content,
                created_at=now,
            ))
            message_id = result.inserted_primary_key[0]
        return {
            "id": message_id,
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "content": content,
            "created_at": now,
        }

    def conversation(self, user_id: str, other_id: str, limit: int = 50) -> List[Dict]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(chats).where(or_(
                    and_(chats.c.sender_id == user_id, chats.c.receiver_id == other_id),
                    and_(chats.c.sender_id == other_id, chats.c.receiver_id == user_id),
                ))
                .order_by(chats.c.created_at.desc(), chats.c.id.desc())
                .limit(limit)
            ).fetchall()
        return [dict(r._mapping) for r in reversed(rows)]
