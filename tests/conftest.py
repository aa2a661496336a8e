from datetime import datetime

import pytest

from storage import PortalStore, make_engine


NORMAL_VITALS = {
    "systolic": 120,
    "diastolic": 80,
    "heartRate": 72,
    "temperature": 36.8,
    "oxygenLevel": 98,
    "glucoseLevel": 100,
}


@pytest.fixture
def normal_vitals():
    return dict(NORMAL_VITALS)


@pytest.fixture
def store():
    s = PortalStore(make_engine("sqlite://"))
    s.init_db()
    return s


@pytest.fixture
def patient(store):
    return store.create_user("pat@example.com", "Pat Patient", "patient", age=34)


@pytest.fixture
def doctor(store):
    return store.create_user("doc@example.com", "Dana Doctor", "doctor", specialization="Cardiology")


@pytest.fixture
def connected(store, patient, doctor):
    store.connect(doctor["id"], patient["id"])
    return patient, doctor


@pytest.fixture
def at():
    """Builds distinct, ordered timestamps for stored readings."""
    def _at(day: int, hour: int = 9) -> datetime:
        return datetime(2025, 3, day, hour, 0)
    return _at
