from datetime import date

import pytest

from services.employee_store import EmployeeStore, StoreError
from tests.factories import EmployeeFactory, block_inserts_of


def attrs(employee_id="E1", **overrides):
    return {
        "employee_id": employee_id,
        "name": "Ada",
        "email": "ada@example.com",
        "title": "Engineer",
        "department": "R&D",
        "location": "London",
        "status": "active",
        "start_date": date(2020, 1, 6),
        "manager_employee_id": None,
        "photo_url": None,
        **overrides,
    }


def test_snapshot_is_keyed_by_business_key(session):
    EmployeeFactory(employee_id="A1", status="leave")
    EmployeeFactory(employee_id="A2")

    snap = EmployeeStore(session).snapshot()

    assert set(snap) == {"A1", "A2"}
    assert snap["A1"]["status"] == "leave"
    assert "id" not in snap["A1"]


def test_upsert_creates_then_updates_in_place(session):
    store = EmployeeStore(session)
    created = store.upsert(attrs())
    updated = store.upsert(attrs(title="Principal Engineer"))

    assert created.id == updated.id
    assert store.count() == 1
    assert store.get("E1").title == "Principal Engineer"


def test_failed_write_rolls_back_and_raises_store_error(session):
    block_inserts_of(session, "E2")
    store = EmployeeStore(session)

    with pytest.raises(StoreError, match="^storage error: boom$"):
        store.upsert(attrs("E2"))

    # Session is usable again after the rollback
    store.upsert(attrs("E3"))
    assert store.get("E2") is None
    assert store.count() == 1
