"""
services.employee_store - Snapshot and upsert of Employee records.

The import engine only sees this class: a key-value view of the
employees table keyed by ``employee_id``.  Session lifetime is the
caller's responsibility; each upsert commits on its own so one bad
row cannot undo the rows written before it.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import Employee
from schema.fields import BUSINESS_KEY, COMPARED_FIELDS

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the employee store cannot be read or written."""
    pass


class EmployeeStore:

    def __init__(self, session: Session):
        self.session = session

    # ── Read ───────────────────────────────────────────────────────────

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Return ``employee_id → attributes`` for every stored employee."""
        try:
            employees = self.session.execute(select(Employee)).scalars().all()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Employee store unavailable: {exc}") from exc
        return {e.employee_id: _attributes(e) for e in employees}

    def get(self, employee_id: str) -> Employee | None:
        return self.session.execute(
            select(Employee).where(Employee.employee_id == employee_id)
        ).scalar_one_or_none()

    def count(self) -> int:
        return self.session.query(Employee).count()

    # ── Write ──────────────────────────────────────────────────────────

    def upsert(self, attrs: dict[str, Any]) -> Employee:
        """
        Create or update the employee identified by ``attrs["employee_id"]``
        and commit.  The lookup happens at write time, so a row created by a
        concurrent run is updated rather than duplicated (last write wins).
        """
        key = attrs[BUSINESS_KEY]
        try:
            employee = self.get(key)
            if employee is None:
                employee = Employee(employee_id=key)
                self.session.add(employee)
            for name in COMPARED_FIELDS:
                setattr(employee, name, attrs.get(name))
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Write failed for employee_id={key}: {exc}")
            raise StoreError(f"storage error: {_short(exc)}") from exc
        return employee


def _attributes(employee: Employee) -> dict[str, Any]:
    return {name: getattr(employee, name) for name in (BUSINESS_KEY,) + COMPARED_FIELDS}


def _short(exc: SQLAlchemyError) -> str:
    # The wrapped DBAPI message without the SQL statement and params
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc).splitlines()[0]
