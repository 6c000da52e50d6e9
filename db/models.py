"""
db.models - SQLAlchemy ORM declarations.

Tables
------
employees    - one row per person, upserted by the business key
               ``employee_id``.  The surrogate ``id`` never leaves the
               database layer.
import_jobs  - write-once audit record for each CSV import run.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Date, DateTime, Text, Index,
)
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class Employee(Base):
    __tablename__ = "employees"

    # ── Identity ───────────────────────────────────────────────────────
    id          = Column(String(36), primary_key=True, default=_new_id)
    employee_id = Column(String(100), unique=True, nullable=False, index=True)

    # ── Required attributes ────────────────────────────────────────────
    name       = Column(String(200), nullable=False)
    email      = Column(String(320), nullable=False, index=True)
    title      = Column(String(200), nullable=False)
    department = Column(String(200), nullable=False, index=True)
    location   = Column(String(200), nullable=False, index=True)
    status     = Column(String(20), nullable=False, default="active")

    # ── Optional attributes ────────────────────────────────────────────
    start_date          = Column(Date, nullable=True)
    manager_employee_id = Column(String(100), nullable=True, index=True)
    photo_url           = Column(Text, nullable=True)

    # ── Timestamps ─────────────────────────────────────────────────────
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class ImportJob(Base):
    """
    One execution of the CSV import pipeline.

    Lifecycle: pending → running → succeeded | failed.  Once
    ``finished_at`` is set the row is never modified again.
    """
    __tablename__ = "import_jobs"

    id               = Column(String(36), primary_key=True, default=_new_id)
    uploaded_by      = Column(String(320), nullable=False)
    source_file_name = Column(String(500), nullable=True)
    status           = Column(String(20), nullable=False, default="pending")

    uploaded_at = Column(DateTime, nullable=False, default=_utcnow)
    started_at  = Column(DateTime, nullable=True)
    finished_at = Column(DateTime, nullable=True)

    total_rows    = Column(Integer, nullable=False, default=0)
    created_count = Column(Integer, nullable=False, default=0)
    updated_count = Column(Integer, nullable=False, default=0)
    failed_count  = Column(Integer, nullable=False, default=0)

    report_json = Column(Text, default="{}")

    __table_args__ = (
        Index("ix_import_jobs_uploaded_at", "uploaded_at"),
    )

    @property
    def report(self) -> dict:
        if not self.report_json:
            return {}
        try:
            return json.loads(self.report_json)
        except (json.JSONDecodeError, TypeError):
            return {}

    def to_dict(self, *, include_report: bool = True) -> dict:
        d = {
            "id": self.id,
            "uploaded_by": self.uploaded_by,
            "source_file_name": self.source_file_name,
            "status": self.status,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "total_rows": self.total_rows,
            "created_count": self.created_count,
            "updated_count": self.updated_count,
            "failed_count": self.failed_count,
        }
        if include_report:
            d["report"] = self.report
        return d
