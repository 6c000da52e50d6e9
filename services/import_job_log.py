"""
services.import_job_log - ImportJob lifecycle persistence.

A job is written as pending, moved to running when parsing starts and
finalised exactly once.  After ``finished_at`` is set the record is
read-only.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import ImportJob
from services.employee_store import StoreError

PENDING = "pending"
RUNNING = "running"
SUCCEEDED = "succeeded"
FAILED = "failed"


class JobAlreadyFinished(Exception):
    """Raised on any attempt to modify a finalised ImportJob."""
    pass


class ImportJobLog:

    def __init__(self, session: Session):
        self.session = session

    def create(self, uploaded_by: str, source_file_name: str | None = None) -> ImportJob:
        job = ImportJob(
            uploaded_by=uploaded_by,
            source_file_name=source_file_name,
            status=PENDING,
        )
        self.session.add(job)
        self._commit("create import job")
        return job

    def start(self, job: ImportJob) -> ImportJob:
        self._ensure_open(job)
        job.status = RUNNING
        job.started_at = datetime.now(timezone.utc)
        self._commit("start import job")
        return job

    def finish(self, job: ImportJob, status: str, report: dict) -> ImportJob:
        """Persist final counts, report and timestamps; the job is frozen afterwards."""
        self._ensure_open(job)
        if status not in (SUCCEEDED, FAILED):
            raise ValueError(f"not a final job status: {status}")

        job.status = status
        job.total_rows = report.get("totalRows", 0)
        job.created_count = report.get("createdCount", 0)
        job.updated_count = report.get("updatedCount", 0)
        job.failed_count = report.get("rejectedCount", 0)
        job.report_json = json.dumps(report, ensure_ascii=False)
        job.finished_at = datetime.now(timezone.utc)
        self._commit("finish import job")
        return job

    # ── Read ───────────────────────────────────────────────────────────

    def get(self, job_id: str) -> ImportJob | None:
        return self.session.get(ImportJob, job_id)

    def recent(self, limit: int) -> list[ImportJob]:
        return list(self.session.execute(
            select(ImportJob).order_by(ImportJob.uploaded_at.desc()).limit(limit)
        ).scalars())

    # ── Private helpers ────────────────────────────────────────────────

    @staticmethod
    def _ensure_open(job: ImportJob) -> None:
        if job.finished_at is not None:
            raise JobAlreadyFinished(f"Import job {job.id} is already finalised")

    def _commit(self, what: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Import job log unavailable ({what}): {exc}") from exc
