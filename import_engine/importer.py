"""
import_engine.importer - Top-level orchestrator.

Coordinates csv_parser → row_processor → reconciler → employee store
writes, persists the ImportJob and produces a structured ImportReport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

import config
from db.engine import get_session
from import_engine.csv_parser import parse_csv, CsvParseError
from import_engine.outcome import RowOutcome, CREATE, UPDATE
from import_engine.reconciler import reconcile, flag_unresolved_managers
from import_engine.report import ImportReport
from import_engine.row_processor import RowProcessor
from services.employee_store import EmployeeStore, StoreError
from services.import_job_log import ImportJobLog, SUCCEEDED, FAILED

logger = logging.getLogger(__name__)


class ImportNotPermitted(Exception):
    """Raised when the calling actor's role may not run imports."""
    pass


@dataclass
class ImportResult:
    job_id: str | None
    report: ImportReport

    def to_dict(self) -> dict:
        return {"jobId": self.job_id, "report": self.report.to_dict()}


def run_import(
    file_content: str | bytes,
    uploaded_by: str,
    *,
    actor_role: str,
    source_file_name: str | None = None,
    session: Session | None = None,
) -> ImportResult:
    """
    Import a CSV roster into the employee store.

    Parameters
    ----------
    file_content : raw CSV (bytes or str)
    uploaded_by : actor identity recorded on the job
    actor_role : role of the caller; must be one of config.IMPORT_ROLES
    source_file_name : original upload name, kept for the audit record
    session : optional externally managed session (closed by the caller)

    Returns
    -------
    ImportResult with the job id (None if the job log was unreachable)
    and the report.  Row-level problems never fail the job; only
    structural ones do, and then the report holds fatal errors only.
    """
    if actor_role not in config.IMPORT_ROLES:
        raise ImportNotPermitted(f"Role {actor_role!r} may not run CSV imports")

    uploaded_by = (uploaded_by or "").strip().lower() or config.DEFAULT_UPLOADER

    own_session = session is None
    if own_session:
        session = get_session()

    try:
        return _run(session, file_content, uploaded_by, source_file_name)
    finally:
        if own_session:
            session.close()


def _run(session: Session, file_content, uploaded_by: str, source_file_name) -> ImportResult:
    report = ImportReport()
    jobs = ImportJobLog(session)
    store = EmployeeStore(session)

    try:
        job = jobs.create(uploaded_by, source_file_name)
    except StoreError as exc:
        logger.warning(f"Import aborted before a job could be recorded: {exc}")
        report.add_fatal(str(exc))
        return ImportResult(job_id=None, report=report)

    job_id = job.id
    try:
        jobs.start(job)
    except StoreError as exc:
        logger.warning(f"Import job {job_id} could not be started: {exc}")
        report.add_fatal(str(exc))
        return _finish(jobs, job, job_id, FAILED, report)

    logger.info(f"Import job {job_id} started by {uploaded_by}")

    try:
        parsed = parse_csv(file_content)

        processor = RowProcessor()
        outcomes = [processor.process(row) for row in parsed.rows]
        candidates = [o for o in outcomes if not o.rejected]

        snapshot = store.snapshot()
        reconcile(candidates, snapshot)
    except (CsvParseError, StoreError) as exc:
        logger.warning(f"Import job {job_id} failed: {exc}")
        report.add_fatal(str(exc))
        return _finish(jobs, job, job_id, FAILED, report)

    write_failed = False
    for outcome in outcomes:
        if outcome.action in (CREATE, UPDATE):
            write_failed |= not _apply(store, outcome)
    if write_failed:
        # Rows rejected at write time no longer count as manager targets
        flag_unresolved_managers(candidates, snapshot)

    report.total_rows = len(outcomes)
    for outcome in outcomes:
        report.record(outcome)

    logger.info(
        f"Import job {job_id} done: {report.created} created, {report.updated} updated, "
        f"{report.unchanged} unchanged, {report.rejected} rejected / {report.total_rows} rows"
    )
    return _finish(jobs, job, job_id, SUCCEEDED, report)


def _apply(store: EmployeeStore, outcome: RowOutcome) -> bool:
    """Write one row; a storage failure turns it into a rejection."""
    try:
        store.upsert(outcome.attributes)
    except StoreError as exc:
        outcome.warnings.clear()
        outcome.reject(str(exc))
        return False
    return True


def _finish(jobs: ImportJobLog, job, job_id: str, status: str, report: ImportReport) -> ImportResult:
    try:
        jobs.finish(job, status, report.to_dict())
    except StoreError as exc:
        logger.error(f"Could not finalise import job {job_id}: {exc}")
        report.add_fatal(str(exc))
    return ImportResult(job_id=job_id, report=report)
