import csv
import io
import json

import pytest
from sqlalchemy import select

from db.models import Employee, ImportJob
from import_engine import run_import, ImportNotPermitted
from services.employee_store import EmployeeStore, StoreError
from services.import_job_log import ImportJobLog
from tests.factories import EmployeeFactory, block_inserts_of, make_csv

ROWS = [
    "E1,Ada Lovelace,ada@example.com,Engineer,R&D,London,active,2020-01-06,,",
    "E2,Grace Hopper,grace@example.com,Admiral,Navy,Arlington,,,E1,",
    "E3,Alan Turing,alan@example.com,Researcher,R&D,Manchester,Contractor,,E1,https://img/alan.png",
]


def employees(session):
    session.expire_all()
    return {e.employee_id: e for e in session.execute(select(Employee)).scalars()}


def test_creates_new_employees_and_records_job(session):
    result = run_import(make_csv(*ROWS), " HR@Example.com ", actor_role="hr_editor",
                        source_file_name="roster.csv", session=session)

    d = result.to_dict()["report"]
    assert (d["totalRows"], d["createdCount"], d["updatedCount"], d["rejectedCount"]) == (3, 3, 0, 0)
    assert d["errorCsv"] is None

    stored = employees(session)
    assert set(stored) == {"E1", "E2", "E3"}
    assert stored["E3"].status == "contractor"
    assert stored["E2"].status == "active"
    assert stored["E2"].manager_employee_id == "E1"

    job = session.get(ImportJob, result.job_id)
    assert job.status == "succeeded"
    assert job.uploaded_by == "hr@example.com"
    assert job.source_file_name == "roster.csv"
    assert (job.total_rows, job.created_count, job.updated_count, job.failed_count) == (3, 3, 0, 0)
    assert job.started_at is not None and job.finished_at is not None
    assert json.loads(job.report_json)["createdCount"] == 3


def test_three_valid_rows_and_one_missing_name(session):
    text = make_csv(*ROWS, "E4,,e4@example.com,Intern,R&D,Remote,,,,")
    report = run_import(text, "hr@example.com", actor_role="admin", session=session).report

    assert (report.total_rows, report.created, report.rejected) == (4, 3, 1)
    assert report.rejected_rows == [
        {"rowNumber": 4, "employeeId": "E4", "errors": ["name is required"]}
    ]
    rows = list(csv.reader(io.StringIO(report.error_csv())))
    assert len(rows) == 2
    assert rows[1][:2] == ["4", "E4"]
    assert "E4" not in employees(session)


def test_reimporting_same_file_is_idempotent(session):
    text = make_csv(*ROWS)
    run_import(text, "hr@example.com", actor_role="admin", session=session)
    before = {k: e.updated_at for k, e in employees(session).items()}

    report = run_import(text, "hr@example.com", actor_role="admin", session=session).report

    assert (report.created, report.updated, report.unchanged) == (0, 0, 3)
    after = {k: e.updated_at for k, e in employees(session).items()}
    assert after == before


def test_changed_rows_update_existing_employees(session):
    EmployeeFactory(employee_id="E1", name="Ada King", email="ada@example.com",
                    title="Engineer", department="R&D", location="London")

    report = run_import(make_csv(ROWS[0]), "hr@example.com", actor_role="admin",
                        session=session).report

    assert (report.created, report.updated) == (0, 1)
    e1 = employees(session)["E1"]
    assert e1.name == "Ada Lovelace"
    assert e1.start_date.isoformat() == "2020-01-06"


def test_counts_add_up_to_total_rows(session):
    EmployeeFactory(employee_id="E9")
    text = make_csv(
        *ROWS,
        "E1,Dup,dup@example.com,X,Y,Z,,,,",
        "E5,Bad Mail,not-an-email,X,Y,Z,,,,",
    )
    report = run_import(text, "hr@example.com", actor_role="admin", session=session).report
    assert report.created + report.updated + report.rejected + report.unchanged == report.total_rows
    assert report.rejected == 3


def test_duplicate_keys_reject_every_occurrence(session):
    text = make_csv(
        "E100,Ann,ann@example.com,Eng,R&D,Berlin,,,,",
        "E100,Ann B,annb@example.com,Eng,R&D,Berlin,,,,",
    )
    report = run_import(text, "hr@example.com", actor_role="admin", session=session).report

    assert [r["rowNumber"] for r in report.rejected_rows] == [1, 2]
    for r in report.rejected_rows:
        assert any("duplicate employee_id" in e for e in r["errors"])
    assert "E100" not in employees(session)


def test_dangling_manager_is_written_with_warning(session):
    text = make_csv("E1,Ada,ada@example.com,Eng,R&D,London,,,E404,")
    report = run_import(text, "hr@example.com", actor_role="admin", session=session).report

    assert report.created == 1
    assert report.rejected == 0
    assert report.warnings[0]["employeeId"] == "E1"
    assert "E404" in report.warnings[0]["messages"][0]
    assert employees(session)["E1"].manager_employee_id == "E404"


def test_header_only_file_fails_the_job(session):
    result = run_import("employee_id,name,email,title,department,location\n",
                        "hr@example.com", actor_role="admin", session=session)

    d = result.to_dict()["report"]
    assert any("no data rows" in msg for msg in d["fatalErrors"])
    assert d["rejectedRows"] == []
    assert d["totalRows"] == 0
    job = session.get(ImportJob, result.job_id)
    assert job.status == "failed"
    assert job.finished_at is not None


def test_structural_error_writes_nothing(session):
    text = make_csv(ROWS[0], "E2,too,few")
    result = run_import(text, "hr@example.com", actor_role="admin", session=session)
    assert result.report.is_fatal
    assert employees(session) == {}


def test_write_failure_turns_row_into_rejection(session, monkeypatch):
    real_upsert = EmployeeStore.upsert

    def flaky_upsert(self, attrs):
        if attrs["employee_id"] == "E2":
            raise StoreError("storage error: disk I/O error")
        return real_upsert(self, attrs)

    monkeypatch.setattr(EmployeeStore, "upsert", flaky_upsert)
    result = run_import(make_csv(*ROWS), "hr@example.com", actor_role="admin", session=session)

    report = result.report
    assert (report.created, report.rejected) == (2, 1)
    assert report.rejected_rows[0]["errors"] == ["storage error: disk I/O error"]
    assert set(employees(session)) == {"E1", "E3"}
    assert session.get(ImportJob, result.job_id).status == "succeeded"


def test_database_refusing_a_row_rejects_only_that_row(session):
    block_inserts_of(session, "E2")
    text = make_csv(
        "E1,Ada,ada@example.com,Eng,R&D,London,,,,",
        "E2,Grace,grace@example.com,Eng,R&D,London,,,E1,",
        "E3,Alan,alan@example.com,Eng,R&D,London,,,E2,",
    )
    result = run_import(text, "hr@example.com", actor_role="admin", session=session)

    d = result.to_dict()["report"]
    assert d["rejectedRows"] == [{"rowNumber": 2, "employeeId": "E2", "errors": ["storage error: boom"]}]
    assert (d["createdCount"], d["rejectedCount"]) == (2, 1)
    assert set(employees(session)) == {"E1", "E3"}
    # E3 was still written but its manager never made it into the store
    assert d["warnings"] == [{
        "rowNumber": 3,
        "employeeId": "E3",
        "messages": ["manager_employee_id E2 does not match any existing or imported employee"],
    }]


def test_unavailable_store_fails_the_job(session, monkeypatch):
    def broken_snapshot(self):
        raise StoreError("Employee store unavailable: no such table: employees")

    monkeypatch.setattr(EmployeeStore, "snapshot", broken_snapshot)
    result = run_import(make_csv(*ROWS), "hr@example.com", actor_role="admin", session=session)

    assert result.report.fatal_errors == ["Employee store unavailable: no such table: employees"]
    assert session.get(ImportJob, result.job_id).status == "failed"


@pytest.mark.parametrize("role", ["viewer", "", "root"])
def test_roles_without_import_capability_are_refused(session, role):
    with pytest.raises(ImportNotPermitted):
        run_import(make_csv(*ROWS), "hr@example.com", actor_role=role, session=session)
    assert session.execute(select(ImportJob)).first() is None


def test_blank_uploader_falls_back_to_system_identity(session):
    result = run_import(make_csv(ROWS[0]), "  ", actor_role="admin", session=session)
    assert session.get(ImportJob, result.job_id).uploaded_by == "system@local.internal"


def test_job_that_cannot_start_is_still_finalised(session, monkeypatch):
    def broken_start(self, job):
        raise StoreError("Import job log unavailable: database is locked")

    monkeypatch.setattr(ImportJobLog, "start", broken_start)
    result = run_import(make_csv(*ROWS), "hr@example.com", actor_role="admin", session=session)

    assert result.job_id is not None
    assert result.report.fatal_errors == ["Import job log unavailable: database is locked"]
    session.expire_all()
    job = session.get(ImportJob, result.job_id)
    assert job.status == "failed"
    assert job.finished_at is not None
    assert employees(session) == {}
