from datetime import datetime, timedelta

import pytest

from services.import_job_log import ImportJobLog, JobAlreadyFinished


def test_job_lifecycle_pending_running_finished(session):
    log = ImportJobLog(session)

    job = log.create("hr@example.com", "roster.csv")
    assert job.status == "pending"
    assert job.id

    log.start(job)
    assert job.status == "running"
    assert job.started_at is not None

    log.finish(job, "succeeded", {"totalRows": 2, "createdCount": 1,
                                  "updatedCount": 0, "rejectedCount": 1})
    assert job.finished_at is not None
    assert (job.total_rows, job.created_count, job.failed_count) == (2, 1, 1)
    assert job.report["rejectedCount"] == 1


def test_finished_job_is_write_once(session):
    log = ImportJobLog(session)
    job = log.create("hr@example.com")
    log.start(job)
    log.finish(job, "failed", {"fatalErrors": ["CSV file is empty."]})

    with pytest.raises(JobAlreadyFinished):
        log.finish(job, "succeeded", {})
    with pytest.raises(JobAlreadyFinished):
        log.start(job)


def test_finish_requires_a_final_status(session):
    log = ImportJobLog(session)
    job = log.create("hr@example.com")
    with pytest.raises(ValueError):
        log.finish(job, "running", {})


def test_recent_lists_newest_first(session):
    log = ImportJobLog(session)
    jobs = [log.create(f"user{i}@example.com") for i in range(3)]
    for i, job in enumerate(jobs):
        job.uploaded_at = datetime(2026, 1, 1) + timedelta(minutes=i)
    session.commit()
    ids = [j.id for j in jobs]

    assert [j.id for j in log.recent(2)] == ids[:0:-1]
    assert [j.id for j in log.recent(10)] == ids[::-1]
