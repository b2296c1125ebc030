from datetime import datetime, timedelta

from src.core import status_reporter
from src.models.build_job import BuildConfig, BuildJob, BuildJobStatus

NOW = datetime(2024, 6, 1, 12, 0, 0)


def make_job(**overrides) -> BuildJob:
    fields = dict(
        project_id="p",
        config=BuildConfig(project_id="p"),
        build_directory="/tmp/builds/job",
        public_url="http://localhost/builds/job",
        estimated_time=100,
        created_at=NOW - timedelta(seconds=30),
    )
    fields.update(overrides)
    return BuildJob(**fields)


def test_queued_and_failed_report_zero() -> None:
    assert status_reporter.progress(make_job(), NOW) == 0
    assert status_reporter.progress(make_job(status=BuildJobStatus.FAILED), NOW) == 0


def test_completed_reports_hundred() -> None:
    assert status_reporter.progress(make_job(status=BuildJobStatus.COMPLETED, progress=100), NOW) == 100


def test_processing_is_proportional_to_elapsed_time() -> None:
    job = make_job(status=BuildJobStatus.PROCESSING, started_at=NOW - timedelta(seconds=42))
    assert status_reporter.progress(job, NOW) == 42


def test_processing_is_capped_below_hundred() -> None:
    job = make_job(status=BuildJobStatus.PROCESSING, started_at=NOW - timedelta(hours=2))
    assert status_reporter.progress(job, NOW) == status_reporter.MAX_RUNNING_PROGRESS


def test_processing_without_start_uses_created_at() -> None:
    job = make_job(status=BuildJobStatus.PROCESSING)
    assert status_reporter.progress(job, NOW) == 30


def test_clock_skew_clamps_to_zero() -> None:
    job = make_job(status=BuildJobStatus.PROCESSING, started_at=NOW + timedelta(seconds=10))
    assert status_reporter.progress(job, NOW) == 0


def test_progress_never_decreases_over_time() -> None:
    job = make_job(status=BuildJobStatus.PROCESSING, started_at=NOW)
    readings = [status_reporter.progress(job, NOW + timedelta(seconds=s)) for s in range(0, 200, 7)]
    assert readings == sorted(readings)
    assert all(0 <= r <= 95 for r in readings)


def test_snapshot_copies_job_fields() -> None:
    job = make_job(status=BuildJobStatus.FAILED, error="boom", logs=["Build job created", "Build failed: boom"])

    snapshot = status_reporter.snapshot(job, NOW).to_dict()

    assert snapshot["id"] == job.id
    assert snapshot["status"] == "failed"
    assert snapshot["progress"] == 0
    assert snapshot["estimatedTime"] == 100
    assert snapshot["error"] == "boom"
    assert snapshot["logs"] == ["Build job created", "Build failed: boom"]
