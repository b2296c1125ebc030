"""
Derived progress and status snapshots for build jobs.

Progress is never stored while a build runs; it is estimated from the time
elapsed against the job's estimated duration and capped below 100 so only
a completed job ever reports 100.
"""

import math
from datetime import datetime
from typing import Optional

from src.models.build_job import BuildJob, BuildJobStatus, BuildStatusSnapshot

MAX_RUNNING_PROGRESS = 95


def progress(job: BuildJob, now: Optional[datetime] = None) -> int:
    """Progress percentage for a job at the given moment."""
    if job.status == BuildJobStatus.COMPLETED:
        return 100
    if job.status != BuildJobStatus.PROCESSING:
        return 0

    now = now or datetime.utcnow()
    started = job.started_at or job.created_at
    elapsed = max(0.0, (now - started).total_seconds())
    if job.estimated_time <= 0:
        return MAX_RUNNING_PROGRESS

    return max(0, min(MAX_RUNNING_PROGRESS, math.floor(elapsed / job.estimated_time * 100)))


def snapshot(job: BuildJob, now: Optional[datetime] = None) -> BuildStatusSnapshot:
    """Point-in-time view of a job; reading it has no side effects."""
    return BuildStatusSnapshot(
        id=job.id,
        status=job.status,
        progress=progress(job, now),
        estimated_time=job.estimated_time,
        created_at=job.created_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
        build_url=job.build_url,
        error=job.error,
        logs=list(job.logs),
    )
