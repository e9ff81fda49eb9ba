from __future__ import annotations

from collections.abc import Iterable

from jobdesk.services.jobs.types import Job, JobStats, JobStatus


def summarize(jobs: Iterable[Job]) -> JobStats:
    by_status = {status: 0 for status in JobStatus}
    total = 0
    for job in jobs:
        by_status[job.status] += 1
        total += 1
    return JobStats(total=total, by_status=by_status)
