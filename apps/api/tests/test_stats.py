from collections.abc import Callable

from jobdesk.services.jobs import Job, JobStatus, summarize


def test_summarize_empty_collection() -> None:
    stats = summarize([])

    assert stats.total == 0
    assert all(stats.count(status) == 0 for status in JobStatus)


def test_summarize_counts_each_status(make_job: Callable[..., Job]) -> None:
    jobs = [
        make_job(id="1", status=JobStatus.PENDING),
        make_job(id="2", status=JobStatus.PENDING),
        make_job(id="3", status=JobStatus.IN_PROGRESS),
        make_job(id="4", status=JobStatus.DELIVERED),
    ]

    stats = summarize(jobs)

    assert stats.total == 4
    assert stats.count(JobStatus.PENDING) == 2
    assert stats.count(JobStatus.IN_PROGRESS) == 1
    assert stats.count(JobStatus.COMPLETED) == 0
    assert stats.count(JobStatus.DELIVERED) == 1
    assert sum(stats.by_status.values()) == stats.total


def test_summarize_is_idempotent(make_job: Callable[..., Job]) -> None:
    jobs = [make_job(id=str(n), status=status) for n, status in enumerate(JobStatus)]

    assert summarize(jobs) == summarize(jobs)
