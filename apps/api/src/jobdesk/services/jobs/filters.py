from __future__ import annotations

from collections.abc import Iterable
import re

from jobdesk.services.jobs.types import Job, JobFilters, as_utc

_NON_DIGITS = re.compile(r"\D+")


def _digits(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def matches_search(job: Job, term: str) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    if (
        needle in job.customer_name.lower()
        or needle in job.job_sheet_number.lower()
        or needle in job.brand_name.lower()
    ):
        return True
    digits = _digits(needle)
    return bool(digits) and digits in _digits(job.contact_number)


def matches(job: Job, filters: JobFilters) -> bool:
    if filters.status is not None and job.status != filters.status:
        return False
    if filters.attended_by and job.attended_by != filters.attended_by:
        return False
    if filters.search and not matches_search(job, filters.search):
        return False

    created_at = as_utc(job.created_at)
    if filters.created_from is not None and created_at < as_utc(filters.created_from):
        return False
    if filters.created_to is not None and created_at > as_utc(filters.created_to):
        return False
    return True


def filter_jobs(jobs: Iterable[Job], filters: JobFilters | None = None) -> list[Job]:
    if filters is None:
        return list(jobs)
    return [job for job in jobs if matches(job, filters)]
