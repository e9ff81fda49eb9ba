from __future__ import annotations

from collections.abc import Iterable

from jobdesk.services.jobs.types import (
    COMMON_ISSUES,
    KNOWN_BRANDS,
    DeviceType,
    Job,
    JobOptions,
)


def staff_names(jobs: Iterable[Job]) -> list[str]:
    """Distinct ``attended_by`` values, sorted, for the staff filter."""
    return sorted({job.attended_by.strip() for job in jobs if job.attended_by.strip()})


def form_options(jobs: Iterable[Job]) -> JobOptions:
    return JobOptions(
        brands=KNOWN_BRANDS,
        common_issues=COMMON_ISSUES,
        device_types=tuple(DeviceType),
        staff_names=tuple(staff_names(jobs)),
    )
