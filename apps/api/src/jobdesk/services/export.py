from __future__ import annotations

from collections.abc import Iterable
import csv
from datetime import datetime
import io

from jobdesk.services.jobs.types import Job
from jobdesk.store.base import encode_issues

EXPORT_COLUMNS: tuple[str, ...] = (
    "id",
    "job_sheet_number",
    "customer_name",
    "contact_number",
    "device_type",
    "brand_name",
    "issues",
    "attended_by",
    "estimated_cost",
    "final_cost",
    "status",
    "created_at",
    "updated_at",
    "completed_at",
)


def _cell(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def job_to_row(job: Job) -> dict[str, object]:
    return {
        "id": job.id,
        "job_sheet_number": job.job_sheet_number,
        "customer_name": job.customer_name,
        "contact_number": job.contact_number,
        "device_type": job.device_type.value,
        "brand_name": job.brand_name,
        "issues": encode_issues(job.issues),
        "attended_by": job.attended_by,
        "estimated_cost": job.estimated_cost,
        "final_cost": _cell(job.final_cost),
        "status": job.status.value,
        "created_at": _cell(job.created_at),
        "updated_at": _cell(job.updated_at),
        "completed_at": _cell(job.completed_at),
    }


def export_jobs_csv(jobs: Iterable[Job]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=list(EXPORT_COLUMNS))
    writer.writeheader()
    for job in jobs:
        writer.writerow(job_to_row(job))
    return output.getvalue()
