"""Printable job sheet handed to the customer at intake."""
from __future__ import annotations

from jobdesk.config import Settings
from jobdesk.services.jobs.notifications import format_amount
from jobdesk.services.jobs.types import Job

SHEET_WIDTH = 48
_LABEL_WIDTH = 16


def _field(label: str, value: str) -> str:
    return f"{label + ':':<{_LABEL_WIDTH}}{value}"


def _centered(text: str) -> str:
    return text.center(SHEET_WIDTH).rstrip()


def render_job_sheet(job: Job, settings: Settings) -> str:
    currency = settings.currency_symbol
    lines = [
        "=" * SHEET_WIDTH,
        _centered(settings.shop_name),
    ]
    if settings.shop_tagline:
        lines.append(_centered(settings.shop_tagline))
    lines.extend(
        [
            "-" * SHEET_WIDTH,
            _centered("JOB SHEET"),
            "",
            _field("Job Sheet No", job.job_sheet_number),
            _field("Received", job.created_at.strftime("%Y-%m-%d")),
            _field("Customer Name", job.customer_name),
            _field("Contact", job.contact_number),
            _field("Device", f"{job.device_type.value} ({job.brand_name})"),
            _field("Issues", ", ".join(job.issues)),
            _field("Attended By", job.attended_by),
            _field("Estimated Cost", f"{currency}{format_amount(job.estimated_cost)}"),
        ]
    )
    if job.final_cost is not None:
        lines.append(_field("Final Cost", f"{currency}{format_amount(job.final_cost)}"))
    lines.extend(
        [
            _field("Status", job.status.value),
            "-" * SHEET_WIDTH,
            _centered(f"Thank you for choosing {settings.shop_name}!"),
            "=" * SHEET_WIDTH,
        ]
    )
    return "\n".join(lines) + "\n"
