from jobdesk.services.jobs.filters import filter_jobs
from jobdesk.services.jobs.lifecycle import (
    StatusTransitionError,
    TransitionPolicy,
    apply_edits,
    apply_status_change,
    new_job,
)
from jobdesk.services.jobs.notifications import (
    InvalidPhoneNumberError,
    Notification,
    NotificationEvent,
    build_link,
    compose_message,
    compose_notification,
    event_for_status,
    normalize_phone,
)
from jobdesk.services.jobs.numbering import (
    JobSheetNumberAllocator,
    MaxScanAllocator,
    next_job_sheet_number,
)
from jobdesk.services.jobs.options import form_options, staff_names
from jobdesk.services.jobs.sheet import render_job_sheet
from jobdesk.services.jobs.stats import summarize
from jobdesk.services.jobs.types import (
    COMMON_ISSUES,
    KNOWN_BRANDS,
    DeviceType,
    IssueList,
    Job,
    JobDraft,
    JobFilters,
    JobOptions,
    JobStats,
    JobStatus,
    JobValidationError,
    Staff,
    StaffRole,
)

__all__ = [
    "COMMON_ISSUES",
    "KNOWN_BRANDS",
    "DeviceType",
    "InvalidPhoneNumberError",
    "IssueList",
    "Job",
    "JobDraft",
    "JobFilters",
    "JobOptions",
    "JobSheetNumberAllocator",
    "JobStats",
    "JobStatus",
    "JobValidationError",
    "MaxScanAllocator",
    "Notification",
    "NotificationEvent",
    "Staff",
    "StaffRole",
    "StatusTransitionError",
    "TransitionPolicy",
    "apply_edits",
    "apply_status_change",
    "build_link",
    "compose_message",
    "compose_notification",
    "event_for_status",
    "filter_jobs",
    "form_options",
    "new_job",
    "next_job_sheet_number",
    "normalize_phone",
    "render_job_sheet",
    "staff_names",
    "summarize",
]
