from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
import math
from typing import Any
import uuid

from jobdesk.services.jobs.types import (
    DeviceType,
    IssueList,
    Job,
    JobDraft,
    JobStatus,
    JobValidationError,
    utc_now,
)

EDITABLE_FIELDS = frozenset(
    {
        "customer_name",
        "contact_number",
        "device_type",
        "brand_name",
        "issues",
        "attended_by",
        "estimated_cost",
    }
)


class StatusTransitionError(ValueError):
    def __init__(self, current: JobStatus, target: JobStatus) -> None:
        super().__init__(f"status change {current.value} -> {target.value} is not allowed")
        self.current = current
        self.target = target


class TransitionPolicy:
    """Which status changes staff may make.

    ``unrestricted`` lets any status be set at any time so mistakes can be
    corrected by hand. ``forward`` only allows staying put or moving to a
    later status.
    """

    MODES = ("unrestricted", "forward")

    def __init__(self, mode: str = "unrestricted") -> None:
        if mode not in self.MODES:
            raise ValueError(f"unknown transition policy: {mode}")
        self.mode = mode

    def allows(self, current: JobStatus, target: JobStatus) -> bool:
        if self.mode == "unrestricted":
            return True
        return target.rank >= current.rank


def _required_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise JobValidationError(f"{name} is required")
    return value.strip()


def _cost(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise JobValidationError(f"{name} must be a number")
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise JobValidationError(f"{name} must be a number") from exc
    if math.isnan(amount) or math.isinf(amount):
        raise JobValidationError(f"{name} must be a number")
    if amount < 0:
        raise JobValidationError(f"{name} must not be negative")
    return amount


def _device_type(value: Any) -> DeviceType:
    try:
        return DeviceType(value)
    except ValueError as exc:
        raise JobValidationError(f"unknown device type: {value}") from exc


def _issues(value: Any) -> IssueList:
    if isinstance(value, IssueList):
        issues = value.copy()
    elif isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        issues = IssueList(value)
    else:
        raise JobValidationError("issues must be a list of strings")
    if not issues:
        raise JobValidationError("at least one issue is required")
    return issues


def new_job(
    draft: JobDraft,
    *,
    job_sheet_number: str,
    attended_by: str | None = None,
    now: datetime | None = None,
) -> Job:
    now = now or utc_now()
    return Job(
        id=uuid.uuid4().hex,
        job_sheet_number=job_sheet_number,
        customer_name=_required_text(draft.customer_name, "customer_name"),
        contact_number=_required_text(draft.contact_number, "contact_number"),
        device_type=_device_type(draft.device_type),
        brand_name=_required_text(draft.brand_name, "brand_name"),
        issues=_issues(draft.issues),
        attended_by=_required_text(attended_by or draft.attended_by, "attended_by"),
        estimated_cost=_cost(draft.estimated_cost, "estimated_cost"),
        status=JobStatus.PENDING,
        created_at=now,
        updated_at=now,
    )


def apply_edits(job: Job, changes: Mapping[str, Any], *, now: datetime | None = None) -> Job:
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise JobValidationError(f"fields cannot be edited: {', '.join(sorted(unknown))}")

    updates: dict[str, Any] = {}
    for name, value in changes.items():
        if name == "device_type":
            updates[name] = _device_type(value)
        elif name == "issues":
            updates[name] = _issues(value)
        elif name == "estimated_cost":
            updates[name] = _cost(value, name)
        else:
            updates[name] = _required_text(value, name)
    return replace(job, **updates, updated_at=now or utc_now())


def apply_status_change(
    job: Job,
    status: JobStatus,
    *,
    final_cost: float | None = None,
    policy: TransitionPolicy | None = None,
    now: datetime | None = None,
) -> Job:
    policy = policy or TransitionPolicy()
    if not policy.allows(job.status, status):
        raise StatusTransitionError(job.status, status)

    now = now or utc_now()
    if not status.is_completed_or_later:
        if final_cost is not None:
            raise JobValidationError("final_cost can only be set once the job is completed")
        return replace(job, status=status, final_cost=None, completed_at=None, updated_at=now)

    new_final_cost = job.final_cost if final_cost is None else _cost(final_cost, "final_cost")
    completed_at = job.completed_at
    if status is JobStatus.COMPLETED and job.status is not JobStatus.COMPLETED:
        completed_at = now
    return replace(
        job,
        status=status,
        final_cost=new_final_cost,
        completed_at=completed_at,
        updated_at=now,
    )
