from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
import logging
from typing import Any

from jobdesk.config import Settings
from jobdesk.services.export import export_jobs_csv
from jobdesk.services.jobs import (
    InvalidPhoneNumberError,
    Job,
    JobDraft,
    JobFilters,
    JobOptions,
    JobSheetNumberAllocator,
    JobStats,
    JobStatus,
    MaxScanAllocator,
    Notification,
    NotificationEvent,
    TransitionPolicy,
    apply_edits,
    apply_status_change,
    compose_notification,
    event_for_status,
    filter_jobs,
    form_options,
    new_job,
    render_job_sheet,
    summarize,
)
from jobdesk.services.session import StaffSession
from jobdesk.store.base import JobNotFoundError, JobStore, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationOutcome:
    """What the caller should do about the customer message.

    Either ``notification`` holds a ready link, or ``error`` says why none
    could be built and the user has to be told.
    """

    event: NotificationEvent
    notification: Notification | None = None
    error: str | None = None


@dataclass(frozen=True)
class JobChange:
    job: Job
    notification: NotificationOutcome | None = None


@contextmanager
def _store_call(action: str) -> Iterator[None]:
    try:
        yield
    except StoreError as exc:
        logger.error("%s failed: %s", action, exc)
        raise


class JobService:
    """Job sheet workflows on top of a store.

    Every mutation goes straight to the store and returns the stored copy;
    nothing is cached here.
    """

    def __init__(
        self,
        store: JobStore,
        settings: Settings,
        *,
        allocator: JobSheetNumberAllocator | None = None,
        policy: TransitionPolicy | None = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._allocator = allocator or MaxScanAllocator(store, prefix=settings.job_sheet_prefix)
        self._policy = policy or TransitionPolicy(settings.status_transitions)

    def list_jobs(self, filters: JobFilters | None = None) -> list[Job]:
        with _store_call("list jobs"):
            jobs = self._store.list_jobs()
        return filter_jobs(jobs, filters)

    def get_job(self, job_id: str) -> Job:
        with _store_call(f"load job {job_id}"):
            job = self._store.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def stats(self, filters: JobFilters | None = None) -> JobStats:
        return summarize(self.list_jobs(filters))

    def export_csv(self, filters: JobFilters | None = None) -> str:
        return export_jobs_csv(self.list_jobs(filters))

    def form_options(self) -> JobOptions:
        return form_options(self.list_jobs())

    def job_sheet(self, job_id: str) -> str:
        return render_job_sheet(self.get_job(job_id), self._settings)

    def create_job(self, draft: JobDraft, *, session: StaffSession | None = None) -> JobChange:
        staff = session.current if session is not None else None
        attended_by = draft.attended_by or (staff.name if staff is not None else None)

        with _store_call("allocate job sheet number"):
            number = self._allocator.allocate()
        job = new_job(draft, job_sheet_number=number, attended_by=attended_by)

        with _store_call(f"insert job {number}"):
            stored = self._store.insert_job(job)
        logger.info(
            "created job %s for %s (attended by %s)",
            stored.job_sheet_number,
            stored.customer_name,
            stored.attended_by,
        )
        return JobChange(job=stored, notification=self._notify(stored, NotificationEvent.CREATED))

    def update_details(self, job_id: str, changes: Mapping[str, Any]) -> Job:
        current = self.get_job(job_id)
        edited = apply_edits(current, changes)
        fields = {name: getattr(edited, name) for name in changes}
        fields["updated_at"] = edited.updated_at

        with _store_call(f"update job {job_id}"):
            stored = self._store.update_job(job_id, fields)
        logger.info("updated job %s fields=%s", stored.job_sheet_number, sorted(changes))
        return stored

    def change_status(
        self,
        job_id: str,
        status: JobStatus,
        *,
        final_cost: float | None = None,
    ) -> JobChange:
        current = self.get_job(job_id)
        changed = apply_status_change(
            current,
            status,
            final_cost=final_cost,
            policy=self._policy,
        )
        fields = {
            "status": changed.status,
            "final_cost": changed.final_cost,
            "completed_at": changed.completed_at,
            "updated_at": changed.updated_at,
        }

        with _store_call(f"update status of job {job_id}"):
            stored = self._store.update_job(job_id, fields)
        logger.info(
            "job %s status %s -> %s",
            stored.job_sheet_number,
            current.status.value,
            stored.status.value,
        )

        event = event_for_status(stored.status) if stored.status is not current.status else None
        outcome = self._notify(stored, event) if event is not None else None
        return JobChange(job=stored, notification=outcome)

    def _notify(self, job: Job, event: NotificationEvent) -> NotificationOutcome:
        try:
            notification = compose_notification(job, event, self._settings)
        except InvalidPhoneNumberError as exc:
            logger.warning(
                "no %s notification for job %s: %s",
                event.value,
                job.job_sheet_number,
                exc,
            )
            return NotificationOutcome(event=event, error=str(exc))
        return NotificationOutcome(event=event, notification=notification)
