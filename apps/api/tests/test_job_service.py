from collections.abc import Mapping
from dataclasses import replace
import logging
from pathlib import Path
from typing import Any

import pytest

from jobdesk.config import get_settings
from jobdesk.services.job_service import JobService
from jobdesk.services.jobs import (
    DeviceType,
    Job,
    JobDraft,
    JobFilters,
    JobStatus,
    NotificationEvent,
    Staff,
    StatusTransitionError,
    TransitionPolicy,
)
from jobdesk.services.session import StaffSession
from jobdesk.store import JobNotFoundError, StoreError


class InMemoryStore:
    def __init__(self) -> None:
        self.jobs: dict[str, Job] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise StoreError("network down")

    def list_jobs(self) -> list[Job]:
        self._check()
        return list(self.jobs.values())

    def get_job(self, job_id: str) -> Job | None:
        self._check()
        return self.jobs.get(job_id)

    def insert_job(self, job: Job) -> Job:
        self._check()
        self.jobs[job.id] = job
        return job

    def update_job(self, job_id: str, changes: Mapping[str, Any]) -> Job:
        self._check()
        if job_id not in self.jobs:
            raise JobNotFoundError(job_id)
        self.jobs[job_id] = replace(self.jobs[job_id], **changes)
        return self.jobs[job_id]

    def list_job_sheet_numbers(self) -> list[str]:
        self._check()
        return [job.job_sheet_number for job in self.jobs.values()]

    def find_staff(self, username: str, password: str) -> Staff | None:
        return None


class FixedAllocator:
    def __init__(self, number: str) -> None:
        self.number = number

    def allocate(self) -> str:
        return self.number


def _draft(**overrides: Any) -> JobDraft:
    values: dict[str, Any] = {
        "customer_name": "Asha",
        "contact_number": "9876543210",
        "device_type": DeviceType.LAPTOP,
        "brand_name": "Dell",
        "issues": ["No display"],
        "estimated_cost": 1500,
        "attended_by": None,
    }
    values.update(overrides)
    return JobDraft(**values)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def service(store: InMemoryStore) -> JobService:
    return JobService(store, get_settings())


@pytest.fixture
def session(tmp_path: Path) -> StaffSession:
    session = StaffSession(tmp_path / "session.json")
    session.start(Staff(id="s1", name="Ravi Kumar", username="ravi"))
    return session


def test_create_job_numbers_sequentially(service: JobService, session: StaffSession) -> None:
    first = service.create_job(_draft(), session=session)
    second = service.create_job(_draft(customer_name="Bilal"), session=session)

    assert first.job.job_sheet_number == "FTT-00001"
    assert second.job.job_sheet_number == "FTT-00002"
    assert first.job.attended_by == "Ravi Kumar"
    assert first.job.status is JobStatus.PENDING


def test_create_job_returns_created_notification(service: JobService, session: StaffSession) -> None:
    change = service.create_job(_draft(), session=session)

    outcome = change.notification
    assert outcome is not None
    assert outcome.event is NotificationEvent.CREATED
    assert outcome.error is None
    assert outcome.notification.url.startswith("https://wa.me/919876543210?text=")
    assert "FTT-00001" in outcome.notification.message


def test_invalid_phone_still_saves_and_reports(
    service: JobService,
    store: InMemoryStore,
    session: StaffSession,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING, logger="jobdesk.services.job_service"):
        change = service.create_job(_draft(contact_number="12345"), session=session)

    assert change.job.id in store.jobs
    assert change.notification.notification is None
    assert "invalid phone number" in change.notification.error
    assert "no created notification" in caplog.text


def test_custom_allocator_is_used(store: InMemoryStore, session: StaffSession) -> None:
    service = JobService(store, get_settings(), allocator=FixedAllocator("CNT-00042"))

    change = service.create_job(_draft(), session=session)

    assert change.job.job_sheet_number == "CNT-00042"


def test_completing_a_job_notifies_with_final_cost(service: JobService, session: StaffSession) -> None:
    job = service.create_job(_draft(), session=session).job

    change = service.change_status(job.id, JobStatus.COMPLETED, final_cost=1800)

    assert change.job.status is JobStatus.COMPLETED
    assert change.job.final_cost == 1800.0
    assert change.job.completed_at is not None
    assert change.notification.event is NotificationEvent.COMPLETED
    assert "1800" in change.notification.notification.message


def test_status_without_event_has_no_notification(service: JobService, session: StaffSession) -> None:
    job = service.create_job(_draft(), session=session).job

    change = service.change_status(job.id, JobStatus.IN_PROGRESS)

    assert change.notification is None


def test_unchanged_status_does_not_notify_again(service: JobService, session: StaffSession) -> None:
    job = service.create_job(_draft(), session=session).job
    service.change_status(job.id, JobStatus.COMPLETED, final_cost=100)

    change = service.change_status(job.id, JobStatus.COMPLETED, final_cost=120)

    assert change.job.final_cost == 120.0
    assert change.notification is None


def test_forward_policy_is_enforced(store: InMemoryStore, session: StaffSession) -> None:
    service = JobService(store, get_settings(), policy=TransitionPolicy("forward"))
    job = service.create_job(_draft(), session=session).job
    service.change_status(job.id, JobStatus.DELIVERED)

    with pytest.raises(StatusTransitionError):
        service.change_status(job.id, JobStatus.PENDING)


def test_update_details(service: JobService, session: StaffSession) -> None:
    job = service.create_job(_draft(), session=session).job

    updated = service.update_details(job.id, {"brand_name": "HP", "issues": ["Hinge", "Battery"]})

    assert updated.brand_name == "HP"
    assert updated.issues.as_list() == ["Hinge", "Battery"]
    assert updated.updated_at >= job.updated_at


def test_unknown_job(service: JobService) -> None:
    with pytest.raises(JobNotFoundError):
        service.change_status("missing", JobStatus.DELIVERED)


def test_list_stats_and_export_share_filters(
    service: JobService,
    session: StaffSession,
) -> None:
    service.create_job(_draft(customer_name="Asha"), session=session)
    other = service.create_job(_draft(customer_name="Bilal"), session=session).job
    service.change_status(other.id, JobStatus.IN_PROGRESS)
    filters = JobFilters(status=JobStatus.IN_PROGRESS)

    assert [job.customer_name for job in service.list_jobs(filters)] == ["Bilal"]
    assert service.stats().total == 2
    assert service.stats(filters).count(JobStatus.IN_PROGRESS) == 1
    assert "Bilal" in service.export_csv(filters)
    assert "Asha" not in service.export_csv(filters)


def test_store_failures_are_logged_and_raised(
    service: JobService,
    store: InMemoryStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    store.fail = True

    with caplog.at_level(logging.ERROR, logger="jobdesk.services.job_service"):
        with pytest.raises(StoreError):
            service.list_jobs()

    assert "list jobs failed: network down" in caplog.text


def test_form_options_and_job_sheet(service: JobService, session: StaffSession) -> None:
    job = service.create_job(_draft(attended_by="Meena"), session=session).job
    service.create_job(_draft(customer_name="Bilal"), session=session)

    assert service.form_options().staff_names == ("Meena", "Ravi Kumar")
    assert f"Job Sheet No:   {job.job_sheet_number}" in service.job_sheet(job.id)
    with pytest.raises(JobNotFoundError):
        service.job_sheet("missing")
