from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobdesk.models import JobRecord, StaffRecord
from jobdesk.services.jobs.types import (
    DeviceType,
    Job,
    JobStatus,
    Staff,
    StaffRole,
    as_utc,
)
from jobdesk.store.base import JobNotFoundError, StoreError, decode_issues, encode_issues

logger = logging.getLogger(__name__)


def _job_from_record(record: JobRecord) -> Job:
    return Job(
        id=record.id,
        job_sheet_number=record.job_sheet_number,
        customer_name=record.customer_name,
        contact_number=record.contact_number,
        device_type=DeviceType(record.device_type),
        brand_name=record.brand_name,
        issues=decode_issues(record.issues),
        attended_by=record.attended_by,
        estimated_cost=float(record.estimated_cost),
        final_cost=float(record.final_cost) if record.final_cost is not None else None,
        status=JobStatus(record.status),
        created_at=as_utc(record.created_at),
        updated_at=as_utc(record.updated_at),
        completed_at=as_utc(record.completed_at) if record.completed_at is not None else None,
    )


def _column_value(name: str, value: Any) -> Any:
    if name == "issues":
        return encode_issues(value)
    if name in {"device_type", "status"}:
        return value.value
    return value


def _record_from_job(job: Job) -> JobRecord:
    return JobRecord(
        id=job.id,
        job_sheet_number=job.job_sheet_number,
        customer_name=job.customer_name,
        contact_number=job.contact_number,
        device_type=job.device_type.value,
        brand_name=job.brand_name,
        issues=encode_issues(job.issues),
        attended_by=job.attended_by,
        estimated_cost=job.estimated_cost,
        final_cost=job.final_cost,
        status=job.status.value,
        created_at=job.created_at,
        updated_at=job.updated_at,
        completed_at=job.completed_at,
    )


class SqlJobStore:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_jobs(self) -> list[Job]:
        try:
            with Session(self._engine) as session:
                records = session.scalars(
                    select(JobRecord).order_by(JobRecord.created_at.asc(), JobRecord.id.asc())
                ).all()
                jobs: list[Job] = []
                for record in records:
                    try:
                        jobs.append(_job_from_record(record))
                    except ValueError as exc:
                        logger.warning("skipping unreadable job row id=%s: %s", record.id, exc)
                return jobs
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to list jobs: {exc}") from exc

    def get_job(self, job_id: str) -> Job | None:
        try:
            with Session(self._engine) as session:
                record = session.get(JobRecord, job_id)
                return _job_from_record(record) if record is not None else None
        except (SQLAlchemyError, ValueError) as exc:
            raise StoreError(f"failed to load job {job_id}: {exc}") from exc

    def insert_job(self, job: Job) -> Job:
        try:
            with Session(self._engine) as session:
                record = _record_from_job(job)
                session.add(record)
                session.commit()
                session.refresh(record)
                return _job_from_record(record)
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to insert job {job.job_sheet_number}: {exc}") from exc

    def update_job(self, job_id: str, changes: Mapping[str, Any]) -> Job:
        try:
            with Session(self._engine) as session:
                record = session.get(JobRecord, job_id)
                if record is None:
                    raise JobNotFoundError(job_id)
                for name, value in changes.items():
                    setattr(record, name, _column_value(name, value))
                session.commit()
                session.refresh(record)
                return _job_from_record(record)
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to update job {job_id}: {exc}") from exc

    def list_job_sheet_numbers(self) -> list[str]:
        try:
            with Session(self._engine) as session:
                return [str(value) for value in session.scalars(select(JobRecord.job_sheet_number))]
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to read job sheet numbers: {exc}") from exc

    def find_staff(self, username: str, password: str) -> Staff | None:
        try:
            with Session(self._engine) as session:
                record = session.scalar(
                    select(StaffRecord)
                    .where(StaffRecord.username == username)
                    .where(StaffRecord.password == password)
                    .limit(1)
                )
                if record is None:
                    return None
                return Staff(
                    id=record.id,
                    name=record.name,
                    username=record.username,
                    role=StaffRole(record.role),
                )
        except (SQLAlchemyError, ValueError) as exc:
            raise StoreError(f"failed to look up staff: {exc}") from exc
