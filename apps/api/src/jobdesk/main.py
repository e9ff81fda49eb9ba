from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException, Query, Response
from pydantic import BaseModel, ConfigDict, Field

from jobdesk.config import configure_logging, get_settings
from jobdesk.db import get_engine
from jobdesk.services.job_service import JobChange, JobService, NotificationOutcome
from jobdesk.services.jobs import (
    DeviceType,
    Job,
    JobDraft,
    JobFilters,
    JobStatus,
    JobValidationError,
    StatusTransitionError,
)
from jobdesk.services.session import authenticate
from jobdesk.store import JobNotFoundError, StoreError, build_store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.log_level)
    if settings.store_backend == "sql":
        get_engine()
    yield


app = FastAPI(title="Repair Job Sheets API", version="0.1.0", lifespan=lifespan)


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class JobCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    customer_name: str = Field(min_length=1)
    contact_number: str = Field(min_length=1)
    device_type: DeviceType
    brand_name: str = Field(min_length=1)
    issues: list[str] = Field(min_length=1, max_length=5)
    estimated_cost: float = Field(ge=0)
    attended_by: str = Field(min_length=1)


class JobUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    customer_name: str | None = None
    contact_number: str | None = None
    device_type: DeviceType | None = None
    brand_name: str | None = None
    issues: list[str] | None = Field(default=None, min_length=1, max_length=5)
    estimated_cost: float | None = Field(default=None, ge=0)
    attended_by: str | None = None


class StatusChangeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: JobStatus
    final_cost: float | None = Field(default=None, ge=0)


def get_job_service() -> JobService:
    settings = get_settings()
    return JobService(build_store(settings), settings)


JobServiceDep = Annotated[JobService, Depends(get_job_service)]


def _to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def _job_detail(job: Job) -> dict[str, Any]:
    return {
        "id": job.id,
        "job_sheet_number": job.job_sheet_number,
        "customer_name": job.customer_name,
        "contact_number": job.contact_number,
        "device_type": job.device_type.value,
        "brand_name": job.brand_name,
        "issues": job.issues.as_list(),
        "attended_by": job.attended_by,
        "estimated_cost": job.estimated_cost,
        "final_cost": job.final_cost,
        "status": job.status.value,
        "created_at": _to_iso(job.created_at),
        "updated_at": _to_iso(job.updated_at),
        "completed_at": _to_iso(job.completed_at),
    }


def _notification_detail(outcome: NotificationOutcome | None) -> dict[str, Any] | None:
    if outcome is None:
        return None
    if outcome.notification is None:
        return {"event": outcome.event.value, "error": outcome.error}
    return {
        "event": outcome.event.value,
        "message": outcome.notification.message,
        "url": outcome.notification.url,
    }


def _change_detail(change: JobChange) -> dict[str, Any]:
    return {
        "job": _job_detail(change.job),
        "notification": _notification_detail(change.notification),
    }


def _store_unavailable(exc: StoreError) -> HTTPException:
    return HTTPException(status_code=503, detail=f"job store unavailable: {exc}")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/auth/login")
def login(request: LoginRequest) -> dict[str, str]:
    settings = get_settings()
    try:
        staff = authenticate(build_store(settings), request.username, request.password)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc

    if staff is None:
        raise HTTPException(status_code=401, detail="invalid credentials")
    return {
        "id": staff.id,
        "name": staff.name,
        "username": staff.username,
        "role": staff.role.value,
    }


@app.get("/jobs")
def list_jobs(
    service: JobServiceDep,
    status: JobStatus | None = Query(default=None),
    attended_by: str | None = Query(default=None),
    search: str | None = Query(default=None),
    created_from: datetime | None = Query(default=None),
    created_to: datetime | None = Query(default=None),
) -> list[dict[str, Any]]:
    filters = JobFilters(
        status=status,
        attended_by=attended_by,
        search=search,
        created_from=created_from,
        created_to=created_to,
    )
    try:
        jobs = service.list_jobs(filters)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return [_job_detail(job) for job in jobs]


@app.post("/jobs", status_code=201)
def create_job(request: JobCreateRequest, service: JobServiceDep) -> dict[str, Any]:
    draft = JobDraft(
        customer_name=request.customer_name,
        contact_number=request.contact_number,
        device_type=request.device_type,
        brand_name=request.brand_name,
        issues=request.issues,
        estimated_cost=request.estimated_cost,
        attended_by=request.attended_by,
    )
    try:
        change = service.create_job(draft)
    except JobValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return _change_detail(change)


@app.get("/jobs/stats")
def job_stats(service: JobServiceDep) -> dict[str, Any]:
    try:
        stats = service.stats()
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return {
        "total": stats.total,
        "by_status": {status.value: stats.count(status) for status in JobStatus},
    }


@app.get("/jobs/export.csv")
def export_jobs(service: JobServiceDep) -> Response:
    try:
        content = service.export_csv()
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=repair-jobs.csv"},
    )


@app.get("/jobs/options")
def job_options(service: JobServiceDep) -> dict[str, list[str]]:
    try:
        options = service.form_options()
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return {
        "brands": list(options.brands),
        "common_issues": list(options.common_issues),
        "device_types": [device.value for device in options.device_types],
        "staff_names": list(options.staff_names),
    }


@app.get("/jobs/{job_id}")
def get_job(job_id: str, service: JobServiceDep) -> dict[str, Any]:
    try:
        job = service.get_job(job_id)
    except JobNotFoundError as exc:
        raise HTTPException(status_code=404, detail="job not found") from exc
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return _job_detail(job)


@app.get("/jobs/{job_id}/sheet")
def job_sheet(job_id: str, service: JobServiceDep) -> Response:
    try:
        content = service.job_sheet(job_id)
    except JobNotFoundError as exc:
        raise HTTPException(status_code=404, detail="job not found") from exc
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return Response(content=content, media_type="text/plain; charset=utf-8")


@app.patch("/jobs/{job_id}")
def update_job(job_id: str, request: JobUpdateRequest, service: JobServiceDep) -> dict[str, Any]:
    changes = request.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=422, detail="no fields to update")
    try:
        job = service.update_details(job_id, changes)
    except JobNotFoundError as exc:
        raise HTTPException(status_code=404, detail="job not found") from exc
    except JobValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return _job_detail(job)


@app.post("/jobs/{job_id}/status")
def change_status(
    job_id: str,
    request: StatusChangeRequest,
    service: JobServiceDep,
) -> dict[str, Any]:
    try:
        change = service.change_status(job_id, request.status, final_cost=request.final_cost)
    except JobNotFoundError as exc:
        raise HTTPException(status_code=404, detail="job not found") from exc
    except StatusTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except JobValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return _change_detail(change)


def run() -> None:
    import uvicorn

    uvicorn.run("jobdesk.main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    run()
