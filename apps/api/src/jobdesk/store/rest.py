from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
import logging
from typing import Any

import httpx

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

# Column names of the hosted table, which predates this package.
_COLUMNS: dict[str, str] = {
    "id": "id",
    "job_sheet_number": "jobSheetNumber",
    "customer_name": "customerName",
    "contact_number": "contactNumber",
    "device_type": "deviceType",
    "brand_name": "brandName",
    "issues": "issues",
    "attended_by": "attendedBy",
    "estimated_cost": "estimatedCost",
    "final_cost": "finalCost",
    "status": "status",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
    "completed_at": "completedAt",
}


def _parse_timestamp(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    if not isinstance(value, str):
        raise ValueError(f"invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    return as_utc(datetime.fromisoformat(text))


def _required_timestamp(value: Any) -> datetime:
    parsed = _parse_timestamp(value)
    if parsed is None:
        raise ValueError("missing timestamp")
    return parsed


def _to_wire(name: str, value: Any) -> Any:
    if name == "issues":
        return encode_issues(value)
    if isinstance(value, (DeviceType, JobStatus)):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _row_from_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    return {_COLUMNS[name]: _to_wire(name, value) for name, value in changes.items()}


def _row_from_job(job: Job) -> dict[str, Any]:
    return _row_from_changes({name: getattr(job, name) for name in _COLUMNS})


def _job_from_row(row: Mapping[str, Any]) -> Job:
    final_cost = row.get("finalCost")
    return Job(
        id=str(row["id"]),
        job_sheet_number=str(row["jobSheetNumber"]),
        customer_name=str(row["customerName"]),
        contact_number=str(row["contactNumber"]),
        device_type=DeviceType(row["deviceType"]),
        brand_name=str(row["brandName"]),
        issues=decode_issues(row.get("issues")),
        attended_by=str(row.get("attendedBy") or ""),
        estimated_cost=float(row.get("estimatedCost") or 0),
        final_cost=float(final_cost) if final_cost is not None else None,
        status=JobStatus(row["status"]),
        created_at=_required_timestamp(row.get("createdAt")),
        updated_at=_required_timestamp(row.get("updatedAt")),
        completed_at=_parse_timestamp(row.get("completedAt")),
    )


class RestJobStore:
    """Job store backed by a hosted PostgREST endpoint (``/rest/v1``)."""

    def __init__(self, *, base_url: str, api_key: str, timeout_seconds: float = 5.0) -> None:
        if not base_url:
            raise ValueError("REST store needs a base URL")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds

    def _headers(self, *, representation: bool = False) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }
        if representation:
            headers["Prefer"] = "return=representation"
        return headers

    def _url(self, table: str) -> str:
        return f"{self._base_url}/rest/v1/{table}"

    def _rows(self, response: httpx.Response) -> list[dict[str, Any]]:
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, list) or not all(isinstance(row, dict) for row in payload):
            raise ValueError("expected a JSON array of rows")
        return payload

    def list_jobs(self) -> list[Job]:
        try:
            rows = self._rows(
                httpx.get(
                    self._url("jobs"),
                    params={"select": "*", "order": "createdAt.asc"},
                    headers=self._headers(),
                    timeout=self._timeout_seconds,
                )
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise StoreError(f"failed to list jobs: {exc}") from exc

        jobs: list[Job] = []
        for row in rows:
            try:
                jobs.append(_job_from_row(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("skipping unreadable job row id=%s: %s", row.get("id"), exc)
        return jobs

    def get_job(self, job_id: str) -> Job | None:
        try:
            rows = self._rows(
                httpx.get(
                    self._url("jobs"),
                    params={"select": "*", "id": f"eq.{job_id}", "limit": "1"},
                    headers=self._headers(),
                    timeout=self._timeout_seconds,
                )
            )
            return _job_from_row(rows[0]) if rows else None
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"failed to load job {job_id}: {exc}") from exc

    def insert_job(self, job: Job) -> Job:
        try:
            rows = self._rows(
                httpx.post(
                    self._url("jobs"),
                    json=[_row_from_job(job)],
                    headers=self._headers(representation=True),
                    timeout=self._timeout_seconds,
                )
            )
            if not rows:
                raise ValueError("insert returned no rows")
            return _job_from_row(rows[0])
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"failed to insert job {job.job_sheet_number}: {exc}") from exc

    def update_job(self, job_id: str, changes: Mapping[str, Any]) -> Job:
        try:
            rows = self._rows(
                httpx.patch(
                    self._url("jobs"),
                    params={"id": f"eq.{job_id}"},
                    json=_row_from_changes(changes),
                    headers=self._headers(representation=True),
                    timeout=self._timeout_seconds,
                )
            )
            if not rows:
                raise JobNotFoundError(job_id)
            return _job_from_row(rows[0])
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"failed to update job {job_id}: {exc}") from exc

    def list_job_sheet_numbers(self) -> list[str]:
        try:
            rows = self._rows(
                httpx.get(
                    self._url("jobs"),
                    params={"select": "jobSheetNumber"},
                    headers=self._headers(),
                    timeout=self._timeout_seconds,
                )
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise StoreError(f"failed to read job sheet numbers: {exc}") from exc
        return [str(row["jobSheetNumber"]) for row in rows if row.get("jobSheetNumber")]

    def find_staff(self, username: str, password: str) -> Staff | None:
        try:
            rows = self._rows(
                httpx.get(
                    self._url("staff"),
                    params={
                        "select": "id,name,username,role",
                        "username": f"eq.{username}",
                        "password": f"eq.{password}",
                        "limit": "1",
                    },
                    headers=self._headers(),
                    timeout=self._timeout_seconds,
                )
            )
            if not rows:
                return None
            row = rows[0]
            return Staff(
                id=str(row["id"]),
                name=str(row["name"]),
                username=str(row["username"]),
                role=StaffRole(row.get("role") or StaffRole.TECHNICIAN.value),
            )
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"failed to look up staff: {exc}") from exc
