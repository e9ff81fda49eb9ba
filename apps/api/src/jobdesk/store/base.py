from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
from typing import Any, Protocol

from jobdesk.services.jobs.types import ISSUE_DELIMITER, IssueList, Job, Staff


class StoreError(RuntimeError):
    pass


class JobNotFoundError(LookupError):
    def __init__(self, job_id: str) -> None:
        super().__init__(f"job not found: {job_id}")
        self.job_id = job_id


class JobStore(Protocol):
    def list_jobs(self) -> list[Job]: ...

    def get_job(self, job_id: str) -> Job | None: ...

    def insert_job(self, job: Job) -> Job: ...

    def update_job(self, job_id: str, changes: Mapping[str, Any]) -> Job: ...

    def list_job_sheet_numbers(self) -> list[str]: ...

    def find_staff(self, username: str, password: str) -> Staff | None: ...


def encode_issues(issues: Iterable[str]) -> str:
    return f"{ISSUE_DELIMITER} ".join(issues)


def decode_issues(raw: Any) -> IssueList:
    """Read the stored issues column.

    Older rows hold a JSON array string or a plain list instead of the
    delimited form; all three decode to the same IssueList.
    """
    if raw is None:
        return IssueList()
    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                return decode_issues(parsed)
        parts: Iterable[Any] = text.split(ISSUE_DELIMITER)
    elif isinstance(raw, (list, tuple)):
        parts = raw
    else:
        raise ValueError(f"unsupported issues value: {raw!r}")

    issues = IssueList()
    for part in parts:
        item = str(part).strip()
        if item and item not in issues:
            issues.add(item)
    return issues
