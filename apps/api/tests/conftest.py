from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from jobdesk.config import get_settings
from jobdesk.db import get_engine, init_db
from jobdesk.main import app
from jobdesk.models import StaffRecord
from jobdesk.services.jobs import DeviceType, IssueList, Job, JobStatus


@pytest.fixture(autouse=True)
def reset_api_caches(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    monkeypatch.setenv("JOBDESK_SESSION_PATH", str(tmp_path / "session" / "session.json"))
    monkeypatch.delenv("JOBDESK_STORE_BACKEND", raising=False)
    monkeypatch.delenv("JOBDESK_STATUS_TRANSITIONS", raising=False)
    get_settings.cache_clear()
    get_engine.cache_clear()
    yield
    get_settings.cache_clear()
    get_engine.cache_clear()


@pytest.fixture
def engine(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Engine]:
    sqlite_db_path = tmp_path / "jobdesk-tests.db"
    monkeypatch.setenv("JOBDESK_DATABASE_URL", f"sqlite+pysqlite:///{sqlite_db_path}")
    monkeypatch.setenv("JOBDESK_DB_ECHO", "false")

    engine = init_db(get_engine())
    yield engine
    engine.dispose()


@pytest.fixture
def client(engine: Engine) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def staff_member(engine: Engine) -> StaffRecord:
    with Session(engine) as session:
        record = StaffRecord(
            id="staff-1",
            name="Ravi Kumar",
            username="ravi",
            password="secret",
            role="Technician",
        )
        session.add(record)
        session.commit()
        session.refresh(record)
        session.expunge(record)
    return record


@pytest.fixture
def make_job() -> Callable[..., Job]:
    def _make_job(**overrides: Any) -> Job:
        created_at = overrides.pop("created_at", datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc))
        values: dict[str, Any] = {
            "id": "job-1",
            "job_sheet_number": "FTT-00001",
            "customer_name": "Asha",
            "contact_number": "98765 43210",
            "device_type": DeviceType.LAPTOP,
            "brand_name": "Dell",
            "issues": IssueList(["No display"]),
            "attended_by": "Ravi Kumar",
            "estimated_cost": 1500.0,
            "status": JobStatus.PENDING,
            "created_at": created_at,
            "updated_at": created_at,
        }
        values.update(overrides)
        return Job(**values)

    return _make_job
