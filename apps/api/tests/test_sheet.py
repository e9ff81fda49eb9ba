from collections.abc import Callable

import pytest

from jobdesk.config import get_settings
from jobdesk.services.jobs import IssueList, Job, JobStatus, render_job_sheet
from jobdesk.services.jobs.sheet import SHEET_WIDTH


def test_sheet_lists_job_details(make_job: Callable[..., Job]) -> None:
    job = make_job(
        job_sheet_number="FTT-00007",
        issues=IssueList(["No display", "Fan noise"]),
    )

    sheet = render_job_sheet(job, get_settings())

    lines = sheet.splitlines()
    assert lines[1].strip() == "FTT Repairing Center"
    assert lines[2].strip() == "Reliable Laptop & CCTV Services"
    assert "JOB SHEET" in sheet
    assert "Job Sheet No:   FTT-00007" in lines
    assert "Received:       2026-10-01" in lines
    assert "Customer Name:  Asha" in lines
    assert "Contact:        98765 43210" in lines
    assert "Device:         Laptop (Dell)" in lines
    assert "Issues:         No display, Fan noise" in lines
    assert "Attended By:    Ravi Kumar" in lines
    assert "Estimated Cost: ₹1500" in lines
    assert "Status:         Pending" in lines
    assert not any(line.startswith("Final Cost") for line in lines)
    assert "Thank you for choosing FTT Repairing Center!" in sheet
    assert sheet.endswith("=" * SHEET_WIDTH + "\n")


def test_sheet_shows_final_cost_once_set(make_job: Callable[..., Job]) -> None:
    job = make_job(status=JobStatus.COMPLETED, final_cost=1750.5)

    lines = render_job_sheet(job, get_settings()).splitlines()

    assert "Final Cost:     ₹1750.50" in lines
    assert "Status:         Completed" in lines


def test_sheet_uses_configured_shop(
    make_job: Callable[..., Job],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("JOBDESK_SHOP_NAME", "Fix It Fast")
    monkeypatch.setenv("JOBDESK_SHOP_TAGLINE", "")
    monkeypatch.setenv("JOBDESK_CURRENCY_SYMBOL", "$")

    sheet = render_job_sheet(make_job(), get_settings())

    lines = sheet.splitlines()
    assert lines[1].strip() == "Fix It Fast"
    assert lines[2] == "-" * SHEET_WIDTH
    assert "Estimated Cost: $1500" in lines
    assert "Thank you for choosing Fix It Fast!" in sheet
