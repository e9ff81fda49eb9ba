from __future__ import annotations

import argparse
from datetime import datetime
import getpass
from pathlib import Path
import sys
from typing import Sequence
import webbrowser

from jobdesk.config import Settings, configure_logging, get_settings
from jobdesk.db import init_db
from jobdesk.services.job_service import JobChange, JobService, NotificationOutcome
from jobdesk.services.jobs import (
    KNOWN_BRANDS,
    DeviceType,
    Job,
    JobDraft,
    JobFilters,
    JobStatus,
    JobValidationError,
    StatusTransitionError,
)
from jobdesk.services.session import NotLoggedInError, StaffSession, authenticate
from jobdesk.store import JobNotFoundError, StoreError, build_store

_PREFIX = "[jobdesk]"


def _timestamp(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ISO timestamp: {value}") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobdesk",
        description="Repair shop job sheets: create, track and notify",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Sign in as a staff member")
    login.add_argument("--username", required=True)
    login.add_argument("--password", default=None, help="Prompted for when omitted")

    commands.add_parser("logout", help="Forget the signed-in staff member")
    commands.add_parser("whoami", help="Show the signed-in staff member")

    create = commands.add_parser("create", help="Create a job sheet")
    create.add_argument("--customer", required=True)
    create.add_argument("--contact", required=True)
    create.add_argument(
        "--device",
        required=True,
        choices=[device.value for device in DeviceType],
    )
    create.add_argument(
        "--brand",
        required=True,
        help=f"e.g. {', '.join(KNOWN_BRANDS[:5])}; run `jobdesk options` for the full list",
    )
    create.add_argument(
        "--issue",
        dest="issues",
        action="append",
        required=True,
        help="Reported issue; repeat for up to five. Run `jobdesk options` for common issues",
    )
    create.add_argument("--estimated-cost", type=float, required=True)
    create.add_argument("--attended-by", default=None, help="Defaults to the signed-in staff member")
    create.add_argument("--open", action="store_true", help="Open the WhatsApp link in a browser")

    listing = commands.add_parser("list", help="List job sheets")
    listing.add_argument("--status", choices=[status.value for status in JobStatus])
    listing.add_argument("--attended-by", default=None)
    listing.add_argument("--search", default=None)
    listing.add_argument("--from", dest="created_from", type=_timestamp, default=None)
    listing.add_argument("--to", dest="created_to", type=_timestamp, default=None)

    status = commands.add_parser("status", help="Change the status of a job sheet")
    status.add_argument("job", help="Job id or job sheet number")
    status.add_argument("status", choices=[value.value for value in JobStatus])
    status.add_argument("--final-cost", type=float, default=None)
    status.add_argument("--open", action="store_true", help="Open the WhatsApp link in a browser")

    commands.add_parser("stats", help="Count job sheets per status")

    sheet = commands.add_parser("sheet", help="Print the job sheet for a job")
    sheet.add_argument("job", help="Job id or job sheet number")
    sheet.add_argument("--output", default="-", help="File to write; - for stdout")

    commands.add_parser("options", help="Show brand, issue, device and staff suggestions")

    export = commands.add_parser("export", help="Export all job sheets as CSV")
    export.add_argument("--output", default="repair-jobs.csv", help="Use - for stdout")

    commands.add_parser("init-db", help="Create missing tables in the configured database")
    commands.add_parser("serve", help="Run the HTTP API")
    return parser


def _format_job(job: Job) -> str:
    cost = f"{job.estimated_cost:g}"
    if job.final_cost is not None:
        cost = f"{cost} / final {job.final_cost:g}"
    return (
        f"{job.job_sheet_number}  {job.status.value:<11}  {job.customer_name} "
        f"({job.contact_number})  {job.device_type.value} {job.brand_name}  "
        f"cost={cost}  by={job.attended_by}  issues={'; '.join(job.issues)}"
    )


def _report_notification(outcome: NotificationOutcome | None, *, open_link: bool) -> None:
    if outcome is None:
        return
    if outcome.notification is None:
        print(
            f"{_PREFIX} could not build {outcome.event.value} notification: {outcome.error}",
            file=sys.stderr,
            flush=True,
        )
        return
    print(f"{_PREFIX} {outcome.event.value} notification: {outcome.notification.url}", flush=True)
    if open_link:
        webbrowser.open(outcome.notification.url, new=2)


def _resolve_job(service: JobService, reference: str) -> Job:
    for job in service.list_jobs():
        if reference in (job.id, job.job_sheet_number):
            return job
    raise JobNotFoundError(reference)


def _report_change(change: JobChange, *, open_link: bool) -> None:
    print(_format_job(change.job), flush=True)
    _report_notification(change.notification, open_link=open_link)


def _run(args: argparse.Namespace, settings: Settings, session: StaffSession) -> None:
    if args.command == "login":
        password = args.password if args.password is not None else getpass.getpass("Password: ")
        staff = authenticate(build_store(settings), args.username, password)
        if staff is None:
            raise SystemExit(f"{_PREFIX} login failed")
        session.start(staff)
        print(f"{_PREFIX} logged in as {staff.name} ({staff.role.value})", flush=True)
        return

    if args.command == "logout":
        session.clear()
        print(f"{_PREFIX} logged out", flush=True)
        return

    if args.command == "whoami":
        staff = session.require()
        print(f"{staff.name} ({staff.username}, {staff.role.value})", flush=True)
        return

    if args.command == "init-db":
        init_db()
        print(f"{_PREFIX} database ready", flush=True)
        return

    if args.command == "serve":
        from jobdesk.main import run

        run()
        return

    session.require()
    service = JobService(build_store(settings), settings)

    if args.command == "create":
        draft = JobDraft(
            customer_name=args.customer,
            contact_number=args.contact,
            device_type=DeviceType(args.device),
            brand_name=args.brand,
            issues=args.issues,
            estimated_cost=args.estimated_cost,
            attended_by=args.attended_by,
        )
        _report_change(service.create_job(draft, session=session), open_link=args.open)
    elif args.command == "list":
        filters = JobFilters(
            status=JobStatus(args.status) if args.status else None,
            attended_by=args.attended_by,
            search=args.search,
            created_from=args.created_from,
            created_to=args.created_to,
        )
        jobs = service.list_jobs(filters)
        for job in jobs:
            print(_format_job(job), flush=True)
        print(f"{_PREFIX} {len(jobs)} job(s)", flush=True)
    elif args.command == "status":
        job = _resolve_job(service, args.job)
        change = service.change_status(job.id, JobStatus(args.status), final_cost=args.final_cost)
        _report_change(change, open_link=args.open)
    elif args.command == "stats":
        stats = service.stats()
        for status in JobStatus:
            print(f"{status.value:<11} {stats.count(status)}", flush=True)
        print(f"{'Total':<11} {stats.total}", flush=True)
    elif args.command == "sheet":
        content = service.job_sheet(_resolve_job(service, args.job).id)
        if args.output == "-":
            sys.stdout.write(content)
            sys.stdout.flush()
        else:
            Path(args.output).write_text(content, encoding="utf-8")
            print(f"{_PREFIX} job sheet written to {args.output}", flush=True)
    elif args.command == "options":
        options = service.form_options()
        devices = ", ".join(device.value for device in options.device_types)
        print(f"Brands:       {', '.join(options.brands)}", flush=True)
        print(f"Devices:      {devices}", flush=True)
        print(f"Issues:       {'; '.join(options.common_issues)}", flush=True)
        print(f"Attended by:  {', '.join(options.staff_names) or '-'}", flush=True)
    elif args.command == "export":
        content = service.export_csv()
        if args.output == "-":
            sys.stdout.write(content)
            sys.stdout.flush()
        else:
            Path(args.output).write_text(content, encoding="utf-8", newline="")
            print(f"{_PREFIX} exported to {args.output}", flush=True)


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    session = StaffSession(Path(settings.session_path))
    session.load()

    try:
        _run(args, settings, session)
    except (
        JobNotFoundError,
        JobValidationError,
        NotLoggedInError,
        StatusTransitionError,
        StoreError,
    ) as exc:
        print(f"{_PREFIX} failed: {exc}", file=sys.stderr, flush=True)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
