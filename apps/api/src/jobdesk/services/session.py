from __future__ import annotations

from dataclasses import asdict
import json
import logging
from pathlib import Path

from jobdesk.services.jobs.types import Staff, StaffRole
from jobdesk.store.base import JobStore

logger = logging.getLogger(__name__)


class NotLoggedInError(RuntimeError):
    pass


def authenticate(store: JobStore, username: str, password: str) -> Staff | None:
    """Check the credentials verbatim against the staff table."""
    if not username or not password:
        return None
    return store.find_staff(username, password)


class StaffSession:
    """The staff member signed in on this machine.

    Call ``load()`` once at startup, ``start()`` after a successful login and
    ``clear()`` on logout. The record is kept in a small JSON file so the
    login survives restarts; the password is never written.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._staff: Staff | None = None

    @property
    def current(self) -> Staff | None:
        return self._staff

    @property
    def is_authenticated(self) -> bool:
        return self._staff is not None

    def require(self) -> Staff:
        if self._staff is None:
            raise NotLoggedInError("not logged in; run `jobdesk login` first")
        return self._staff

    def load(self) -> Staff | None:
        if not self._path.exists():
            self._staff = None
            return None
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            self._staff = Staff(
                id=str(payload["id"]),
                name=str(payload["name"]),
                username=str(payload["username"]),
                role=StaffRole(payload.get("role", StaffRole.TECHNICIAN.value)),
            )
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("discarding unreadable session file %s: %s", self._path, exc)
            self._staff = None
        return self._staff

    def start(self, staff: Staff) -> None:
        payload = asdict(staff)
        payload["role"] = staff.role.value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        self._staff = staff

    def clear(self) -> None:
        self._staff = None
        if self._path.exists():
            self._path.unlink()
