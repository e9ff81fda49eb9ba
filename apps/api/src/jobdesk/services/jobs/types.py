from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

MAX_ISSUES = 5
ISSUE_DELIMITER = ","


class JobValidationError(ValueError):
    pass


class JobStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    DELIVERED = "Delivered"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    @property
    def is_completed_or_later(self) -> bool:
        return self.rank >= JobStatus.COMPLETED.rank


_STATUS_ORDER: tuple[JobStatus, ...] = (
    JobStatus.PENDING,
    JobStatus.IN_PROGRESS,
    JobStatus.COMPLETED,
    JobStatus.DELIVERED,
)


class DeviceType(str, Enum):
    LAPTOP = "Laptop"
    DESKTOP = "Desktop"
    DVR = "DVR"
    NVR = "NVR"
    SERVER = "Server"
    PRINTER = "Printer"
    MONITOR = "Monitor"


class StaffRole(str, Enum):
    ADMIN = "Admin"
    TECHNICIAN = "Technician"


KNOWN_BRANDS: tuple[str, ...] = (
    "Dell",
    "HP",
    "Lenovo",
    "Asus",
    "Acer",
    "Apple",
    "MSI",
    "Toshiba",
    "Sony",
    "Samsung",
    "Hikvision",
    "Dahua",
    "Bosch",
    "CP-Plus",
    "Other",
)

COMMON_ISSUES: tuple[str, ...] = (
    "Service",
    "Screen damage",
    "Keyboard not working",
    "Battery not charging",
    "Overheating",
    "Slow performance",
    "Blue screen error",
    "No display",
    "Hard drive failure",
    "RAM issue",
    "Motherboard problem",
    "Power adapter issue",
    "Software installation",
    "Printer paper jam",
    "Print not clear",
    "Scanner not working",
    "Virus removal",
    "Data recovery",
    "Network issue",
    "Fan noise",
    "Monitor flickering",
    "Operating system reinstall",
    "No power on",
    "USB ports not working",
    "Display cable issue",
)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IssueList:
    """Ordered set of reported issues, at most ``MAX_ISSUES`` long.

    Entries are trimmed on the way in. A rejected ``add`` raises
    ``JobValidationError`` and leaves the list untouched.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items: list[str] = []
        for item in items:
            self.add(item)

    def add(self, issue: str) -> None:
        normalized = issue.strip()
        if not normalized:
            raise JobValidationError("issue must not be empty")
        if ISSUE_DELIMITER in normalized:
            raise JobValidationError(f"issue must not contain {ISSUE_DELIMITER!r}")
        if normalized in self._items:
            raise JobValidationError(f"duplicate issue: {normalized}")
        if len(self._items) >= MAX_ISSUES:
            raise JobValidationError(f"a job holds at most {MAX_ISSUES} issues")
        self._items.append(normalized)

    def remove(self, index: int) -> str:
        return self._items.pop(index)

    def copy(self) -> IssueList:
        clone = IssueList()
        clone._items = list(self._items)
        return clone

    def as_list(self) -> list[str]:
        return list(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, issue: object) -> bool:
        return issue in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, IssueList):
            return self._items == other._items
        return NotImplemented

    def __repr__(self) -> str:
        return f"IssueList({self._items!r})"


@dataclass(frozen=True)
class Job:
    id: str
    job_sheet_number: str
    customer_name: str
    contact_number: str
    device_type: DeviceType
    brand_name: str
    issues: IssueList
    attended_by: str
    estimated_cost: float
    status: JobStatus
    created_at: datetime
    updated_at: datetime
    final_cost: float | None = None
    completed_at: datetime | None = None

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class Staff:
    id: str
    name: str
    username: str
    role: StaffRole = StaffRole.TECHNICIAN


@dataclass(frozen=True)
class JobDraft:
    """Form input for a new job sheet."""

    customer_name: str
    contact_number: str
    device_type: DeviceType
    brand_name: str
    issues: list[str]
    estimated_cost: float
    attended_by: str | None = None


@dataclass(frozen=True)
class JobFilters:
    status: JobStatus | None = None
    attended_by: str | None = None
    search: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None


@dataclass(frozen=True)
class JobStats:
    total: int
    by_status: dict[JobStatus, int] = field(default_factory=dict)

    def count(self, status: JobStatus) -> int:
        return self.by_status.get(status, 0)


@dataclass(frozen=True)
class JobOptions:
    """Choices offered on the job form and the list filters."""

    brands: tuple[str, ...]
    common_issues: tuple[str, ...]
    device_types: tuple[DeviceType, ...]
    staff_names: tuple[str, ...]
