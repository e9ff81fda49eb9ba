from __future__ import annotations

from collections.abc import Iterable
import logging
from typing import Protocol

logger = logging.getLogger(__name__)

NUMBER_WIDTH = 5


class JobSheetNumberSource(Protocol):
    def list_job_sheet_numbers(self) -> list[str]: ...


class JobSheetNumberAllocator(Protocol):
    """Hands out the number for a job that is about to be inserted."""

    def allocate(self) -> str: ...


def parse_numeric_suffix(value: str) -> int | None:
    _, separator, suffix = value.strip().rpartition("-")
    if not separator or not (suffix.isascii() and suffix.isdigit()):
        return None
    return int(suffix)


def format_job_sheet_number(prefix: str, number: int) -> str:
    return f"{prefix}-{number:0{NUMBER_WIDTH}d}"


def next_job_sheet_number(existing: Iterable[str], prefix: str = "FTT") -> str:
    highest = 0
    for value in existing:
        parsed = parse_numeric_suffix(str(value))
        if parsed is None:
            logger.warning("ignoring malformed job sheet number %r", value)
            continue
        highest = max(highest, parsed)
    return format_job_sheet_number(prefix, highest + 1)


class MaxScanAllocator:
    """Reads every existing number and returns max + 1.

    Two creators racing between the read and their insert can both get the
    same number. Swap in an allocator backed by a server-side counter to
    close that gap.
    """

    def __init__(self, source: JobSheetNumberSource, *, prefix: str = "FTT") -> None:
        self._source = source
        self._prefix = prefix

    def allocate(self) -> str:
        return next_job_sheet_number(self._source.list_job_sheet_numbers(), self._prefix)
