"""Customer notification messages and WhatsApp deep links.

Everything here is pure: building a link never opens it.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re
from urllib.parse import quote

from jobdesk.config import Settings
from jobdesk.services.jobs.types import Job, JobStatus

_NON_DIGITS = re.compile(r"\D+")

LOCAL_NUMBER_LENGTH = 10


class InvalidPhoneNumberError(ValueError):
    pass


class NotificationEvent(str, Enum):
    CREATED = "created"
    COMPLETED = "completed"
    DELIVERED = "delivered"


@dataclass(frozen=True)
class Notification:
    event: NotificationEvent
    message: str
    phone: str
    url: str


def event_for_status(status: JobStatus) -> NotificationEvent | None:
    if status is JobStatus.COMPLETED:
        return NotificationEvent.COMPLETED
    if status is JobStatus.DELIVERED:
        return NotificationEvent.DELIVERED
    return None


def format_amount(value: float | None) -> str:
    amount = float(value or 0)
    if amount.is_integer():
        return str(int(amount))
    return f"{amount:.2f}"


def compose_message(
    job: Job,
    event: NotificationEvent,
    *,
    shop_name: str = "FTT Repairing Center",
    currency_symbol: str = "₹",
) -> str:
    device = job.device_type.value
    if event is NotificationEvent.CREATED:
        return (
            f"Dear {job.customer_name}, your {device} has been received at {shop_name}. "
            f"Your Job Sheet No. is {job.job_sheet_number}. "
            f"The estimated repair cost is {currency_symbol}{format_amount(job.estimated_cost)}. "
            "We'll contact you once the repair is complete."
        )
    if event is NotificationEvent.COMPLETED:
        cost = job.final_cost if job.final_cost is not None else job.estimated_cost
        return (
            f"Dear {job.customer_name}, your {device} repair is complete "
            f"(Job Sheet No. {job.job_sheet_number}). "
            f"The final cost is {currency_symbol}{format_amount(cost)}. "
            "Thank you for your patience! Now you can collect your product."
        )
    return (
        f"Dear {job.customer_name}, your {device} "
        f"(Job Sheet No. {job.job_sheet_number}) has been successfully delivered. "
        f"Thank you for choosing {shop_name}!"
    )


def normalize_phone(raw: str, default_country_code: str = "91") -> str:
    digits = _NON_DIGITS.sub("", raw or "")
    if len(digits) > LOCAL_NUMBER_LENGTH:
        return digits
    if len(digits) == LOCAL_NUMBER_LENGTH:
        return f"{_NON_DIGITS.sub('', default_country_code)}{digits}"
    raise InvalidPhoneNumberError(
        f"invalid phone number {raw!r}: expected 10 digits or a number with country code"
    )


def build_link(
    message: str,
    contact_number: str,
    *,
    default_country_code: str = "91",
    base_url: str = "https://wa.me",
) -> str:
    phone = normalize_phone(contact_number, default_country_code)
    return f"{base_url.rstrip('/')}/{phone}?text={quote(message, safe='')}"


def compose_notification(job: Job, event: NotificationEvent, settings: Settings) -> Notification:
    message = compose_message(
        job,
        event,
        shop_name=settings.shop_name,
        currency_symbol=settings.currency_symbol,
    )
    phone = normalize_phone(job.contact_number, settings.default_country_code)
    url = build_link(
        message,
        phone,
        default_country_code=settings.default_country_code,
        base_url=settings.messaging_base_url,
    )
    return Notification(event=event, message=message, phone=phone, url=url)
