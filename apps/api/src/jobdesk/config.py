from dataclasses import dataclass
from functools import lru_cache
import logging
import os
from pathlib import Path


def _to_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_float(value: str | None, *, default: float, minimum: float) -> float:
    if value is None:
        return default
    parsed = float(value)
    return max(minimum, parsed)


def _to_choice(value: str | None, *, default: str, choices: set[str]) -> str:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized not in choices:
        raise ValueError(f"expected one of {sorted(choices)}, got {value!r}")
    return normalized


@dataclass(frozen=True)
class Settings:
    database_url: str
    db_echo: bool
    store_backend: str
    rest_url: str
    rest_api_key: str
    rest_timeout_seconds: float
    job_sheet_prefix: str
    default_country_code: str
    messaging_base_url: str
    shop_name: str
    shop_tagline: str
    currency_symbol: str
    status_transitions: str
    session_path: str
    log_level: str


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("JOBDESK_DATABASE_URL", "sqlite+pysqlite:///./jobdesk.db"),
        db_echo=_to_bool(os.getenv("JOBDESK_DB_ECHO"), default=False),
        store_backend=_to_choice(
            os.getenv("JOBDESK_STORE_BACKEND"),
            default="sql",
            choices={"sql", "rest"},
        ),
        rest_url=os.getenv("JOBDESK_REST_URL", ""),
        rest_api_key=os.getenv("JOBDESK_REST_API_KEY", ""),
        rest_timeout_seconds=_to_float(
            os.getenv("JOBDESK_REST_TIMEOUT_SECONDS"), default=5.0, minimum=0.1
        ),
        job_sheet_prefix=os.getenv("JOBDESK_JOB_SHEET_PREFIX", "FTT").strip() or "FTT",
        default_country_code=os.getenv("JOBDESK_DEFAULT_COUNTRY_CODE", "91"),
        messaging_base_url=os.getenv("JOBDESK_MESSAGING_BASE_URL", "https://wa.me"),
        shop_name=os.getenv("JOBDESK_SHOP_NAME", "FTT Repairing Center"),
        shop_tagline=os.getenv("JOBDESK_SHOP_TAGLINE", "Reliable Laptop & CCTV Services"),
        currency_symbol=os.getenv("JOBDESK_CURRENCY_SYMBOL", "₹"),
        status_transitions=_to_choice(
            os.getenv("JOBDESK_STATUS_TRANSITIONS"),
            default="unrestricted",
            choices={"unrestricted", "forward"},
        ),
        session_path=os.getenv(
            "JOBDESK_SESSION_PATH",
            str(Path.home() / ".jobdesk" / "session.json"),
        ),
        log_level=os.getenv("JOBDESK_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
