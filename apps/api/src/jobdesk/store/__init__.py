from jobdesk.config import Settings
from jobdesk.db import get_engine
from jobdesk.store.base import (
    JobNotFoundError,
    JobStore,
    StoreError,
    decode_issues,
    encode_issues,
)
from jobdesk.store.rest import RestJobStore
from jobdesk.store.sql import SqlJobStore


def build_store(settings: Settings) -> JobStore:
    if settings.store_backend == "rest":
        return RestJobStore(
            base_url=settings.rest_url,
            api_key=settings.rest_api_key,
            timeout_seconds=settings.rest_timeout_seconds,
        )
    return SqlJobStore(get_engine())


__all__ = [
    "JobNotFoundError",
    "JobStore",
    "RestJobStore",
    "SqlJobStore",
    "StoreError",
    "build_store",
    "decode_issues",
    "encode_issues",
]
