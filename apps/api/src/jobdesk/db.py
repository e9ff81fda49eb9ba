from functools import lru_cache
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase

from jobdesk.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    connect_args: dict[str, object] = {}
    if make_url(settings.database_url).get_backend_name() == "sqlite":
        # FastAPI runs sync routes on a thread pool.
        connect_args["check_same_thread"] = False
    return create_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def init_db(engine: Engine | None = None) -> Engine:
    """Create missing tables without going through Alembic (local SQLite setups)."""
    from jobdesk import models  # noqa: F401

    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("database schema ready at %s", engine.url.render_as_string(hide_password=True))
    return engine
