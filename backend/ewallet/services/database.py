import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from ewallet.config import DATABASE_URL, DB_POOL_SIZE, QUERY_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def build_engine(database_url: str = DATABASE_URL) -> Engine:
    """
    Create the pooled engine for the relational store.

    On PostgreSQL every session gets a server-side statement_timeout so a
    query abandoned by the caller stops consuming resources on the server too.
    """
    url = make_url(database_url)
    kwargs: dict = {"pool_pre_ping": True}
    if url.get_backend_name() == "postgresql":
        timeout_ms = int(QUERY_TIMEOUT_SECONDS * 1000)
        kwargs["pool_size"] = DB_POOL_SIZE
        kwargs["connect_args"] = {"options": f"-c statement_timeout={timeout_ms}"}

    engine = create_engine(url, **kwargs)
    logger.info(
        "database_engine_created",
        extra={"backend": url.get_backend_name(), "host": url.host, "database": url.database},
    )
    return engine


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = build_engine()
    return _engine


def set_engine(engine: Optional[Engine]) -> None:
    """Swap the shared engine (used at startup and by tests)."""
    global _engine
    _engine = engine
