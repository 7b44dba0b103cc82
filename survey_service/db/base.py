"""SQLAlchemy engine construction.

The service targets PostgreSQL in production and SQLite for local development
and CI. No ORM models are defined here; this module only manages the engine
and connection-level settings.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from survey_service.config import load_config

logger = logging.getLogger(__name__)


# Module-level cached Engine shared by every store in the process
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    # SQLite ignores ON DELETE CASCADE unless enabled per connection
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def build_engine(url: str) -> Engine:
    """Create a new Engine for ``url`` with dialect-specific settings.

    In-memory SQLite gets a StaticPool so one connection (and therefore one
    database) is shared across sessions and threads. SQLite connections also
    enable foreign-key enforcement.
    """
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite") and ":memory:" in url:
        kwargs.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    logger.info("db.engine.created dialect=%s", engine.dialect.name)
    return engine


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton Engine for the given URL.

    Without a URL the configured DSN is used. A different URL replaces the
    cached engine.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or load_config().database.dsn

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = build_engine(resolved_url)
        _ENGINE_URL = resolved_url

    return _ENGINE


__all__ = ["build_engine", "get_engine"]
