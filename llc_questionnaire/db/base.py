"""SQLAlchemy engine and transaction scope.

The service targets PostgreSQL in production but supports SQLite for local
development and CI. No declarative models are defined here; this module only
manages connection lifecycle. Repositories receive an open Connection so that
several of them can take part in one transaction.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return (
        os.getenv("TEST_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or "sqlite+pysqlite:///:memory:"
    )


# Module-level cached Engine to ensure a single shared connection pool
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    The Engine is rebuilt only when the resolved URL changes. For SQLite
    in-memory URLs, use a StaticPool to keep a single connection alive across
    requests and threads during tests.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        if _ENGINE is not None:
            _ENGINE.dispose()
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in resolved_url:
                kwargs["poolclass"] = StaticPool
        _ENGINE = create_engine(resolved_url, **kwargs)
        _ENGINE_URL = resolved_url
        logger.info("db_engine_created dialect=%s", _ENGINE.dialect.name)

    return _ENGINE


@contextmanager
def transaction(engine: Engine | None = None) -> Iterator[Connection]:
    """Yield a Connection inside a single transaction.

    Commits when the block exits normally; rolls back and re-raises on any
    exception so partial writes are never visible outside the block.
    """
    engine = engine or get_engine()
    with engine.connect() as conn:
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
        except Exception:
            trans.rollback()
            logger.error("db_transaction_rolled_back", exc_info=True)
            raise
