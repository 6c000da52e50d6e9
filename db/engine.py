"""
db.engine - Engine bootstrap and session factory.

The store is addressed by config.DB_URL.  SQLite files get WAL mode
and a busy timeout so an import running in the CLI and one arriving
over HTTP can share the file; server databases get pre-ping so a
dropped connection is replaced instead of failing the next import.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

import config
from db.models import Base

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def init_db(db_url: str) -> Engine:
    """Create the engine for *db_url*, create missing tables, return the engine."""
    global _engine, _SessionLocal

    dispose_db()

    url = make_url(db_url)
    if url.get_backend_name() == "sqlite":
        _engine = create_engine(url, echo=False,
                                connect_args={"check_same_thread": False})
        _register_sqlite_pragmas(_engine, in_memory=url.database in (None, "", ":memory:"))
    else:
        _engine = create_engine(url, echo=False, pool_pre_ping=True)

    Base.metadata.create_all(_engine)
    _SessionLocal = sessionmaker(bind=_engine, expire_on_commit=False)
    logger.info(f"Employee store bound to {url.render_as_string(hide_password=True)}")
    return _engine


def dispose_db() -> None:
    """Close pooled connections and forget the engine."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_session() -> Session:
    """Return a new session.  Caller is responsible for .close()."""
    if _SessionLocal is None:
        raise RuntimeError("Database not initialised - call init_db() first")
    return _SessionLocal()


def _register_sqlite_pragmas(engine: Engine, *, in_memory: bool) -> None:
    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_conn, _rec):
        cur = dbapi_conn.cursor()
        if not in_memory:
            cur.execute("PRAGMA journal_mode=WAL")
        cur.execute("PRAGMA synchronous=NORMAL")
        cur.execute(f"PRAGMA busy_timeout={int(config.SQLITE_BUSY_TIMEOUT_MS)}")
        cur.close()
