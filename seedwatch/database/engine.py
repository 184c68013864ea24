"""
seedwatch.database.engine — Database Connection & Async Helper
===============================================================

**Why this file exists:**
The bot runs on an ``asyncio`` event loop, but SQLAlchemy here is
**synchronous**.  Calling the DB directly from a loop would stall every
other timer (the accumulator tick, the weekly report, the roster sync)
until the query returns.

So every DB call from async code goes through :func:`run_db`, which ships
the synchronous function to a worker thread::

    from seedwatch.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    # Inside an async method:
    result = await run_db(record_tick, engine, steam_ids, kind, day)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine, make_url
from sqlalchemy.orm import Session

from seedwatch.database.models import Base

logger = logging.getLogger(__name__)

# Backends with an atomic upsert for the playtime counters
SUPPORTED_DIALECTS = ("postgresql", "sqlite", "mysql", "mariadb")

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build a SQLAlchemy :class:`Engine`, by default from ``DATABASE_URL``.

    Any dialect with an upsert works (PostgreSQL, SQLite, MySQL/MariaDB).
    The pool is small: three loops share it and none holds a connection
    for long.

    Raises
    ------
    RuntimeError
        If no URL is given and ``DATABASE_URL`` is not set, or the URL names
        a backend without an upsert.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid database URL."
        )

    backend = make_url(url).get_backend_name()
    if backend not in SUPPORTED_DIALECTS:
        raise RuntimeError(
            f"Unsupported database backend {backend!r}; "
            f"use one of: {', '.join(SUPPORTED_DIALECTS)}"
        )

    kwargs: dict = {"echo": False, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=5,
            max_overflow=5,
            pool_timeout=10,      # Fail after 10s instead of hanging forever
            pool_recycle=3600,    # Recycle connections after 1 hour
        )

    engine = create_engine(url, **kwargs)
    logger.info("Database engine created → %s (%s)", engine.url.host, engine.dialect.name)
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create the ``players`` and ``playtimes`` tables if they are missing.

    Safe to call on every startup.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that auto-commits on success and rolls back
    on exception.

    Usage::

        with get_session(engine) as session:
            session.add(Player(steam_id="76561198000000000"))
            # commit happens automatically on block exit
    """
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    Under the hood it calls :func:`asyncio.to_thread`, which schedules
    *func* on the default ``ThreadPoolExecutor`` so the event loop keeps
    serving the other timers.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
