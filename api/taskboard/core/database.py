import logging
from typing import Any, Callable, TypeVar

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base
from starlette.concurrency import run_in_threadpool

from taskboard.core.errors import StoreFailure

logger = logging.getLogger(__name__)

Base = declarative_base()

T = TypeVar("T")


def make_engine(db_url: str) -> Engine:
    engine = create_engine(db_url, pool_pre_ping=True, future=True)
    if engine.dialect.name == "sqlite":
        # sqlite only enforces foreign keys when asked, per connection
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_conn, record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_db(engine: Engine) -> None:
    # registers the tables on Base.metadata
    from taskboard.models import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def _run(engine: Engine, work: Callable[..., T], *args: Any) -> T:
    with engine.begin() as conn:
        return work(conn, *args)


async def run_in_connection(engine: Engine, work: Callable[..., T], *args: Any) -> T:
    """Run ``work(conn, *args)`` in one transaction on a worker thread.

    The pooled connection goes back to the pool on every exit path. Driver
    and SQL errors are logged here and re-raised as ``StoreFailure`` so that
    nothing from the engine leaks into a response. Errors that ``work``
    raises itself (``Conflict`` and friends) pass through untouched.
    """
    try:
        return await run_in_threadpool(_run, engine, work, *args)
    except SQLAlchemyError as exc:
        logger.exception("Store failure in %s", getattr(work, "__name__", "query"))
        raise StoreFailure() from exc


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def ping(conn: Connection) -> bool:
    conn.exec_driver_sql("SELECT 1")
    return True
