import os
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, create_engine, Session

from .exceptions import SchemaError
from .db import models  # noqa: F401  registers the catalog tables on SQLModel.metadata

logger = logging.getLogger(__name__)


def make_engine(db_url: str, echo: bool = False) -> Engine:
    """Build the process-wide engine (connection pool) for ``db_url``.

    The caller owns the returned engine and hands it to whatever needs a
    session; nothing in the package keeps it as module state.
    """
    engine_kwargs = {}

    if db_url.startswith("sqlite"):
        # SQLite specific connect args
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False}
        })
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })

    engine = create_engine(db_url, echo=echo, **engine_kwargs)

    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _ensure_sqlite_directory(engine: Engine) -> None:
    url = engine.url
    database = url.database
    if not url.drivername.startswith("sqlite") or not database or database == ":memory:":
        return
    parent = os.path.dirname(os.path.abspath(database))
    os.makedirs(parent, exist_ok=True)


def create_db_and_tables(engine: Engine) -> None:
    """Create the categories and items tables if they are missing.

    Safe to call on every start. Raises SchemaError when the backing store
    cannot be provisioned.
    """
    try:
        _ensure_sqlite_directory(engine)
        SQLModel.metadata.create_all(engine)
    except (OSError, SQLAlchemyError) as e:
        logger.error(f"failed to create catalog tables: {e}")
        raise SchemaError(f"failed to create catalog tables: {e}") from e
    logger.info("Catalog tables ready")


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Commit when the block finishes, roll back on every other exit."""
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise


def get_session(request: Request) -> Iterator[Session]:
    with Session(request.app.state.engine) as session:
        yield session
