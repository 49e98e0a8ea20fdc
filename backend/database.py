"""
SQLAlchemy declarative base, the store context that owns the engine and
session factory, and the FastAPI dependency that provides a DB session per
request.

The ``Database`` object is constructed explicitly (see ``main.create_app``),
opened at startup, closed at shutdown, and reached through ``app.state``.
Nothing connection-related lives at module level.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from core.logger import logger

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine + session factory with an explicit open/close lifecycle."""

    def __init__(self, url: str):
        self.url = url
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self, create_schema: bool = False) -> "Database":
        if self.is_open:
            return self

        is_sqlite = self.url.startswith("sqlite")
        connect_args = {"check_same_thread": False} if is_sqlite else {}

        # pool_pre_ping keeps idle connections alive across MySQL's wait_timeout
        self.engine = create_engine(self.url, pool_pre_ping=True, connect_args=connect_args)
        if is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        if create_schema:
            # Import every ORM model so that Base.metadata knows about all tables.
            import models  # noqa: F401

            Base.metadata.create_all(self.engine)

        logger.info("Database opened (%s)", self.engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database closed")
        self.engine = None
        self._session_factory = None

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()


def get_db(request: Request) -> Iterator[Session]:
    """
    FastAPI dependency.  Yields a session for the duration of the request,
    then closes it.  Use with Depends(get_db).
    """
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a block as one atomic unit: commit if it finishes, roll back
    everything it flushed if it raises.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
