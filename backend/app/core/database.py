"""
database.py — Database Session & Connection Management

Purpose:
- Create and provide access to the database used by the backend.
- Manage SQLAlchemy Engine + Session lifecycle.
- Expose a FastAPI dependency `get_db()` that yields a session per-request.

Key Characteristics:
- Synchronous SQLAlchemy engine; FastAPI runs handlers in its thread pool,
  one session per request.
- No module-level engine: a `Database` handle is built from `Settings` and
  attached to the application (`app.state.db`), so tests and multiple
  apps in one process each own an isolated store.
- No Alembic migrations; `create_schema()` creates missing tables.

This module does NOT:
- Define ORM models (see app/models/*).
- Perform any queries or business logic.
"""

from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.logging import get_logger
from app.models.base import Base

logger = get_logger(__name__)


def normalize_database_url(db_url: str) -> str:
    """
    Use psycopg (v3) for PostgreSQL - SQLAlchemy 2.0+ supports psycopg3.
    Convert postgresql:// to postgresql+psycopg:// if no driver is given.
    """
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)
    if db_url.startswith("postgresql://") and "+" not in db_url.split("://")[0]:
        db_url = db_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return db_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def build_engine(db_url: str, echo: bool = False) -> Engine:
    db_url = normalize_database_url(db_url)

    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in db_url or db_url in ("sqlite://", "sqlite+pysqlite://"):
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        engine = create_engine(db_url, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        db_url,
        echo=echo,
        pool_pre_ping=True  # Ensures connections are valid before use
    )


class Database:
    """Explicit store handle: one engine plus its session factory."""

    def __init__(self, db_url: str, echo: bool = False):
        self.engine = build_engine(db_url, echo=echo)
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, echo=settings.SQL_ECHO)

    def create_schema(self) -> None:
        # Import for side effect: registers every model on Base.metadata
        import app.models  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.info("Database schema ready (%s)", self.engine.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------

def get_db(request: Request) -> Iterator[Session]:
    """
    FastAPI dependency: yields a database session for the duration of the request.

    Usage in API endpoint:
        def endpoint(db: Session = Depends(get_db)):
            ...

    Responsibility:
    - Open session → yield to request handler → close session on completion.
    - Services commit their own unit of work; anything left uncommitted
      when the request ends is rolled back by `close()`.
    """
    database: Database = request.app.state.db
    db = database.session()
    try:
        yield db
    finally:
        db.close()
