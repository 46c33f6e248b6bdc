import os
from contextlib import contextmanager
from typing import Callable, Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
import sqlalchemy.exc as sa_exc

POSTGRES_HOST = os.environ.get("POSTGRES_HOST", "localhost")
POSTGRES_PORT = os.environ.get("POSTGRES_PORT", "5432")
POSTGRES_USER = os.environ.get("POSTGRES_USER")
POSTGRES_PASSWORD = os.environ.get("POSTGRES_PASSWORD")
POSTGRES_DB = os.environ.get("POSTGRES_DB")

DATABASE_URL = os.environ.get(
    "DATABASE_URL",
    f"postgresql+psycopg2://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

SessionFactory = Callable[[], Session]


def create_db_engine(url: Optional[str] = None) -> Engine:
    """
    Create the SQLAlchemy engine.

    PostgreSQL gets a tuned QueuePool. SQLite (local runs and tests) gets a
    single shared connection so in-memory databases survive across sessions.
    """
    url = url or DATABASE_URL

    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=1800,     # 30 min - protects against idle disconnects
        pool_pre_ping=True,    # avoids stale connections
        pool_use_lifo=True,
        future=True
    )


def create_session_factory(engine: Optional[Engine] = None) -> SessionFactory:
    return sessionmaker(
        bind=engine if engine is not None else create_db_engine(),
        autocommit=False,
        expire_on_commit=False,  # more convenient with Pydantic
        autoflush=False,         # prevents "accidental" DB touching
        class_=Session
    )


def _get_db(session_factory: SessionFactory) -> Generator[Session, None, None]:
    """
    Internal database session generator with transaction management.

    Commits on success, rolls back on any exception and always closes.
    """
    db = session_factory()
    try:
        yield db

        # Only commit if we have an open transaction
        if db.in_transaction():
            db.commit()
    except Exception:
        if db.in_transaction():
            db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def session_scope(session_factory: SessionFactory) -> Generator[Session, None, None]:
    """Transactional scope for code running outside of a request (stores, scripts)."""
    yield from _get_db(session_factory)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency: provides a database session bound to the
    application's session factory (``app.state.session_factory``).

    Usage:
        @router.get("/projects")
        async def list_projects(db: Session = Depends(get_db)):
            ...
    """
    try:
        yield from _get_db(request.app.state.session_factory)
    except sa_exc.TimeoutError as e:  # QueuePool acquisition timed out
        from synergy_backend.exceptions import ServiceUnavailableException
        raise ServiceUnavailableException(
            detail="Database is busy. Please retry shortly.",
            headers={"Retry-After": "2"}
        ) from e
