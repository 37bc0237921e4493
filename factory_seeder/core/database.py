"""SQLAlchemy 2.0 session setup for the host application's database.

factory_boy's SQLAlchemy integration drives a synchronous ``Session``, so
the engine here is the sync flavour.
"""

from collections.abc import Generator
from functools import lru_cache

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from factory_seeder.core.config import get_settings

IN_MEMORY_SQLITE_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})


@lru_cache
def get_engine(database_url: str | None = None) -> Engine:
    """Create (and cache) an engine for the configured database.

    In-memory SQLite shares one connection so every session sees the
    same database.
    """
    settings = get_settings()
    url = database_url or settings.database_url
    options: dict = {"echo": settings.debug, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    if url in IN_MEMORY_SQLITE_URLS:
        options["poolclass"] = StaticPool
    return create_engine(url, **options)


def get_session_maker(database_url: str | None = None) -> sessionmaker[Session]:
    """Create a session maker bound to the configured engine."""
    return sessionmaker(
        get_engine(database_url),
        class_=Session,
        expire_on_commit=False,
    )


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency for getting database sessions.

    Uses the session maker the app was created with.

    Yields:
        Session: Database session. Generation commits per record itself,
        so the dependency only rolls back leftovers on failure.
    """
    session_maker: sessionmaker[Session] = request.app.state.session_maker
    with session_maker() as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise
