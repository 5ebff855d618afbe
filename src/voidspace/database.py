"""SQLAlchemy engine and session management."""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from voidspace.db import models  # noqa: F401  registers tables on Base.metadata
from voidspace.db.base import Base

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def init_db(url: str) -> None:
    """Initialize the database engine, session factory and tables."""
    global _engine, _session_factory  # noqa: PLW0603
    if url.startswith("sqlite"):
        kwargs: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/") == "sqlite:":
            # One shared connection, or each session would see its own empty database.
            kwargs["poolclass"] = StaticPool
        _engine = create_engine(url, echo=False, **kwargs)
    else:
        _engine = create_engine(
            url,
            pool_size=10,
            max_overflow=5,
            pool_pre_ping=True,
            echo=False,
        )
    _session_factory = sessionmaker(_engine, expire_on_commit=False)
    Base.metadata.create_all(_engine)


def close_db() -> None:
    """Dispose of the database engine."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine:
        _engine.dispose()
        _engine = None
        _session_factory = None


def get_session_factory() -> sessionmaker[Session]:
    """Get the session factory."""
    if _session_factory is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    return _session_factory
