from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from linkvault.core.logging import get_logger
from linkvault.core.settings import get_settings

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


# Global engine instance
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def _engine_kwargs(database_url: str, debug: bool) -> dict:
    settings = get_settings()
    if database_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}, "echo": debug}
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
        "echo": debug,
    }


def init_db(database_url: str | None = None) -> Engine:
    """Initialize database engine and session factory, creating tables if missing."""
    global _engine, _SessionLocal

    if _engine is not None:
        return _engine

    settings = get_settings()
    url = database_url or settings.database_url
    _engine = create_engine(url, **_engine_kwargs(url, settings.debug))
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)

    # Models register themselves on Base.metadata when imported
    import linkvault.models.schema  # noqa: F401

    Base.metadata.create_all(bind=_engine)
    logger.info("Database initialized successfully")
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get the session factory, initializing if necessary."""
    if _SessionLocal is None:
        init_db()
    assert _SessionLocal is not None
    return _SessionLocal


def reset_db() -> None:
    """Dispose the engine so the next call re-initializes (used by tests and the CLI)."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


@contextmanager
def get_db() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_db() as db:
            item = db.get(SavedItem, item_id)
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
