"""Database engine, ORM models, and session management."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy import DateTime, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    sessionmaker,
)

from src.core.config import PROJECT_ROOT, get_config
from src.core.exceptions import DatabaseError
from src.core.logger import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


# ============================================================
# Declarative Base
# ============================================================


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models."""


# ============================================================
# ORM Models
# ============================================================


class LedgerEntryDB(Base):
    """ORM model for one key/value ledger entry."""

    __tablename__ = "ledger_entries"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, default="null")
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)


# ============================================================
# Engine & Session
# ============================================================


def _resolve_db_url(url: str) -> str:
    """Resolve relative SQLite paths against the project root.

    Args:
        url: Database URL from config.

    Returns:
        URL with an absolute SQLite path (parent directory created).
    """
    if url.startswith("sqlite:///") and not url.startswith("sqlite:////"):
        relative_path = url.replace("sqlite:///", "")
        absolute_path = PROJECT_ROOT / relative_path
        absolute_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{absolute_path}"
    return url


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Get the singleton SQLAlchemy engine.

    Returns:
        SQLAlchemy Engine instance.
    """
    config = get_config()
    raw_url = config.database_url or config.storage.url
    db_url = _resolve_db_url(raw_url)
    engine = create_engine(db_url, echo=config.storage.echo)
    logger.info("database_engine_created", url=db_url)
    return engine


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    """Get the singleton session factory.

    Returns:
        SQLAlchemy sessionmaker instance.
    """
    return sessionmaker(bind=get_engine(), expire_on_commit=False)


def init_db(engine: Engine | None = None) -> None:
    """Create all database tables.

    Args:
        engine: Engine to initialize; defaults to the configured one.

    Raises:
        DatabaseError: If table creation fails.
    """
    try:
        Base.metadata.create_all(engine or get_engine())
        logger.info("database_initialized")
    except Exception as e:
        raise DatabaseError(
            "Failed to initialize database",
            {"error": str(e)},
        ) from e


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """Provide a transactional database session.

    Automatically commits on success, rolls back on error.

    Args:
        factory: Session factory; defaults to the configured one.

    Yields:
        SQLAlchemy Session instance.

    Raises:
        DatabaseError: If a database operation fails.
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        raise DatabaseError(
            "Session error",
            {"error": str(e)},
        ) from e
    finally:
        session.close()
