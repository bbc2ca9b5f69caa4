"""Database engine, ORM base and per-request sessions."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from usergate.config import get_settings

settings = get_settings()


def build_engine(database_url: str):
    """Create an engine, with pooling for server databases and thread sharing for SQLite."""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session for one request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables directly, bypassing migrations (local SQLite setups)."""
    # Models must be imported so they are registered with Base.metadata
    from usergate import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
