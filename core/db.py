"""
Database access for the user directory.

One process-wide ``DatabaseManager`` owns the engine and the session factory.
The API initializes it on startup from ``DATABASE_URL``; SQLite is the default
and needs no server.

Usage:
    from core.db import db, get_db

    db.initialize("sqlite:///dashgate.db")
    db.create_all_tables()
    with db.session() as session:
        session.add(user)          # committed when the block exits
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import get_settings


class Base(DeclarativeBase):
    """Declarative base for Dashgate models."""


def _engine_options(url: str) -> dict[str, Any]:
    settings = get_settings()
    if url.startswith("sqlite"):
        # One shared connection: in-memory databases vanish with their connection
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "poolclass": QueuePool,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
    }


class DatabaseManager:
    """
    Process-wide engine and session factory.

    ``initialize`` is idempotent; ``reset`` disposes the engine so a later
    ``initialize`` may point somewhere else (tests do this).
    """

    _instance: Optional["DatabaseManager"] = None

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance.engine = None
            instance.SessionLocal = None
            instance.url = None
            cls._instance = instance
        return cls._instance

    engine: Engine | None
    SessionLocal: sessionmaker | None
    url: str | None

    @property
    def is_initialized(self) -> bool:
        return self.engine is not None

    def initialize(self, database_url: str | None = None) -> None:
        """Create the engine. Uses settings.database_url when no URL is given."""
        if self.is_initialized:
            return

        settings = get_settings()
        self.url = database_url or settings.database_url
        self.engine = create_engine(self.url, echo=settings.debug, **_engine_options(self.url))
        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    def create_all_tables(self) -> None:
        """Create missing tables for every registered model."""
        # Importing the package registers the models on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self._require_engine())

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session that commits on success and rolls back on error."""
        self._require_engine()
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> bool:
        """True when the database answers a trivial query."""
        if not self.is_initialized:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    def reset(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None
        self.url = None

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")
        return self.engine


db = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    with db.session() as session:
        yield session


__all__ = ["Base", "DatabaseManager", "db", "get_db"]
