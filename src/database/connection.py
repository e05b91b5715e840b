"""Viewing store connection management with SQLAlchemy 2.0.

Provides transactional sessions over a pooled engine. SQLite (the
default backend) and server databases such as PostgreSQL are both
supported through DATABASE_URL.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from src.database.models import Base
from src.settings import settings

IN_MEMORY_SQLITE_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})
"""URLs that must share one connection to see the same database."""


class DatabaseConnection:
    """Manages the connection pool and session factory.

    Attributes:
        url: SQLAlchemy connection URL in use.

    Example:
        ```python
        db = DatabaseConnection()
        with db.session() as session:
            result = session.execute(text("SELECT 1"))
        ```
    """

    def __init__(self, url: str | None = None) -> None:
        """Initialize engine and session factory.

        Args:
            url: Connection URL (default: settings.database.sync_url).
        """
        self.url = url or settings.database.sync_url
        self._engine = self._create_engine(self.url)
        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @staticmethod
    def _create_engine(url: str) -> Engine:
        """Create SQLAlchemy engine with a pool suited to the backend.

        Args:
            url: Connection URL.

        Returns:
            Configured Engine.
        """
        options: dict[str, Any] = {"echo": settings.debug}

        if url in IN_MEMORY_SQLITE_URLS:
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        elif url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False}
        else:
            options.update(
                poolclass=QueuePool,
                pool_size=settings.database.pool_size,
                max_overflow=settings.database.pool_overflow,
                pool_timeout=settings.database.pool_timeout,
                pool_pre_ping=True,
            )

        return create_engine(url, **options)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional session scope.

        Commits on success, rolls back on exception, and closes the
        session when done.

        Yields:
            SQLAlchemy Session instance.

        Raises:
            Exception: Re-raises any exception after rollback.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create every table that does not exist yet."""
        Base.metadata.create_all(self._engine)

    def check_connection(self) -> bool:
        """Test database connectivity with a simple query.

        Returns:
            True if connection successful, False otherwise.
        """
        try:
            with self.session() as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def dispose(self) -> None:
        """Dispose the connection pool and release resources."""
        self._engine.dispose()

    @property
    def engine(self) -> Engine:
        """Get the underlying engine."""
        return self._engine


# =============================================================================
# MODULE-LEVEL CONVENIENCE FUNCTIONS
# =============================================================================

_db: DatabaseConnection | None = None


def get_database() -> DatabaseConnection:
    """Get the shared DatabaseConnection instance.

    Creates the instance on first call (lazy initialization).

    Returns:
        DatabaseConnection singleton instance.
    """
    global _db  # noqa: PLW0603
    if _db is None:
        _db = DatabaseConnection()
    return _db


def init_database() -> DatabaseConnection:
    """Create the schema on the shared connection.

    Returns:
        The shared DatabaseConnection.
    """
    db = get_database()
    db.create_schema()
    return db
