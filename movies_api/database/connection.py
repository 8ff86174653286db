"""
Database connection management using SQLAlchemy.

This module handles engine and connection-pool creation, session management,
and the liveness check used by the health endpoint.
"""

import logging
import os
import sqlite3
import threading
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from contextlib import contextmanager
from typing import Generator, Optional
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from movies_api.database.models import Base

logger = logging.getLogger(__name__)


# Default database location
DEFAULT_DATABASE_URL = "sqlite:///data/movies.db"

# Backends with an INSERT .. ON CONFLICT .. RETURNING upsert
SUPPORTED_BACKENDS = ("sqlite", "postgresql")


def get_database_url(database_url: str = DEFAULT_DATABASE_URL) -> str:
    """
    Normalize a database URL.

    For file-backed SQLite URLs the parent directory is created and the path
    made absolute. Other URLs are returned unchanged.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        SQLAlchemy database URL
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return database_url

    db_dir = os.path.dirname(url.database)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    # SQLite URL format: sqlite:///path/to/database.db
    return f"sqlite:///{os.path.abspath(url.database)}"


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """
    Enable foreign key constraints for SQLite.

    SQLite disables foreign key constraints by default; the rating cascade
    and the unknown-movie check both depend on them.
    """
    if not isinstance(dbapi_conn, sqlite3.Connection):
        return
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Database connection manager.

    Handles engine creation, session management, and database initialization.
    """

    def __init__(
        self,
        database_url: str = DEFAULT_DATABASE_URL,
        echo: bool = False,
        pool_size: int = 20,
        max_overflow: int = 0,
        pool_recycle: int = 3600,
        pool_timeout: int = 10,
    ):
        """
        Initialize database manager.

        Args:
            database_url: SQLAlchemy database URL
            echo: If True, log all SQL statements (useful for debugging)
            pool_size: Connections kept in the pool (server databases only)
            max_overflow: Extra connections allowed above pool_size
            pool_recycle: Seconds after which a connection is replaced
            pool_timeout: Seconds to wait for a free connection
        """
        self.database_url = get_database_url(database_url)
        url = make_url(self.database_url)
        if url.get_backend_name() not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"Unsupported database backend {url.get_backend_name()!r}; "
                f"expected one of {', '.join(SUPPORTED_BACKENDS)}"
            )

        if url.get_backend_name() == "sqlite":
            engine_kwargs = {"connect_args": {"check_same_thread": False, "timeout": pool_timeout}}
            if url.database in (None, "", ":memory:"):
                # A single shared connection keeps the in-memory database alive
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs = {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_recycle": pool_recycle,
                "pool_timeout": pool_timeout,
                "pool_pre_ping": True,
            }

        logger.info(
            "Initializing connection pool for %s (size=%d, overflow=%d, recycle=%ds, timeout=%ds)",
            url.get_backend_name(), pool_size, max_overflow, pool_recycle, pool_timeout
        )
        self.engine = create_engine(self.database_url, echo=echo, **engine_kwargs)

        # Create session factory
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

        self._ping_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="db-ping")
        self._ping_lock = threading.Lock()
        self._pending_ping: Optional[Future] = None

    def create_tables(self):
        """
        Create all tables defined in the models.

        This creates tables if they don't exist. Existing tables are not modified.
        """
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        """
        Drop all tables defined in the models.

        WARNING: This will delete all data in the database!
        """
        Base.metadata.drop_all(bind=self.engine)

    def reset_database(self):
        """
        Drop and recreate all tables.

        WARNING: This will delete all data in the database!
        """
        self.drop_tables()
        self.create_tables()

    def get_session(self) -> Session:
        """Get a new database session. The caller is responsible for closing it."""
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.

        Automatically commits on success and rolls back on failure.

        Usage:
            with db_manager.session_scope() as session:
                session.add(movie)

        Yields:
            SQLAlchemy Session object
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _execute_ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def ping(self, timeout: Optional[float] = None) -> bool:
        """
        Check that the database answers a trivial query.

        Pings run on one long-lived worker thread. While an earlier ping is
        still stuck, new pings fail immediately instead of queueing.

        Args:
            timeout: Seconds to wait for the answer (None waits indefinitely)

        Returns:
            True if the database responded in time, False otherwise
        """
        with self._ping_lock:
            if self._pending_ping is not None and not self._pending_ping.done():
                logger.warning("Database ping skipped: previous ping still running")
                return False
            future = self._ping_executor.submit(self._execute_ping)
            self._pending_ping = future

        try:
            future.result(timeout=timeout)
            return True
        except FutureTimeoutError:
            logger.warning("Database ping timed out after %ss", timeout)
            return False
        except Exception as e:
            logger.warning("Database ping failed: %s", e)
            return False

    def close(self):
        """Close the database engine and all connections."""
        logger.info("Closing connection pool")
        self._ping_executor.shutdown(wait=False, cancel_futures=True)
        self.engine.dispose()


# Global database manager instance (singleton pattern)
_db_manager = None


def get_db_manager(database_url: str = DEFAULT_DATABASE_URL, **kwargs) -> DatabaseManager:
    """
    Get or create the global database manager instance.

    Args:
        database_url: SQLAlchemy database URL
        **kwargs: Extra DatabaseManager options (echo, pool sizing)

    Returns:
        DatabaseManager instance
    """
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(database_url=database_url, **kwargs)
    return _db_manager


def reset_db_manager() -> None:
    """Dispose and forget the global database manager."""
    global _db_manager
    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None
