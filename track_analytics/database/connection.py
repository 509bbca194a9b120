"""
Database Connection Management

Synchronous SQLAlchemy 2.0 engine and scoped connections.

The engine is created explicitly and handed to callers; every schema, catalog
and optimization operation receives the live connection as an argument, so
tests can point the whole stack at an isolated in-memory database.
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from track_analytics.config import Settings, get_settings
from track_analytics.exceptions import DatabaseConnectionError

logger = structlog.get_logger(__name__)


def create_db_engine(
    url: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Engine:
    """
    Create a database engine.

    Args:
        url: SQLAlchemy URL; defaults to the configured database URL
        settings: Settings to read pool options from

    Returns:
        Engine: A new, not yet connected engine

    Raises:
        DatabaseConnectionError: If the URL is malformed or names an
            unavailable dialect or driver
    """
    settings = settings or get_settings()
    url = url or settings.database.get_url()
    try:
        parsed = make_url(url)
    except SQLAlchemyError as e:
        raise DatabaseConnectionError(f"Invalid database URL: {e}") from e

    engine_config: Dict[str, Any] = {
        "future": True,
    }

    if parsed.get_backend_name() == "sqlite":
        # In-memory SQLite lives only as long as its one connection
        if parsed.database in (None, "", ":memory:"):
            engine_config.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
    else:
        engine_config.update({
            "pool_pre_ping": True,  # Verify connections before use
            "pool_size": settings.database.pool_size,
            "max_overflow": settings.database.max_overflow,
            "pool_timeout": settings.database.pool_timeout,
        })

    try:
        engine = create_engine(parsed, **engine_config)
    except (SQLAlchemyError, ImportError) as e:
        safe_url = parsed.render_as_string(hide_password=True)
        raise DatabaseConnectionError(
            f"Cannot create engine for {safe_url}: {e}",
            details={"url": safe_url},
        ) from e

    logger.debug("Database engine created", backend=parsed.get_backend_name())
    return engine


@contextmanager
def connect(engine: Engine) -> Generator[Connection, None, None]:
    """
    Acquire a connection for one unit of work.

    Commits on success, rolls back on failure, and always releases the
    connection back to the engine.

    Raises:
        DatabaseConnectionError: If the engine cannot be reached

    Example:
        with connect(engine) as conn:
            frame = run(entry, conn)
    """
    try:
        conn = engine.connect()
    except SQLAlchemyError as e:
        logger.error("Failed to connect to database", error=str(e))
        raise DatabaseConnectionError(
            f"Cannot connect to {engine.url.render_as_string(hide_password=True)}: {e}",
            details={"url": engine.url.render_as_string(hide_password=True)},
        ) from e

    logger.debug("Database connection opened")
    try:
        yield conn
        if conn.in_transaction():
            conn.commit()
    except Exception as e:
        logger.error("Database unit of work failed, rolling back", error=str(e), error_type=type(e).__name__)
        if conn.in_transaction():
            conn.rollback()
        raise
    finally:
        conn.close()
        logger.debug("Database connection closed")


def check_database_health(engine: Engine) -> dict:
    """
    Check database health status.

    Returns:
        dict: Health status with latency information
    """
    try:
        start = time.perf_counter()
        with connect(engine) as conn:
            conn.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
            "backend": engine.dialect.name,
        }
    except (DatabaseConnectionError, SQLAlchemyError) as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }
