"""
Schema Manager

Owns the lifecycle of the analytical table: it is dropped and recreated
wholesale on every provisioning run, never migrated in place.
"""

from typing import List

import structlog
from sqlalchemy import Table, inspect
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from track_analytics.database.models import track_table
from track_analytics.exceptions import SchemaError

logger = structlog.get_logger(__name__)


def provision(connection: Connection, table: Table = track_table) -> None:
    """
    Drop the table if present and create it fresh.

    Idempotent: any number of calls leaves the same empty table. The DROP and
    CREATE share one transaction, so a rejected definition leaves nothing
    half-applied on engines with transactional DDL.

    Args:
        connection: Live connection; must not be running queries concurrently
        table: Table definition to provision

    Raises:
        SchemaError: If the engine rejects the DDL
    """
    logger.info("Provisioning table", table=table.name)
    try:
        table.drop(connection, checkfirst=True)
        table.create(connection)
        connection.commit()
    except SQLAlchemyError as e:
        connection.rollback()
        logger.error("Provisioning failed", table=table.name, error=str(e))
        raise SchemaError(
            f"Engine rejected definition of table '{table.name}': {e}",
            table=table.name,
        ) from e

    logger.info("Table provisioned", table=table.name, columns=len(table.columns))


def table_columns(connection: Connection, table_name: str = track_table.name) -> List[str]:
    """Column names of the live table, in declared order."""
    inspector = inspect(connection)
    return [column["name"] for column in inspector.get_columns(table_name)]


def table_exists(connection: Connection, table_name: str = track_table.name) -> bool:
    """Check whether the table is present."""
    return inspect(connection).has_table(table_name)
