"""
Catalog Runner

Executes catalog entries against a live connection and materializes the
result as a Polars DataFrame with the entry's declared column shape.
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Union

import polars as pl
import structlog
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from track_analytics.catalog.catalog import QueryCatalog, default_catalog
from track_analytics.catalog.entries import CatalogEntry, Tier
from track_analytics.exceptions import QueryError

logger = structlog.get_logger(__name__)


@dataclass
class RunOutcome:
    """Result of one entry within a batch run"""
    entry: CatalogEntry
    frame: Optional[pl.DataFrame] = None
    error: Optional[QueryError] = None
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None


def run(entry: CatalogEntry, connection: Connection) -> pl.DataFrame:
    """
    Execute a catalog entry and return its rows.

    Queries are read-only. On failure the connection's transaction is rolled
    back so the connection stays usable for the next entry. That rollback
    also discards any uncommitted writes the caller made on the same
    connection, so callers commit loads and index DDL before running
    entries; the phases never share an open transaction.

    Args:
        entry: Catalog entry to execute
        connection: Live connection to a populated table

    Returns:
        pl.DataFrame: Materialized rows, columns exactly as declared

    Raises:
        QueryError: If the engine rejects the query or the result shape differs
    """
    log = logger.bind(entry=entry.name, tier=entry.tier.value)
    log.debug("Running catalog entry")

    try:
        result = connection.execute(text(entry.sql))
        columns = list(result.keys())
        rows = result.fetchall()
    except SQLAlchemyError as e:
        if connection.in_transaction():
            connection.rollback()
        log.warning("Catalog entry failed", error=str(e))
        raise QueryError(
            f"Query '{entry.name}' failed: {e}",
            entry_name=entry.name,
        ) from e

    if tuple(columns) != entry.columns:
        raise QueryError(
            f"Query '{entry.name}' returned columns {columns}, expected {list(entry.columns)}",
            entry_name=entry.name,
            details={"returned": columns, "expected": list(entry.columns)},
        )

    frame = _to_frame(columns, rows)
    log.debug("Catalog entry completed", rows=frame.height)
    return frame


def _to_frame(columns: List[str], rows) -> pl.DataFrame:
    """Build a column-oriented frame; mixed int/float columns are upcast"""
    data = {
        name: [row[position] for row in rows]
        for position, name in enumerate(columns)
    }
    return pl.DataFrame(data, strict=False)


def run_all(
    connection: Connection,
    tier: Optional[Union[Tier, str]] = None,
    catalog: QueryCatalog = default_catalog,
) -> List[RunOutcome]:
    """
    Run every entry, optionally restricted to one tier.

    A failing entry is recorded on its outcome and the batch continues.
    """
    outcomes = []
    for entry in catalog.list(tier):
        start = time.perf_counter()
        try:
            frame = run(entry, connection)
            outcome = RunOutcome(entry=entry, frame=frame)
        except QueryError as e:
            outcome = RunOutcome(entry=entry, error=e)
        outcome.duration_ms = (time.perf_counter() - start) * 1000
        outcomes.append(outcome)

    failed = sum(1 for o in outcomes if not o.succeeded)
    logger.info(
        f"Catalog run completed: {len(outcomes) - failed} succeeded, {failed} failed",
        tier=tier.value if isinstance(tier, Tier) else tier,
    )
    return outcomes
