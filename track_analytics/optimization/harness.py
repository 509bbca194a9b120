"""
Optimization Harness

Measures a catalog entry before and after a single-column index and reports
the speed-up. Measurements are diagnostics only: they never change catalog
semantics, and the only schema change is the index itself.

Index policy: ``apply_index`` is strict and fails on a taken index name.
``compare`` checks first and skips creation when the column already has a
single-column index, so rerunning an experiment never duplicates an index.
"""

from typing import Dict, List, Optional

import structlog
from pydantic import BaseModel, Field, computed_field
from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from track_analytics.catalog.entries import CatalogEntry
from track_analytics.config import get_settings
from track_analytics.database.models import track_table
from track_analytics.database.schema import table_columns
from track_analytics.exceptions import IndexCreationError, QueryError
from track_analytics.optimization.explain import collect_plan

logger = structlog.get_logger(__name__)


class Measurement(BaseModel):
    """Planning and execution cost of one query"""
    planning_ms: float
    execution_ms: float
    plan: List[str] = Field(default_factory=list)

    def as_record(self) -> Dict[str, float]:
        return {"planning_ms": self.planning_ms, "execution_ms": self.execution_ms}


class OptimizationReport(BaseModel):
    """Before/after comparison for one entry and one indexed column"""
    entry: str
    column: str
    index_name: str
    index_created: bool
    baseline: Measurement
    indexed: Measurement

    @computed_field
    @property
    def speedup(self) -> Optional[float]:
        """baseline.execution_ms / indexed.execution_ms"""
        if self.indexed.execution_ms <= 0:
            return None
        return self.baseline.execution_ms / self.indexed.execution_ms


def index_name_for(column: str, table_name: str = track_table.name) -> str:
    """Default index name for a column"""
    return f"ix_{table_name}_{column}"


def measure(
    entry: CatalogEntry,
    connection: Connection,
    repeats: Optional[int] = None,
) -> Measurement:
    """
    Measure an entry with the engine's explain report.

    Runs ``repeats`` times and keeps the fastest planning and execution time,
    which damps cache warm-up noise.

    Raises:
        QueryError: If the engine rejects the query or repeats is below 1
    """
    if repeats is None:
        repeats = get_settings().optimization.repeats
    if repeats < 1:
        raise QueryError(
            f"Cannot measure '{entry.name}' with repeats={repeats}; at least 1 is required",
            entry_name=entry.name,
            details={"repeats": repeats},
        )
    planning: List[float] = []
    execution: List[float] = []
    plan: List[str] = []

    try:
        for _ in range(repeats):
            report = collect_plan(connection, entry.sql)
            planning.append(report.planning_ms)
            execution.append(report.execution_ms)
            plan = report.plan
    except SQLAlchemyError as e:
        if connection.in_transaction():
            connection.rollback()
        raise QueryError(
            f"Could not measure '{entry.name}': {e}",
            entry_name=entry.name,
        ) from e

    measurement = Measurement(
        planning_ms=min(planning),
        execution_ms=min(execution),
        plan=plan,
    )
    logger.info(
        "Measured catalog entry",
        entry=entry.name,
        repeats=repeats,
        **measurement.as_record(),
    )
    return measurement


def single_column_indexes(
    connection: Connection,
    table_name: str = track_table.name,
) -> Dict[str, str]:
    """Map of column name -> index name for every single-column index"""
    indexes = {}
    for index in inspect(connection).get_indexes(table_name):
        columns = index.get("column_names") or []
        if len(columns) == 1 and columns[0] is not None:
            indexes.setdefault(columns[0], index["name"])
    return indexes


def _require_column(connection: Connection, column: str, index_name: str, table_name: str) -> None:
    if column not in table_columns(connection, table_name):
        raise IndexCreationError(
            f"Cannot index '{column}': no such column on '{table_name}'",
            column=column,
            index_name=index_name,
        )


def apply_index(
    column: str,
    connection: Connection,
    name: Optional[str] = None,
    table_name: str = track_table.name,
) -> str:
    """
    Create a single-column index.

    Args:
        column: Column to index
        connection: Live connection; no queries may run concurrently
        name: Index name, defaults to ``ix_<table>_<column>``

    Returns:
        str: Name of the created index

    Raises:
        IndexCreationError: If the column is missing or the name is taken
    """
    name = name or index_name_for(column, table_name)
    _require_column(connection, column, name, table_name)

    existing = {index["name"] for index in inspect(connection).get_indexes(table_name)}
    if name in existing:
        raise IndexCreationError(
            f"Index '{name}' already exists on '{table_name}'",
            column=column,
            index_name=name,
        )

    quote = connection.dialect.identifier_preparer.quote
    ddl = f"CREATE INDEX {quote(name)} ON {quote(table_name)} ({quote(column)})"
    try:
        connection.execute(text(ddl))
        connection.commit()
    except SQLAlchemyError as e:
        connection.rollback()
        raise IndexCreationError(
            f"Engine rejected index '{name}' on '{table_name}.{column}': {e}",
            column=column,
            index_name=name,
        ) from e

    logger.info("Index created", index=name, table=table_name, column=column)
    return name


def compare(
    entry: CatalogEntry,
    column: str,
    connection: Connection,
    repeats: Optional[int] = None,
) -> OptimizationReport:
    """
    Measure an entry, index a column, and measure again.

    When the column already carries a single-column index the creation step
    is skipped and reported as such; both measurements then run against the
    existing index.

    Raises:
        IndexCreationError: If the column is missing or index DDL fails
        QueryError: If the entry cannot be measured
    """
    table_name = track_table.name
    default_name = index_name_for(column, table_name)
    _require_column(connection, column, default_name, table_name)

    existing = single_column_indexes(connection, table_name)
    if column in existing:
        logger.info(
            "Column already indexed, skipping index creation",
            entry=entry.name,
            column=column,
            index=existing[column],
        )
        baseline = measure(entry, connection, repeats)
        indexed = measure(entry, connection, repeats)
        return OptimizationReport(
            entry=entry.name,
            column=column,
            index_name=existing[column],
            index_created=False,
            baseline=baseline,
            indexed=indexed,
        )

    baseline = measure(entry, connection, repeats)
    created = apply_index(column, connection, default_name, table_name)
    indexed = measure(entry, connection, repeats)

    report = OptimizationReport(
        entry=entry.name,
        column=column,
        index_name=created,
        index_created=True,
        baseline=baseline,
        indexed=indexed,
    )
    logger.info(
        "Optimization compared",
        entry=entry.name,
        column=column,
        speedup=report.speedup,
    )
    return report


def within_tolerance(report: OptimizationReport, tolerance: Optional[float] = None) -> bool:
    """Whether the indexed run is no slower than baseline * tolerance"""
    if tolerance is None:
        tolerance = get_settings().optimization.tolerance
    return report.indexed.execution_ms <= report.baseline.execution_ms * tolerance
