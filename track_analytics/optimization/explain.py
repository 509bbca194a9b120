"""
Execution Plan Collection

Asks the engine how it runs a query and how long planning and execution take.

- PostgreSQL reports both timings itself through
  ``EXPLAIN (ANALYZE, FORMAT JSON)``.
- SQLite has no timing report: ``EXPLAIN QUERY PLAN`` is timed as planning
  and the query, fully fetched, is timed as execution.
- Any other engine gets a plain ``EXPLAIN`` timed the same way.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.engine import Connection

logger = structlog.get_logger(__name__)


@dataclass
class PlanReport:
    """One explain run"""
    planning_ms: float
    execution_ms: float
    plan: List[str] = field(default_factory=list)


def collect_plan(connection: Connection, sql: str) -> PlanReport:
    """Run the engine's explain report for ``sql``"""
    dialect = connection.dialect.name
    if dialect == "postgresql":
        return _explain_analyze(connection, sql)
    if dialect == "sqlite":
        return _timed_explain(connection, sql, "EXPLAIN QUERY PLAN")
    return _timed_explain(connection, sql, "EXPLAIN")


def _explain_analyze(connection: Connection, sql: str) -> PlanReport:
    raw = connection.execute(text(f"EXPLAIN (ANALYZE, FORMAT JSON) {sql}")).scalar_one()
    # psycopg2 decodes the json column; other drivers hand back the text
    plan_json = json.loads(raw) if isinstance(raw, str) else raw
    top = plan_json[0]

    lines: List[str] = []
    _walk_plan(top.get("Plan", {}), 0, lines)

    return PlanReport(
        planning_ms=float(top.get("Planning Time", 0.0)),
        execution_ms=float(top.get("Execution Time", 0.0)),
        plan=lines,
    )


def _walk_plan(node: Dict[str, Any], depth: int, lines: List[str]) -> None:
    """Flatten a PostgreSQL JSON plan into indented one-line node summaries"""
    if not node:
        return
    label = node.get("Node Type", "?")
    index_name: Optional[str] = node.get("Index Name")
    relation: Optional[str] = node.get("Relation Name")
    if index_name:
        label += f" using {index_name}"
    if relation:
        label += f" on {relation}"
    lines.append("  " * depth + label)
    for child in node.get("Plans", []):
        _walk_plan(child, depth + 1, lines)


def _timed_explain(connection: Connection, sql: str, explain_keyword: str) -> PlanReport:
    start = time.perf_counter()
    plan_rows = connection.execute(text(f"{explain_keyword} {sql}")).fetchall()
    planning_ms = (time.perf_counter() - start) * 1000

    start = time.perf_counter()
    connection.execute(text(sql)).fetchall()
    execution_ms = (time.perf_counter() - start) * 1000

    # SQLite puts the readable step in the last column
    lines = [str(row[-1]) for row in plan_rows]
    logger.debug("Collected timed plan", planning_ms=planning_ms, execution_ms=execution_ms)

    return PlanReport(planning_ms=planning_ms, execution_ms=execution_ms, plan=lines)
