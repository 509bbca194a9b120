"""
Optimization Harness Module
"""
from .explain import PlanReport, collect_plan
from .harness import (
    Measurement,
    OptimizationReport,
    apply_index,
    compare,
    index_name_for,
    measure,
    single_column_indexes,
    within_tolerance,
)

__all__ = [
    "PlanReport",
    "collect_plan",
    "Measurement",
    "OptimizationReport",
    "apply_index",
    "compare",
    "index_name_for",
    "measure",
    "single_column_indexes",
    "within_tolerance",
]
