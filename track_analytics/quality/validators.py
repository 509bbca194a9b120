"""
Data Validation Module

Rule-based quality checks run on a track frame before it is inserted.

Every check is a polars expression that is True on a failing row. Checks are
registered fluently and evaluated together; each reports how many rows broke
it. Nulls never count as failures except in the not-null check, since every
table column is nullable.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import polars as pl
import structlog

from track_analytics.database.models import AlbumType, Platform

logger = structlog.get_logger(__name__)

# Spotify audio features reported on a 0..1 scale
UNIT_INTERVAL_FEATURES = [
    "danceability",
    "energy",
    "speechiness",
    "acousticness",
    "instrumentalness",
    "liveness",
    "valence",
]

COUNT_COLUMNS = ["views", "likes", "comments", "stream"]


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Blocks the load
    WARNING = "warning"  # Logged, load continues


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def total_checks(self) -> int:
        return len(self.checks)

    @property
    def passed_checks(self) -> int:
        return sum(1 for check in self.checks if check.passed)

    @property
    def failed_checks(self) -> int:
        """Failed checks that block the load"""
        return sum(1 for check in self.failures() if check.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for check in self.failures() if check.severity == ValidationSeverity.WARNING)

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if not self.checks:
            return 100.0
        return self.passed_checks / self.total_checks * 100

    def failures(self) -> List[ValidationCheck]:
        return [check for check in self.checks if not check.passed]


@dataclass(frozen=True)
class _Rule:
    name: str
    column: str
    severity: ValidationSeverity
    failing: pl.Expr
    describe: str
    details: Dict[str, Any]


class DataValidator:
    """
    Frame validator with a fluent check registry.

    Example:
        result = (
            DataValidator()
            .add_not_null_check("artist")
            .add_non_negative_check("views")
            .validate(df)
        )
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Warnings fail the suite too
        self._rules: List[_Rule] = []

    def _add(
        self,
        name: str,
        column: str,
        failing: pl.Expr,
        describe: str,
        severity: ValidationSeverity,
        **details: Any,
    ) -> "DataValidator":
        self._rules.append(_Rule(name, column, severity, failing, describe, details))
        return self

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Rows where the column is NULL fail"""
        return self._add(
            f"not_null_{column}", column, pl.col(column).is_null(), "null values", severity,
        )

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Non-null values outside [min_value, max_value] fail"""
        failing = pl.lit(False)
        if min_value is not None:
            failing = failing | (pl.col(column) < min_value)
        if max_value is not None:
            failing = failing | (pl.col(column) > max_value)
        return self._add(
            f"range_{column}", column, failing.fill_null(False),
            f"values outside [{min_value}, {max_value}]", severity,
            min=min_value, max=max_value,
        )

    def add_non_negative_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        return self.add_range_check(column, min_value=0, severity=severity)

    def add_enum_check(
        self,
        column: str,
        allowed_values: Sequence[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Non-null values outside the allowed set fail"""
        allowed = list(allowed_values)
        failing = pl.col(column).is_not_null() & ~pl.col(column).is_in(allowed)
        return self._add(
            f"enum_{column}", column, failing, f"values outside {allowed}", severity,
            allowed_values=allowed,
        )

    def add_custom_check(
        self,
        name: str,
        column: str,
        failing: pl.Expr,
        description: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """
        Add a check from an expression that is True on failing rows.

        Example:
            validator.add_custom_check(
                "likes_within_views", "likes",
                (pl.col("likes") > pl.col("views")).fill_null(False),
                "rows with more likes than views",
            )
        """
        return self._add(name, column, failing, description, severity)

    def _evaluate(self, rule: _Rule, df: pl.DataFrame) -> ValidationCheck:
        if rule.column not in df.columns:
            return ValidationCheck(
                name=rule.name,
                passed=False,
                severity=rule.severity,
                message=f"Column '{rule.column}' not found",
            )

        failed_rows = df.select(rule.failing.sum()).item() or 0
        return ValidationCheck(
            name=rule.name,
            passed=failed_rows == 0,
            severity=rule.severity,
            message=f"Column '{rule.column}' has {failed_rows} {rule.describe}",
            details={**rule.details, "failed_rows": failed_rows},
            failed_rows=failed_rows,
            total_rows=df.height,
        )

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """Run every registered check on the frame"""
        result = ValidationResult(status=ValidationStatus.PASSED)
        logger.info("Running validation checks", checks=len(self._rules), rows=df.height)

        result.checks = [self._evaluate(rule, df) for rule in self._rules]
        for check in result.failures():
            logger.warning(
                "Validation check failed",
                check=check.name,
                message=check.message,
                severity=check.severity.value,
            )

        if result.failed_checks or (result.warning_count and self.strict_mode):
            result.status = ValidationStatus.FAILED
        elif result.warning_count:
            result.status = ValidationStatus.PARTIAL
        result.completed_at = datetime.now(timezone.utc)
        return result


def create_tracks_validator() -> DataValidator:
    """Validator for rows bound for the track table"""
    validator = (
        DataValidator()
        .add_not_null_check("artist", severity=ValidationSeverity.WARNING)
        .add_not_null_check("track", severity=ValidationSeverity.WARNING)
        .add_enum_check("album_type", [t.value for t in AlbumType])
        .add_enum_check("most_played_on", [p.value for p in Platform])
    )
    for column in COUNT_COLUMNS:
        validator.add_non_negative_check(column)
    for column in UNIT_INTERVAL_FEATURES:
        validator.add_range_check(column, 0, 1, severity=ValidationSeverity.WARNING)
    return validator
