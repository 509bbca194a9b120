"""
CSV Bulk Loader

Loads a delimited track dataset into the provisioned table.

Headers are normalized onto the table's column names (the public dataset
ships ``Artist``, ``Album_type``, ``EnergyLiveness``, ``most_playedon`` ...),
values are cast to the column types, the frame is checked by the track
validator, and rows are inserted in chunks over the caller's connection.
"""

import hashlib
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl
import structlog
from pydantic import BaseModel
from sqlalchemy import BigInteger, Boolean, Float, Table, insert
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from track_analytics.config import get_settings
from track_analytics.database.models import TRACK_COLUMNS, track_table
from track_analytics.exceptions import LoadError
from track_analytics.quality.validators import ValidationStatus, create_tracks_validator

logger = structlog.get_logger(__name__)

# Lower-cased source headers that do not lower-case onto a column name
HEADER_ALIASES: Dict[str, str] = {
    "energyliveness": "energy_liveness",
    "most_playedon": "most_played_on",
    "duration": "duration_min",
}

TRUE_MARKERS = ["true", "t", "yes", "y", "1"]
FALSE_MARKERS = ["false", "f", "no", "n", "0"]


class LoadStatus(str, Enum):
    """Bulk load status"""
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class CsvFileConfig:
    """Configuration for one CSV load"""
    file_path: Union[str, Path]
    delimiter: str = ","
    encoding: str = "utf8"
    null_values: List[str] = field(default_factory=lambda: ["", "NULL", "null", "None", "NA", "N/A"])
    chunk_size: int = 5000
    validate: bool = True

    @classmethod
    def from_settings(cls, file_path: Union[str, Path]) -> "CsvFileConfig":
        loader = get_settings().loader
        return cls(
            file_path=file_path,
            delimiter=loader.delimiter,
            encoding=loader.encoding,
            null_values=list(loader.null_values),
            chunk_size=loader.chunk_size,
            validate=loader.validate_before_insert,
        )


class LoadResult(BaseModel):
    """Result of a bulk load"""
    file_path: str
    target_table: str
    status: LoadStatus
    rows_read: int = 0
    rows_loaded: int = 0
    error_message: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    file_hash: Optional[str] = None


def normalize_header(name: str) -> str:
    """Map a source header onto a table column name"""
    key = name.strip().lower().replace(" ", "_")
    return HEADER_ALIASES.get(key, key)


def _boolean_expr(column: str, dtype: pl.DataType) -> pl.Expr:
    if dtype == pl.Boolean:
        return pl.col(column)
    if dtype.is_numeric():
        return pl.col(column) != 0
    text_value = pl.col(column).cast(pl.Utf8).str.strip_chars().str.to_lowercase()
    return (
        pl.when(text_value.is_in(TRUE_MARKERS)).then(pl.lit(True))
        .when(text_value.is_in(FALSE_MARKERS)).then(pl.lit(False))
        .otherwise(pl.lit(None, dtype=pl.Boolean))
    )


def conform_frame(df: pl.DataFrame, table: Table = track_table) -> pl.DataFrame:
    """
    Rename, cast and order a raw frame to the table's columns.

    Raises:
        LoadError: If a table column has no source column
    """
    df = df.rename({name: normalize_header(name) for name in df.columns})

    missing = [name for name in TRACK_COLUMNS if name not in df.columns]
    if missing:
        raise LoadError(f"Missing columns: {missing}")

    extra = [name for name in df.columns if name not in TRACK_COLUMNS]
    if extra:
        logger.warning("Ignoring columns not in table", columns=extra)

    expressions = []
    for column in table.columns:
        dtype = df.schema[column.name]
        if isinstance(column.type, Boolean):
            expr = _boolean_expr(column.name, dtype)
        elif isinstance(column.type, BigInteger):
            expr = pl.col(column.name).cast(pl.Float64, strict=False).cast(pl.Int64, strict=False)
        elif isinstance(column.type, Float):
            expr = pl.col(column.name).cast(pl.Float64, strict=False)
        else:
            expr = pl.col(column.name).cast(pl.Utf8, strict=False)
        expressions.append(expr.alias(column.name))

    return df.select(expressions)


def insert_frame(
    df: pl.DataFrame,
    connection: Connection,
    table: Table = track_table,
    chunk_size: int = 5000,
) -> int:
    """
    Insert a conformed frame in chunks and commit.

    Raises:
        LoadError: If the engine rejects the insert
    """
    total_inserted = 0
    try:
        for offset in range(0, df.height, chunk_size):
            chunk = df.slice(offset, chunk_size).to_dicts()
            if chunk:
                connection.execute(insert(table), chunk)
                total_inserted += len(chunk)
        connection.commit()
    except SQLAlchemyError as e:
        connection.rollback()
        raise LoadError(f"Insert into '{table.name}' failed: {e}") from e

    logger.info("Rows inserted", table=table.name, rows=total_inserted)
    return total_inserted


class CsvLoader:
    """
    Bulk loader for the track table.

    Example:
        loader = CsvLoader()
        with connect(engine) as conn:
            result = loader.load(CsvFileConfig("data/spotify.csv"), conn)
    """

    def __init__(self, table: Table = track_table):
        self.table = table

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for deduplication"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _read_csv(self, config: CsvFileConfig) -> pl.DataFrame:
        """Read CSV file with Polars"""
        return pl.read_csv(
            config.file_path,
            separator=config.delimiter,
            encoding=config.encoding,
            null_values=config.null_values,
            infer_schema_length=10000,
        )

    def load(self, config: CsvFileConfig, connection: Connection) -> LoadResult:
        """
        Load a CSV file into the table.

        Args:
            config: File configuration
            connection: Live connection to a provisioned table

        Returns:
            LoadResult: FAILED when validation rejects the data, else COMPLETED

        Raises:
            LoadError: If the file is missing, unreadable or cannot be inserted
        """
        file_path = Path(config.file_path)
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()

        logger.info("Starting bulk load", file=str(file_path), target_table=self.table.name)

        if not file_path.exists():
            raise LoadError(f"File not found: {file_path}", file_path=str(file_path))

        try:
            raw = self._read_csv(config)
        except (pl.exceptions.PolarsError, OSError) as e:
            raise LoadError(f"Could not read {file_path}: {e}", file_path=str(file_path)) from e

        try:
            df = conform_frame(raw, self.table)
        except LoadError as e:
            raise LoadError(f"{file_path}: {e.message}", file_path=str(file_path)) from e

        result = LoadResult(
            file_path=str(file_path),
            target_table=self.table.name,
            status=LoadStatus.COMPLETED,
            rows_read=df.height,
            started_at=started_at,
            file_hash=self._compute_file_hash(file_path),
        )

        if config.validate:
            validation = create_tracks_validator().validate(df)
            if validation.status == ValidationStatus.FAILED:
                result.status = LoadStatus.FAILED
                result.error_message = "; ".join(check.message for check in validation.failures())
                result.load_duration_seconds = time.perf_counter() - start
                logger.error("Bulk load rejected by validation", error=result.error_message)
                return result

        result.rows_loaded = insert_frame(df, connection, self.table, config.chunk_size)
        result.load_duration_seconds = time.perf_counter() - start

        logger.info(
            "Bulk load completed",
            rows_loaded=result.rows_loaded,
            duration_seconds=result.load_duration_seconds,
        )
        return result
