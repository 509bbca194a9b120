"""
Data Ingestion Module
"""
from .csv_loader import (
    CsvFileConfig,
    CsvLoader,
    LoadResult,
    LoadStatus,
    conform_frame,
    insert_frame,
    normalize_header,
)

__all__ = [
    "CsvFileConfig",
    "CsvLoader",
    "LoadResult",
    "LoadStatus",
    "conform_frame",
    "insert_frame",
    "normalize_header",
]
