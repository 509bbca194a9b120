"""
Exception hierarchy for Track Analytics.

Every error carries the identity (entry name, column, file) that caused it,
and the engine exception it wraps is chained as ``__cause__``.
"""
from typing import Any, Dict, Optional


class TrackAnalyticsError(Exception):
    """Base exception for all Track Analytics errors."""

    kind = "TrackAnalyticsError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class SchemaError(TrackAnalyticsError):
    """Raised when the engine rejects the table definition."""

    kind = "SchemaError"

    def __init__(self, message: str, table: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.table = table
        if table:
            self.details.update({"table": table})


class QueryError(TrackAnalyticsError):
    """Raised when a catalog entry cannot be found, executed, or shaped."""

    kind = "QueryError"

    def __init__(self, message: str, entry_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.entry_name = entry_name
        if entry_name:
            self.details.update({"entry": entry_name})


class IndexCreationError(TrackAnalyticsError):
    """Raised when index DDL fails (unknown column, duplicate name)."""

    kind = "IndexError"

    def __init__(
        self,
        message: str,
        column: Optional[str] = None,
        index_name: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.column = column
        self.index_name = index_name
        self.details.update({"column": column, "index": index_name})


class DatabaseConnectionError(TrackAnalyticsError, ConnectionError):
    """Raised when the engine is unreachable. Never retried here."""

    kind = "ConnectionError"


class LoadError(TrackAnalyticsError):
    """Raised when a bulk load file cannot be read or mapped onto the table."""

    kind = "LoadError"

    def __init__(self, message: str, file_path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.file_path = file_path
        if file_path:
            self.details.update({"file_path": file_path})
