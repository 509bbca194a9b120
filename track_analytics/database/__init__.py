"""
Database Module
"""
from .connection import create_db_engine, connect, check_database_health
from .models import track_table, TRACK_COLUMNS, AlbumType, Platform
from .schema import provision, table_columns, table_exists

__all__ = [
    "create_db_engine",
    "connect",
    "check_database_health",
    "track_table",
    "TRACK_COLUMNS",
    "AlbumType",
    "Platform",
    "provision",
    "table_columns",
    "table_exists",
]
