"""
Database Models - Track Table

A single flat analytical table holding one row per track/video pairing:
Spotify audio features joined with the matching YouTube video metrics.

The table has no declared key and every column is nullable; duplicates are
allowed because an album repeats across its tracks and a track can appear
with more than one video.
"""

from enum import Enum
from typing import List, Tuple

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Float,
    MetaData,
    String,
    Table,
)


metadata = MetaData()

TRACK_TABLE_NAME = "spotify"


# =============================================================================
# ENUMERATIONS
# =============================================================================

class AlbumType(str, Enum):
    """Album type enumeration"""
    SINGLE = "single"
    ALBUM = "album"
    COMPILATION = "compilation"


class Platform(str, Enum):
    """Platform a track was most played on"""
    SPOTIFY = "Spotify"
    YOUTUBE = "Youtube"


# =============================================================================
# TRACK TABLE
# =============================================================================

def build_track_table(name: str = TRACK_TABLE_NAME, meta: MetaData = metadata) -> Table:
    """
    Build the track table definition.

    Column order and types are the contract with any existing loaded dataset
    and must not be reordered.
    """
    return Table(
        name,
        meta,
        # Identity
        Column("artist", String(255)),
        Column("track", String(255)),
        Column("album", String(255)),
        Column("album_type", String(50)),
        # Audio features
        Column("danceability", Float),
        Column("energy", Float),
        Column("loudness", Float),
        Column("speechiness", Float),
        Column("acousticness", Float),
        Column("instrumentalness", Float),
        Column("liveness", Float),
        Column("valence", Float),
        Column("tempo", Float),
        Column("duration_min", Float),
        # Video
        Column("title", String(255)),
        Column("channel", String(255)),
        # Platform metrics
        Column("views", Float),
        Column("likes", BigInteger),
        Column("comments", BigInteger),
        Column("licensed", Boolean),
        Column("official_video", Boolean),
        Column("stream", BigInteger),
        Column("energy_liveness", Float),
        Column("most_played_on", String(50)),
    )


track_table = build_track_table()

TRACK_COLUMNS: Tuple[str, ...] = tuple(column.name for column in track_table.columns)

NUMERIC_COLUMNS: List[str] = [
    column.name for column in track_table.columns
    if isinstance(column.type, (Float, BigInteger))
]

BOOLEAN_COLUMNS: List[str] = [
    column.name for column in track_table.columns
    if isinstance(column.type, Boolean)
]
