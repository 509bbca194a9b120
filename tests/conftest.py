"""
Test Suite Configuration
"""
from typing import Any, Dict, Generator, List

import pytest
import polars as pl
from sqlalchemy import insert, select
from sqlalchemy.engine import Connection, Engine

from track_analytics.config import get_settings
from track_analytics.data import TrackGenerator
from track_analytics.database import connect, create_db_engine, provision, track_table
from track_analytics.database.models import TRACK_COLUMNS
from track_analytics.ingestion import insert_frame


SAMPLE_TRACKS: List[Dict[str, Any]] = [
    dict(artist="Gorillaz", track="Feel Good Inc.", album="Demon Days", album_type="album",
         danceability=0.82, energy=0.7, liveness=0.6, views=1.0e9, likes=6_000_000, comments=170_000,
         licensed=True, official_video=True, stream=1_040_000_000, most_played_on="Youtube"),
    dict(artist="Gorillaz", track="DARE", album="Demon Days", album_type="album",
         danceability=0.76, energy=0.9, liveness=0.3, views=3.0e8, likes=2_000_000, comments=50_000,
         licensed=True, official_video=True, stream=400_000_000, most_played_on="Spotify"),
    dict(artist="Gorillaz", track="On Melancholy Hill", album="Plastic Beach", album_type="album",
         danceability=0.69, energy=0.4, liveness=0.0, views=2.0e8, likes=1_500_000, comments=30_000,
         licensed=False, official_video=False, stream=600_000_000, most_played_on="Spotify"),
    dict(artist="Gorillaz", track="Clint Eastwood", album="Gorillaz", album_type="album",
         danceability=0.66, energy=0.7, liveness=0.1, views=6.0e8, likes=4_000_000, comments=90_000,
         licensed=True, official_video=True, stream=500_000_000, most_played_on="Youtube"),
    dict(artist="Dua Lipa", track="Levitating", album="Future Nostalgia", album_type="album",
         danceability=0.70, energy=0.8, liveness=0.07, views=1.2e9, likes=8_000_000, comments=300_000,
         licensed=True, official_video=True, stream=1_600_000_000, most_played_on="Spotify"),
    dict(artist="Dua Lipa", track="Levitating", album="Future Nostalgia", album_type="album",
         danceability=0.70, energy=0.8, liveness=0.07, views=5.0e7, likes=200_000, comments=5_000,
         licensed=False, official_video=False, stream=100_000_000, most_played_on="Youtube"),
    dict(artist="Dua Lipa", track="Houdini", album="Houdini", album_type="single",
         danceability=None, energy=0.6, liveness=None, views=9.0e7, likes=1_000_000, comments=20_000,
         licensed=True, official_video=False, stream=300_000_000, most_played_on="Spotify"),
    dict(artist="Daft Punk", track="One More Time", album="Discovery", album_type="album",
         danceability=0.61, energy=0.7, liveness=0.33, views=4.0e8, likes=3_000_000, comments=80_000,
         licensed=True, official_video=True, stream=900_000_000, most_played_on="Youtube"),
]


def make_track(**values) -> Dict[str, Any]:
    """A full track row: every column NULL unless given"""
    row = {column: None for column in TRACK_COLUMNS}
    row.update(values)
    return row


def insert_tracks(conn: Connection, rows: List[Dict[str, Any]]) -> None:
    conn.execute(insert(track_table), [make_track(**row) for row in rows])
    conn.commit()


def fetch_table(conn: Connection) -> pl.DataFrame:
    """Whole table as a frame, for computing expected values"""
    result = conn.execute(select(track_table))
    rows = result.fetchall()
    return pl.DataFrame(
        {name: [row[i] for row in rows] for i, name in enumerate(result.keys())},
        strict=False,
    )


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Testing environment with fresh settings per test"""
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Isolated in-memory database"""
    engine = create_db_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def conn(engine) -> Generator[Connection, None, None]:
    """Connection to a freshly provisioned, empty track table"""
    with connect(engine) as connection:
        provision(connection)
        yield connection


@pytest.fixture
def sample_conn(conn) -> Connection:
    """Provisioned table holding SAMPLE_TRACKS"""
    insert_tracks(conn, SAMPLE_TRACKS)
    return conn


@pytest.fixture(scope="session")
def generated_tracks_df() -> pl.DataFrame:
    """Two thousand reproducible generated tracks"""
    return TrackGenerator(seed=7).generate(2000)


@pytest.fixture
def generated_conn(conn, generated_tracks_df) -> Connection:
    """Provisioned table holding the generated tracks"""
    insert_frame(generated_tracks_df, conn)
    return conn
