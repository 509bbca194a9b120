"""
Unit Tests - CSV Loader
"""
import pytest
import polars as pl
from sqlalchemy import func, select

from track_analytics.database import track_table
from track_analytics.database.models import TRACK_COLUMNS
from track_analytics.exceptions import LoadError
from track_analytics.ingestion import (
    CsvFileConfig,
    CsvLoader,
    LoadStatus,
    conform_frame,
    normalize_header,
)


SOURCE_HEADERS = [
    "Artist", "Track", "Album", "Album_type", "Danceability", "Energy", "Loudness",
    "Speechiness", "Acousticness", "Instrumentalness", "Liveness", "Valence", "Tempo",
    "Duration_min", "Title", "Channel", "Views", "Likes", "Comments", "Licensed",
    "official_video", "Stream", "EnergyLiveness", "most_playedon",
]


def row_count(conn) -> int:
    return conn.execute(select(func.count()).select_from(track_table)).scalar_one()


def write_source_csv(path, df: pl.DataFrame) -> None:
    """Write a frame with the public dataset's header spelling"""
    df.rename(dict(zip(TRACK_COLUMNS, SOURCE_HEADERS))).write_csv(path)


class TestNormalizeHeader:
    """Tests for header normalization"""

    def test_source_headers_map_onto_columns(self):
        assert [normalize_header(h) for h in SOURCE_HEADERS] == list(TRACK_COLUMNS)

    def test_whitespace_and_spaces(self):
        assert normalize_header("  Album Type ") == "album_type"


class TestConformFrame:
    """Tests for conform_frame"""

    def test_casts_and_orders(self):
        raw = pl.DataFrame({name: ["1"] for name in reversed(SOURCE_HEADERS)})
        raw = raw.with_columns(
            pl.lit("True").alias("Licensed"),
            pl.lit("false").alias("official_video"),
            pl.lit("6220896.0").alias("Likes"),
        )

        df = conform_frame(raw)

        assert df.columns == list(TRACK_COLUMNS)
        assert df["licensed"].to_list() == [True]
        assert df["official_video"].to_list() == [False]
        assert df["likes"].dtype == pl.Int64
        assert df["likes"].to_list() == [6220896]
        assert df["views"].dtype == pl.Float64

    def test_unrecognised_boolean_is_null(self):
        raw = pl.DataFrame({name: ["1"] for name in SOURCE_HEADERS}).with_columns(
            pl.lit("maybe").alias("Licensed")
        )

        assert conform_frame(raw)["licensed"].to_list() == [None]

    def test_missing_columns(self):
        raw = pl.DataFrame({"Artist": ["x"], "Track": ["y"]})

        with pytest.raises(LoadError, match="Missing columns"):
            conform_frame(raw)

    def test_extra_columns_dropped(self, sample_tracks_csv_df):
        raw = sample_tracks_csv_df.with_columns(pl.lit(1).alias("Unnamed: 0"))

        assert conform_frame(raw).columns == list(TRACK_COLUMNS)


@pytest.fixture
def sample_tracks_csv_df(generated_tracks_df) -> pl.DataFrame:
    return generated_tracks_df.head(50).rename(dict(zip(TRACK_COLUMNS, SOURCE_HEADERS)))


class TestCsvLoader:
    """Tests for CsvLoader"""

    def test_load_source_file(self, conn, tmp_path, generated_tracks_df):
        """Test a file in the public dataset's layout loads completely"""
        path = tmp_path / "cleaned_dataset.csv"
        write_source_csv(path, generated_tracks_df.head(200))

        result = CsvLoader().load(CsvFileConfig(path), conn)

        assert result.status == LoadStatus.COMPLETED
        assert result.rows_read == 200
        assert result.rows_loaded == 200
        assert result.file_hash
        assert row_count(conn) == 200

    def test_round_trip_values(self, conn, tmp_path, generated_tracks_df):
        path = tmp_path / "tracks.csv"
        generated_tracks_df.head(20).write_csv(path)

        CsvLoader().load(CsvFileConfig(path), conn)

        loaded = conn.execute(
            select(track_table.c.artist, track_table.c.licensed, track_table.c.stream)
        ).fetchall()
        expected = generated_tracks_df.head(20).select("artist", "licensed", "stream").rows()
        assert [tuple(row) for row in loaded] == expected

    def test_validation_rejects_bad_enum(self, conn, tmp_path, generated_tracks_df):
        """Test failed checks are reported and nothing is inserted"""
        path = tmp_path / "bad.csv"
        generated_tracks_df.head(10).with_columns(pl.lit("ep").alias("album_type")).write_csv(path)

        result = CsvLoader().load(CsvFileConfig(path), conn)

        assert result.status == LoadStatus.FAILED
        assert "album_type" in result.error_message
        assert row_count(conn) == 0

    def test_validation_can_be_skipped(self, conn, tmp_path, generated_tracks_df):
        path = tmp_path / "bad.csv"
        generated_tracks_df.head(10).with_columns(pl.lit("ep").alias("album_type")).write_csv(path)

        result = CsvLoader().load(CsvFileConfig(path, validate=False), conn)

        assert result.status == LoadStatus.COMPLETED
        assert row_count(conn) == 10

    def test_chunked_insert(self, conn, tmp_path, generated_tracks_df):
        path = tmp_path / "tracks.csv"
        generated_tracks_df.head(25).write_csv(path)

        result = CsvLoader().load(CsvFileConfig(path, chunk_size=7), conn)

        assert result.rows_loaded == 25
        assert row_count(conn) == 25

    def test_missing_file(self, conn, tmp_path):
        with pytest.raises(LoadError) as exc_info:
            CsvLoader().load(CsvFileConfig(tmp_path / "absent.csv"), conn)

        assert exc_info.value.file_path.endswith("absent.csv")

    def test_missing_columns_in_file(self, conn, tmp_path):
        path = tmp_path / "partial.csv"
        pl.DataFrame({"Artist": ["x"]}).write_csv(path)

        with pytest.raises(LoadError) as exc_info:
            CsvLoader().load(CsvFileConfig(path), conn)

        assert exc_info.value.file_path == str(path)

    def test_config_from_settings(self, monkeypatch, tmp_path):
        from track_analytics.config import get_settings

        monkeypatch.setenv("LOADER_CHUNK_SIZE", "123")
        monkeypatch.setenv("LOADER_DELIMITER", ";")
        get_settings.cache_clear()

        config = CsvFileConfig.from_settings(tmp_path / "x.csv")

        assert config.chunk_size == 123
        assert config.delimiter == ";"
