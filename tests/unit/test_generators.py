"""
Unit Tests - Synthetic Track Generator
"""
import polars as pl
from polars.testing import assert_frame_equal

from track_analytics.data import KNOWN_ARTISTS, TrackGenerator
from track_analytics.database.models import TRACK_COLUMNS


class TestTrackGenerator:
    """Tests for TrackGenerator"""

    def test_columns_match_table(self, generated_tracks_df):
        assert generated_tracks_df.columns == list(TRACK_COLUMNS)
        assert generated_tracks_df.height == 2000

    def test_reproducible(self):
        """Test the same seed gives the same frame"""
        assert_frame_equal(TrackGenerator(seed=3).generate(100), TrackGenerator(seed=3).generate(100))

    def test_seed_changes_output(self):
        first = TrackGenerator(seed=1).generate(50)
        second = TrackGenerator(seed=2).generate(50)

        assert first["views"].to_list() != second["views"].to_list()

    def test_awkward_rows_present(self, generated_tracks_df):
        """Test zero liveness and null features appear"""
        zero_liveness = generated_tracks_df.filter(pl.col("liveness") == 0)

        assert zero_liveness.height > 0
        assert zero_liveness["energy_liveness"].null_count() == zero_liveness.height
        assert generated_tracks_df["danceability"].null_count() > 0

    def test_artists_repeat(self, generated_tracks_df):
        """Test artists own several tracks and the known artists appear"""
        counts = generated_tracks_df.group_by("artist").len()

        assert counts["len"].max() > 1
        assert set(KNOWN_ARTISTS) <= set(generated_tracks_df["artist"].to_list())

    def test_artist_count(self):
        df = TrackGenerator(seed=5, artist_count=8).generate(500)

        assert df["artist"].n_unique() <= 8

    def test_value_domains(self, generated_tracks_df):
        assert set(generated_tracks_df["album_type"].unique()) <= {"album", "single", "compilation"}
        assert set(generated_tracks_df["most_played_on"].unique()) <= {"Spotify", "Youtube"}
        assert (generated_tracks_df["views"] >= 0).all()
        assert generated_tracks_df["licensed"].dtype == pl.Boolean
