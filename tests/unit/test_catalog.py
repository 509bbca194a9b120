"""
Unit Tests - Query Catalog
"""
import pytest

from track_analytics.catalog import (
    CATALOG_ENTRIES,
    CatalogEntry,
    QueryCatalog,
    Tier,
    default_catalog,
    top_tracks_per_artist,
)
from track_analytics.exceptions import QueryError


def entry(name: str, tier: Tier) -> CatalogEntry:
    return CatalogEntry(name=name, tier=tier, intent=name, sql="SELECT 1 AS one", columns=("one",))


class TestQueryCatalog:
    """Tests for QueryCatalog"""

    def test_default_catalog_contents(self):
        """Test the fifteen practice queries plus the index experiment"""
        assert len(default_catalog) == 16
        assert len(default_catalog.list(Tier.EASY).names()) == 5
        assert len(default_catalog.list(Tier.MEDIUM).names()) == 5
        assert len(default_catalog.list(Tier.ADVANCED).names()) == 6
        assert "top_viewed_per_artist" in default_catalog
        assert "artist_youtube_top_streams" in default_catalog

    def test_names_unique(self):
        """Test no two entries share a name"""
        names = [e.name for e in CATALOG_ENTRIES]
        assert len(names) == len(set(names))

    def test_tiers_ordered_easy_to_advanced(self):
        """Test tiers come out easy, medium, advanced regardless of insertion"""
        catalog = QueryCatalog([
            entry("hard_one", Tier.ADVANCED),
            entry("easy_one", Tier.EASY),
            entry("mid_one", Tier.MEDIUM),
            entry("easy_two", Tier.EASY),
        ])

        assert catalog.list().names() == ["easy_one", "easy_two", "mid_one", "hard_one"]

    def test_tier_filter(self):
        """Test listing a single tier"""
        names = default_catalog.list(Tier.EASY).names()

        assert names == [
            "billion_stream_tracks",
            "albums_with_artists",
            "licensed_comment_total",
            "single_tracks",
            "tracks_per_artist",
        ]

    def test_tier_filter_accepts_string(self):
        """Test tier given as its value"""
        assert default_catalog.list("medium").names() == default_catalog.list(Tier.MEDIUM).names()

    def test_unknown_tier(self):
        """Test an unknown tier is a QueryError"""
        with pytest.raises(QueryError):
            default_catalog.list("expert")

    def test_listing_is_restartable(self):
        """Test iterating a listing twice yields the same entries"""
        listing = default_catalog.list(Tier.ADVANCED)

        first = [e.name for e in listing]
        second = [e.name for e in listing]

        assert first == second
        assert len(first) == 6

    def test_get(self):
        """Test lookup by name"""
        found = default_catalog.get("album_energy_range")

        assert found.tier == Tier.ADVANCED
        assert found.columns == ("album", "energy_diff")

    def test_get_unknown(self):
        """Test lookup of a missing name raises QueryError with the name"""
        with pytest.raises(QueryError) as exc_info:
            default_catalog.get("no_such_query")

        assert exc_info.value.entry_name == "no_such_query"

    def test_duplicate_rejected(self):
        """Test the catalog is keyed by name"""
        catalog = QueryCatalog([entry("one", Tier.EASY)])

        with pytest.raises(ValueError):
            catalog.add(entry("one", Tier.MEDIUM))

    def test_entries_immutable(self):
        """Test entries are frozen"""
        with pytest.raises(AttributeError):
            default_catalog.get("single_tracks").sql = "SELECT 2"


class TestTopTracksPerArtist:
    """Tests for the top-N entry builder"""

    def test_default_limit_is_catalog_entry(self):
        """Test limit 3 builds the catalog's own entry"""
        assert top_tracks_per_artist(3) == default_catalog.get("top_viewed_per_artist")

    def test_custom_limit(self):
        """Test other limits get their own name and SQL"""
        top_one = top_tracks_per_artist(1)

        assert top_one.name == "top_1_viewed_per_artist"
        assert "view_rank <= 1" in top_one.sql

    def test_invalid_limit(self):
        """Test non-positive limits are rejected"""
        with pytest.raises(ValueError):
            top_tracks_per_artist(0)
