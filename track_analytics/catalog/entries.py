"""
Query Catalog Entries

The practice queries as declarative records. Each entry is plain SQL against
the ``spotify`` table plus the shape its result must have; execution lives in
``runner`` and never branches on entry names.

Tie-breaking: window and ORDER BY clauses add ``track`` as a secondary key.
Rows equal on both the ranking column and the track name are still ordered by
the engine's default, which differs between engines. Callers must not rely on
that residual order.

Division by zero: ratio queries divide by ``NULLIF(liveness, 0)``, so rows
with a zero or missing liveness drop out of the result instead of faulting.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Tier(str, Enum):
    """Difficulty tier"""
    EASY = "easy"
    MEDIUM = "medium"
    ADVANCED = "advanced"

    @property
    def rank(self) -> int:
        return list(Tier).index(self)


@dataclass(frozen=True)
class CatalogEntry:
    """One named analytical query with its expected result shape"""
    name: str
    tier: Tier
    intent: str
    sql: str
    columns: Tuple[str, ...]
    ordered: bool = True


# =============================================================================
# EASY
# =============================================================================

BILLION_STREAM_TRACKS = CatalogEntry(
    name="billion_stream_tracks",
    tier=Tier.EASY,
    intent="Tracks with more than 1 billion streams",
    sql="""
        SELECT artist, track, stream
        FROM spotify
        WHERE stream > 1000000000
        ORDER BY stream DESC, track
    """,
    columns=("artist", "track", "stream"),
)

ALBUMS_WITH_ARTISTS = CatalogEntry(
    name="albums_with_artists",
    tier=Tier.EASY,
    intent="Every distinct album with its artist",
    sql="""
        SELECT DISTINCT album, artist
        FROM spotify
        ORDER BY album, artist
    """,
    columns=("album", "artist"),
)

LICENSED_COMMENT_TOTAL = CatalogEntry(
    name="licensed_comment_total",
    tier=Tier.EASY,
    intent="Total number of comments on licensed tracks",
    sql="""
        SELECT SUM(comments) AS total_comments
        FROM spotify
        WHERE licensed = TRUE
    """,
    columns=("total_comments",),
    ordered=False,
)

SINGLE_TRACKS = CatalogEntry(
    name="single_tracks",
    tier=Tier.EASY,
    intent="Tracks released as singles",
    sql="""
        SELECT artist, track, album
        FROM spotify
        WHERE album_type = 'single'
        ORDER BY artist, track
    """,
    columns=("artist", "track", "album"),
)

TRACKS_PER_ARTIST = CatalogEntry(
    name="tracks_per_artist",
    tier=Tier.EASY,
    intent="Number of tracks by each artist",
    sql="""
        SELECT artist, COUNT(*) AS total_tracks
        FROM spotify
        GROUP BY artist
        ORDER BY total_tracks DESC, artist
    """,
    columns=("artist", "total_tracks"),
)


# =============================================================================
# MEDIUM
# =============================================================================

ALBUM_AVG_DANCEABILITY = CatalogEntry(
    name="album_avg_danceability",
    tier=Tier.MEDIUM,
    intent="Average danceability of the tracks on each album",
    sql="""
        SELECT album, AVG(danceability) AS avg_danceability
        FROM spotify
        GROUP BY album
        ORDER BY avg_danceability DESC, album
    """,
    columns=("album", "avg_danceability"),
)

TOP_ENERGY_TRACKS = CatalogEntry(
    name="top_energy_tracks",
    tier=Tier.MEDIUM,
    intent="Five tracks with the highest energy",
    sql="""
        SELECT track, MAX(energy) AS energy
        FROM spotify
        WHERE energy IS NOT NULL
        GROUP BY track
        ORDER BY energy DESC, track
        LIMIT 5
    """,
    columns=("track", "energy"),
)

OFFICIAL_VIDEO_ENGAGEMENT = CatalogEntry(
    name="official_video_engagement",
    tier=Tier.MEDIUM,
    intent="Views and likes of tracks with an official video",
    sql="""
        SELECT track, SUM(views) AS total_views, SUM(likes) AS total_likes
        FROM spotify
        WHERE official_video = TRUE
        GROUP BY track
        ORDER BY total_views DESC, track
    """,
    columns=("track", "total_views", "total_likes"),
)

ALBUM_TOTAL_VIEWS = CatalogEntry(
    name="album_total_views",
    tier=Tier.MEDIUM,
    intent="Total views of all tracks on each album",
    sql="""
        SELECT album, SUM(views) AS total_views
        FROM spotify
        GROUP BY album
        ORDER BY total_views DESC, album
    """,
    columns=("album", "total_views"),
)

SPOTIFY_OVER_YOUTUBE = CatalogEntry(
    name="spotify_over_youtube",
    tier=Tier.MEDIUM,
    intent="Tracks streamed more on Spotify than on YouTube",
    sql="""
        SELECT track, streamed_on_youtube, streamed_on_spotify
        FROM (
            SELECT
                track,
                COALESCE(SUM(CASE WHEN most_played_on = 'Youtube' THEN stream END), 0) AS streamed_on_youtube,
                COALESCE(SUM(CASE WHEN most_played_on = 'Spotify' THEN stream END), 0) AS streamed_on_spotify
            FROM spotify
            GROUP BY track
        ) AS platform_streams
        WHERE streamed_on_spotify > streamed_on_youtube
          AND streamed_on_youtube <> 0
        ORDER BY track
    """,
    columns=("track", "streamed_on_youtube", "streamed_on_spotify"),
)


# =============================================================================
# ADVANCED
# =============================================================================

TOP_VIEWED_PER_ARTIST_SQL = """
    WITH ranked_tracks AS (
        SELECT
            artist,
            track,
            views,
            ROW_NUMBER() OVER (PARTITION BY artist ORDER BY views DESC, track) AS view_rank
        FROM spotify
        WHERE views IS NOT NULL
    )
    SELECT artist, track, views, view_rank
    FROM ranked_tracks
    WHERE view_rank <= {limit}
    ORDER BY artist, view_rank
"""


def top_tracks_per_artist(limit: int = 3) -> CatalogEntry:
    """Build a top-N most-viewed tracks per artist entry."""
    if limit < 1:
        raise ValueError(f"limit must be positive, got {limit}")
    name = "top_viewed_per_artist" if limit == 3 else f"top_{limit}_viewed_per_artist"
    return CatalogEntry(
        name=name,
        tier=Tier.ADVANCED,
        intent=f"Top {limit} most-viewed tracks for each artist",
        sql=TOP_VIEWED_PER_ARTIST_SQL.format(limit=int(limit)),
        columns=("artist", "track", "views", "view_rank"),
    )


ABOVE_AVERAGE_LIVENESS = CatalogEntry(
    name="above_average_liveness",
    tier=Tier.ADVANCED,
    intent="Tracks whose liveness is above the average liveness",
    sql="""
        WITH liveness_stats AS (
            SELECT AVG(liveness) AS avg_liveness
            FROM spotify
        )
        SELECT s.artist, s.track, s.liveness
        FROM spotify AS s
        CROSS JOIN liveness_stats AS l
        WHERE s.liveness > l.avg_liveness
        ORDER BY s.liveness DESC, s.track
    """,
    columns=("artist", "track", "liveness"),
)

ALBUM_ENERGY_RANGE = CatalogEntry(
    name="album_energy_range",
    tier=Tier.ADVANCED,
    intent="Difference between the highest and lowest energy on each album",
    sql="""
        WITH album_energy AS (
            SELECT album, MAX(energy) AS highest_energy, MIN(energy) AS lowest_energy
            FROM spotify
            GROUP BY album
        )
        SELECT album, highest_energy - lowest_energy AS energy_diff
        FROM album_energy
        ORDER BY energy_diff DESC, album
    """,
    columns=("album", "energy_diff"),
)

HIGH_ENERGY_LIVENESS_RATIO = CatalogEntry(
    name="high_energy_liveness_ratio",
    tier=Tier.ADVANCED,
    intent="Tracks whose energy-to-liveness ratio is greater than 1.2",
    sql="""
        SELECT
            artist,
            track,
            energy,
            liveness,
            energy / NULLIF(liveness, 0) AS energy_to_liveness
        FROM spotify
        WHERE energy / NULLIF(liveness, 0) > 1.2
        ORDER BY energy_to_liveness DESC, track
    """,
    columns=("artist", "track", "energy", "liveness", "energy_to_liveness"),
)

CUMULATIVE_LIKES_BY_VIEWS = CatalogEntry(
    name="cumulative_likes_by_views",
    tier=Tier.ADVANCED,
    intent="Running total of likes for tracks ordered by views",
    sql="""
        SELECT
            track,
            views,
            likes,
            SUM(likes) OVER (
                ORDER BY views, track
                ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW
            ) AS cumulative_likes
        FROM spotify
        ORDER BY views, track, cumulative_likes
    """,
    columns=("track", "views", "likes", "cumulative_likes"),
)

ARTIST_YOUTUBE_TOP_STREAMS = CatalogEntry(
    name="artist_youtube_top_streams",
    tier=Tier.ADVANCED,
    intent="Most-streamed YouTube-dominant tracks of one artist (index experiment)",
    sql="""
        SELECT artist, track, views
        FROM spotify
        WHERE artist = 'Gorillaz'
          AND most_played_on = 'Youtube'
        ORDER BY stream DESC, track
        LIMIT 25
    """,
    columns=("artist", "track", "views"),
)


CATALOG_ENTRIES: Tuple[CatalogEntry, ...] = (
    BILLION_STREAM_TRACKS,
    ALBUMS_WITH_ARTISTS,
    LICENSED_COMMENT_TOTAL,
    SINGLE_TRACKS,
    TRACKS_PER_ARTIST,
    ALBUM_AVG_DANCEABILITY,
    TOP_ENERGY_TRACKS,
    OFFICIAL_VIDEO_ENGAGEMENT,
    ALBUM_TOTAL_VIEWS,
    SPOTIFY_OVER_YOUTUBE,
    top_tracks_per_artist(3),
    ABOVE_AVERAGE_LIVENESS,
    ALBUM_ENERGY_RANGE,
    HIGH_ENERGY_LIVENESS_RATIO,
    CUMULATIVE_LIKES_BY_VIEWS,
    ARTIST_YOUTUBE_TOP_STREAMS,
)
