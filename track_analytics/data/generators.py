"""
Synthetic Track Generator

Generates reproducible track rows shaped like the public Spotify/YouTube
dataset, for tests and for index experiments that need more rows than a
hand-written fixture.

The data deliberately includes the awkward cases the catalog must tolerate:
repeated artists and albums, ``liveness = 0`` rows and scattered NULLs.
"""

from typing import List, Optional

import numpy as np
import polars as pl
from faker import Faker

from track_analytics.database.models import TRACK_COLUMNS, AlbumType, Platform


# =============================================================================
# CONFIGURATION
# =============================================================================

KNOWN_ARTISTS = ["Gorillaz", "Daft Punk", "Coldplay", "Red Hot Chili Peppers", "Dua Lipa"]

ALBUM_TYPE_WEIGHTS = [
    (AlbumType.ALBUM.value, 0.72),
    (AlbumType.SINGLE.value, 0.24),
    (AlbumType.COMPILATION.value, 0.04),
]

ZERO_LIVENESS_RATE = 0.02
NULL_FEATURE_RATE = 0.01


class TrackGenerator:
    """
    Generate track rows matching the table's column set.

    Example:
        df = TrackGenerator(seed=42).generate(10_000)
    """

    def __init__(self, seed: int = 42, artist_count: Optional[int] = None):
        self.seed = seed
        self.artist_count = artist_count
        self.rng = np.random.default_rng(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def _artists(self, n: int) -> List[str]:
        count = self.artist_count or max(len(KNOWN_ARTISTS), n // 40)
        generated = {self.fake.unique.name() for _ in range(max(0, count - len(KNOWN_ARTISTS)))}
        return KNOWN_ARTISTS + sorted(generated)

    def _titles(self, n: int, words_per_title: int) -> List[str]:
        vocabulary = np.array([word.title() for word in self.fake.words(nb=400, unique=False)])
        picks = self.rng.choice(vocabulary, size=(n, words_per_title))
        return [" ".join(row) for row in picks]

    def _with_nulls(self, values: np.ndarray, rate: float) -> List[Optional[float]]:
        mask = self.rng.random(len(values)) < rate
        return [None if is_null else float(v) for v, is_null in zip(values, mask)]

    def generate(self, n: int = 1000) -> pl.DataFrame:
        """Generate n track rows"""
        artists = np.array(self._artists(n))
        artist_idx = self.rng.integers(0, len(artists), n)
        artist_col = artists[artist_idx]

        # Albums belong to artists: each artist gets a handful of album slots
        album_slot = self.rng.integers(0, 4, n)
        album_names = self._titles(len(artists) * 4, 2)
        album_col = [album_names[a * 4 + s] for a, s in zip(artist_idx, album_slot)]

        album_types = [t for t, _ in ALBUM_TYPE_WEIGHTS]
        album_probs = [p for _, p in ALBUM_TYPE_WEIGHTS]

        energy = self.rng.uniform(0.0, 1.0, n)
        liveness = self.rng.uniform(0.02, 0.95, n)
        liveness[self.rng.random(n) < ZERO_LIVENESS_RATE] = 0.0

        views = np.round(self.rng.lognormal(15, 2.5, n))
        likes = (views * self.rng.uniform(0.001, 0.02, n)).astype(np.int64)
        comments = (likes * self.rng.uniform(0.01, 0.1, n)).astype(np.int64)
        stream = np.round(self.rng.lognormal(17, 2.2, n)).astype(np.int64)

        with np.errstate(divide="ignore", invalid="ignore"):
            ratio = np.where(liveness > 0, energy / np.where(liveness > 0, liveness, 1.0), np.nan)
        energy_liveness = [None if np.isnan(r) else float(r) for r in ratio]

        most_played_on = np.where(
            stream > views, Platform.SPOTIFY.value, Platform.YOUTUBE.value
        )

        df = pl.DataFrame({
            "artist": artist_col.tolist(),
            "track": self._titles(n, 3),
            "album": album_col,
            "album_type": self.rng.choice(album_types, n, p=album_probs).tolist(),
            "danceability": self._with_nulls(self.rng.uniform(0.1, 0.98, n), NULL_FEATURE_RATE),
            "energy": energy.tolist(),
            "loudness": self.rng.uniform(-30.0, 0.0, n).tolist(),
            "speechiness": self.rng.uniform(0.02, 0.6, n).tolist(),
            "acousticness": self.rng.uniform(0.0, 1.0, n).tolist(),
            "instrumentalness": self.rng.uniform(0.0, 1.0, n).tolist(),
            "liveness": liveness.tolist(),
            "valence": self.rng.uniform(0.0, 1.0, n).tolist(),
            "tempo": self.rng.uniform(60.0, 200.0, n).tolist(),
            "duration_min": self.rng.uniform(1.5, 7.0, n).tolist(),
            "title": self._titles(n, 4),
            "channel": [f"{a}VEVO" if i % 3 else a for i, a in enumerate(artist_col.tolist())],
            "views": views.tolist(),
            "likes": likes.tolist(),
            "comments": comments.tolist(),
            "licensed": (self.rng.random(n) < 0.7).tolist(),
            "official_video": (self.rng.random(n) < 0.75).tolist(),
            "stream": stream.tolist(),
            "energy_liveness": energy_liveness,
            "most_played_on": most_played_on.tolist(),
        }, strict=False)

        return df.select(list(TRACK_COLUMNS))
