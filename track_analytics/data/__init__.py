"""
Data Generation Module
"""
from .generators import TrackGenerator, KNOWN_ARTISTS

__all__ = [
    "TrackGenerator",
    "KNOWN_ARTISTS",
]
