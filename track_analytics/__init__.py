"""
Track Analytics

Query practice and index experiments over a flat table of Spotify/YouTube
track metadata.
"""

__version__ = "1.0.0"
