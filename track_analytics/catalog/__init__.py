"""
Query Catalog Module
"""
from .entries import CatalogEntry, Tier, CATALOG_ENTRIES, top_tracks_per_artist
from .catalog import QueryCatalog, CatalogListing, default_catalog
from .runner import RunOutcome, run, run_all

__all__ = [
    "CatalogEntry",
    "Tier",
    "CATALOG_ENTRIES",
    "top_tracks_per_artist",
    "QueryCatalog",
    "CatalogListing",
    "default_catalog",
    "RunOutcome",
    "run",
    "run_all",
]
