"""
Query Catalog

Ordered, append-only registry of catalog entries. Listing order is insertion
order within a tier, tiers ordered easy -> medium -> advanced.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Union

from track_analytics.catalog.entries import CATALOG_ENTRIES, CatalogEntry, Tier
from track_analytics.exceptions import QueryError


class CatalogListing:
    """
    Lazy, restartable view over catalog entries.

    Nothing is filtered until iteration; every ``iter()`` starts over.
    """

    def __init__(self, entries: List[CatalogEntry], tier: Optional[Tier] = None):
        self._entries = entries
        self._tier = tier

    def __iter__(self) -> Iterator[CatalogEntry]:
        tiers = [self._tier] if self._tier else list(Tier)
        for tier in tiers:
            for entry in self._entries:
                if entry.tier == tier:
                    yield entry

    def names(self) -> List[str]:
        return [entry.name for entry in self]


class QueryCatalog:
    """
    Registry of named, parameterless analytical queries.

    Example:
        catalog = QueryCatalog()
        for entry in catalog.list(Tier.ADVANCED):
            print(entry.name)
    """

    def __init__(self, entries: Iterable[CatalogEntry] = CATALOG_ENTRIES):
        self._entries: List[CatalogEntry] = []
        self._by_name: Dict[str, CatalogEntry] = {}
        for entry in entries:
            self.add(entry)

    def add(self, entry: CatalogEntry) -> "QueryCatalog":
        """Append an entry; names are unique"""
        if entry.name in self._by_name:
            raise ValueError(f"Duplicate catalog entry: {entry.name}")
        self._entries.append(entry)
        self._by_name[entry.name] = entry
        return self

    def list(self, tier: Optional[Union[Tier, str]] = None) -> CatalogListing:
        """List entries, optionally restricted to one tier"""
        if tier is not None and not isinstance(tier, Tier):
            try:
                tier = Tier(tier)
            except ValueError as e:
                raise QueryError(
                    f"Unknown tier '{tier}', expected one of {[t.value for t in Tier]}"
                ) from e
        return CatalogListing(self._entries, tier)

    def get(self, name: str) -> CatalogEntry:
        """Look up an entry by name"""
        try:
            return self._by_name[name]
        except KeyError:
            raise QueryError(f"No catalog entry named '{name}'", entry_name=name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._entries)


default_catalog = QueryCatalog()
