"""Repository facade over the listing store."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..models.listing import ListingStatus, PropertyListing, SearchFilters
from ..utils.logging import get_logger
from .csv_repo import CSVListingRepository

LOGGER = get_logger("db.repo")


class Repo:
    """Read-only access to listings; the engine never writes through it."""

    def __init__(self, records: Optional[Iterable[Dict]] = None) -> None:
        self._store = CSVListingRepository(records=records)
        self.mode = "memory" if records is not None else "csv"
        LOGGER.info("Repository running in %s mode", self.mode)

    def find_listings(
        self,
        filters: Optional[SearchFilters] = None,
        status: Optional[ListingStatus] = ListingStatus.ACTIVE,
        limit: Optional[int] = None,
    ) -> List[PropertyListing]:
        return self._store.find_listings(filters, status=status, limit=limit)

    def listings_in_area(self, city: str, state: str) -> List[PropertyListing]:
        return self._store.listings_in_area(city, state)

    def get_listing(self, listing_id: str) -> PropertyListing:
        listing = self._store.get_listing(listing_id)
        if listing is None:
            raise ValueError(f"Listing not found: {listing_id}")
        return listing

    def all_listings(self) -> List[PropertyListing]:
        return self._store.all_listings()


_repo_singleton: Repo | None = None


def get_repository() -> Repo:
    global _repo_singleton
    if _repo_singleton is None:
        _repo_singleton = Repo()
    return _repo_singleton


def reset_repository() -> None:
    global _repo_singleton
    _repo_singleton = None
