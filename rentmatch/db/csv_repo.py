"""CSV-backed listing store."""

from __future__ import annotations

import os
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..models.listing import ListingStatus, PropertyListing, SearchFilters
from ..utils.io import load_csv
from ..utils.logging import get_logger
from .mappers import to_listing

LOGGER = get_logger("db.csv_repo")

LISTINGS_CSV = os.getenv("LISTINGS_CSV", "listings.csv")


class CSVListingRepository:
    def __init__(self, records: Optional[Iterable[Dict]] = None, filename: str = LISTINGS_CSV) -> None:
        if records is None:
            frame = load_csv(filename)
            frame = frame.astype(object).where(pd.notnull(frame), None)
            records = frame.to_dict("records")
        listings = [to_listing(row) for row in records]
        self._listings: List[PropertyListing] = [item for item in listings if item is not None]
        self._by_id = {item.id: item for item in self._listings}
        LOGGER.info("Loaded %s listings", len(self._listings))

    def find_listings(
        self,
        filters: Optional[SearchFilters] = None,
        status: Optional[ListingStatus] = ListingStatus.ACTIVE,
        limit: Optional[int] = None,
    ) -> List[PropertyListing]:
        filters = filters or SearchFilters()
        city = (filters.city or "").strip().lower()
        results: List[PropertyListing] = []
        for listing in self._listings:
            if status is not None and listing.status != status:
                continue
            if filters.bedrooms is not None and listing.bedrooms != filters.bedrooms:
                continue
            if city and city not in listing.city.lower():
                continue
            # unpriced listings stay in; the caller prices them before applying the ceiling
            if (
                filters.max_rent is not None
                and listing.current_rent is not None
                and listing.current_rent > filters.max_rent
            ):
                continue
            results.append(listing)
            if limit is not None and len(results) >= limit:
                break
        return results

    def listings_in_area(self, city: str, state: str) -> List[PropertyListing]:
        city_key = (city or "").strip().lower()
        state_key = (state or "").strip().lower()
        return [
            listing
            for listing in self._listings
            if listing.city.lower() == city_key and (not state_key or listing.state.lower() == state_key)
        ]

    def get_listing(self, listing_id: str) -> Optional[PropertyListing]:
        return self._by_id.get(listing_id)

    def all_listings(self) -> List[PropertyListing]:
        return list(self._listings)
