"""Comparable active listings for an area and summary statistics over their rents."""

from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd

from ..models.listing import ListingStatus, PropertyListing
from ..models.pricing import Comparables, RentStatistics
from ..utils.logging import get_logger
from ..utils.normalize import normalise_key, round_half_up

LOGGER = get_logger("services.comparables")

DEFAULT_LIMIT = 20
BATHROOM_TOLERANCE = 0.5


def select_comparables(
    listings: Iterable[PropertyListing],
    *,
    bedrooms: Optional[int] = None,
    bathrooms: Optional[float] = None,
    property_type: Optional[str] = None,
    min_rent: Optional[float] = None,
    max_rent: Optional[float] = None,
    limit: int = DEFAULT_LIMIT,
) -> List[PropertyListing]:
    """Active, priced listings matching the filters, cheapest first."""

    type_key = normalise_key(property_type)
    matches = []
    for listing in listings:
        rent = listing.current_rent
        if listing.status != ListingStatus.ACTIVE or rent is None:
            continue
        if bedrooms is not None and listing.bedrooms != bedrooms:
            continue
        if bathrooms is not None and abs(listing.bathrooms - bathrooms) > BATHROOM_TOLERANCE:
            continue
        if type_key and normalise_key(listing.property_type.value) != type_key:
            continue
        if min_rent is not None and rent < min_rent:
            continue
        if max_rent is not None and rent > max_rent:
            continue
        matches.append(listing)
    matches.sort(key=lambda item: item.current_rent)
    return matches[: max(0, limit)]


def rent_statistics(listings: List[PropertyListing]) -> RentStatistics:
    if not listings:
        return RentStatistics()

    frame = pd.DataFrame(
        [{"rent": item.current_rent, "sqft": item.square_footage} for item in listings],
        columns=["rent", "sqft"],
    )
    rents = pd.to_numeric(frame["rent"], errors="coerce").dropna().sort_values().reset_index(drop=True)
    if rents.empty:
        return RentStatistics()
    sizes = pd.to_numeric(frame["sqft"], errors="coerce").dropna()
    sizes = sizes[sizes > 0]

    n = len(rents)
    average_rent = float(rents.mean())
    average_size = float(sizes.mean()) if not sizes.empty else 0.0
    return RentStatistics(
        count=n,
        average_rent=round_half_up(average_rent),
        # upper median; quartiles take the floor index
        median_rent=float(rents.iloc[n // 2]),
        min_rent=float(rents.iloc[0]),
        max_rent=float(rents.iloc[-1]),
        q1_rent=float(rents.iloc[int(n * 0.25)]),
        q3_rent=float(rents.iloc[int(n * 0.75)]),
        average_size=round_half_up(average_size),
        price_per_sqft=round(average_rent / average_size, 2) if average_size > 0 else 0.0,
    )


def find_comparables(
    repository,
    city: str,
    state: str,
    *,
    bedrooms: Optional[int] = None,
    bathrooms: Optional[float] = None,
    property_type: Optional[str] = None,
    min_rent: Optional[float] = None,
    max_rent: Optional[float] = None,
    limit: int = DEFAULT_LIMIT,
) -> Comparables:
    area = repository.listings_in_area(city, state)
    picked = select_comparables(
        area,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        property_type=property_type,
        min_rent=min_rent,
        max_rent=max_rent,
        limit=limit,
    )
    LOGGER.info(
        "comparables city=%s state=%s area=%s matched=%s",
        city,
        state,
        len(area),
        len(picked),
    )
    return Comparables(
        city=city,
        state=state,
        comparables=picked,
        statistics=rent_statistics(picked),
        count=len(picked),
    )


__all__ = ["find_comparables", "rent_statistics", "select_comparables"]
