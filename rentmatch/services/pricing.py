"""Heuristic rent price calculator.

Combines the static market tables into a recommended monthly rent and a
+/- 15 % band. The calculator is a pure function of its inputs: invalid
numbers raise :class:`InvalidPropertyDataError`, unknown categories fall back
to table defaults.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional

from ..models.listing import PropertyListing
from ..models.pricing import PriceEstimate
from ..utils.logging import get_logger
from ..utils.normalize import round_half_up
from . import market_data

LOGGER = get_logger("services.pricing")


class InvalidPropertyDataError(ValueError):
    """Raised when a numeric property field cannot produce a real price."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"Invalid value for {field}: {value!r}")
        self.field = field
        self.value = value


def calculate_rent_price(
    *,
    property_type: Optional[str] = None,
    bedrooms: Any = None,
    bathrooms: Any = None,
    square_footage: Any = None,
    city: Optional[str] = "",
    state: Optional[str] = "",
    amenities: Optional[Iterable[str]] = (),
) -> PriceEstimate:
    beds = _checked_number("bedrooms", bedrooms, default=1)
    baths = _checked_number("bathrooms", bathrooms, default=1)
    area = _checked_number("square_footage", square_footage, default=0) or market_data.DEFAULT_AREA_SQFT

    type_key = getattr(property_type, "value", property_type) or "apartment"
    base_price = market_data.base_price_per_sqft(type_key) * area

    location = market_data.location_multiplier(city, state)
    bedroom = market_data.bedroom_multiplier(beds)
    bathroom = market_data.bathroom_multiplier(baths)
    base_price *= location * bedroom * bathroom

    amenities_value = 0.0
    seen = set()
    for tag in amenities or ():
        key = market_data.normalise_key(tag)
        if key in seen:
            continue
        seen.add(key)
        amenities_value += market_data.amenity_value(key)

    total_price = base_price + amenities_value
    variance = total_price * market_data.PRICE_VARIANCE
    # finite inputs can still overflow once the multipliers are applied
    if not math.isfinite(total_price + variance):
        raise InvalidPropertyDataError("square_footage", square_footage)

    LOGGER.debug(
        "rent_estimate type=%s city=%s state=%s total=%.2f",
        type_key,
        city,
        state,
        total_price,
    )
    return PriceEstimate(
        base_price=round_half_up(base_price),
        amenities_value=round_half_up(amenities_value),
        total_price=round_half_up(total_price),
        price_range_min=round_half_up(total_price - variance),
        price_range_max=round_half_up(total_price + variance),
        location_multiplier=round(location, 2),
        bedroom_multiplier=round(bedroom, 2),
        bathroom_multiplier=round(bathroom, 2),
    )


def estimate_for_listing(listing: PropertyListing) -> PriceEstimate:
    return calculate_rent_price(
        property_type=listing.property_type.value,
        bedrooms=listing.bedrooms,
        bathrooms=listing.bathrooms,
        square_footage=listing.square_footage,
        city=listing.city,
        state=listing.state,
        amenities=listing.amenities,
    )


def get_market_position(rent: float, average: Optional[float]) -> str:
    """Five-bucket landlord label of ``rent`` against an area average."""

    if not average or average <= 0:
        return "market-rate"
    ratio = rent / average
    if ratio > 1.15:
        return "premium"
    if ratio > 1.05:
        return "above-average"
    if ratio < 0.85:
        return "budget"
    if ratio < 0.95:
        return "below-average"
    return "market-rate"


def _checked_number(field: str, value: Any, default: float) -> float:
    if value is None:
        return float(default)
    if isinstance(value, bool):
        raise InvalidPropertyDataError(field, value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidPropertyDataError(field, value) from None
    if math.isnan(number) or math.isinf(number) or number < 0:
        raise InvalidPropertyDataError(field, value)
    return number


__all__ = [
    "InvalidPropertyDataError",
    "calculate_rent_price",
    "estimate_for_listing",
    "get_market_position",
]
