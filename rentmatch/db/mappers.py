from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..models.listing import PropertyListing
from ..utils.coerce import to_datetime, to_float, to_int, to_list, to_str
from ..utils.logging import get_logger

LOGGER = get_logger("db.mappers")


def map_listing_row(r: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": to_str(r.get("id") or r.get("_id")),
        "title": to_str(r.get("title")) or None,
        "property_type": to_str(r.get("property_type") or r.get("propertyType") or "apartment").lower(),
        "bedrooms": to_int(r.get("bedrooms")) or 0,
        "bathrooms": to_float(r.get("bathrooms")) or 0.0,
        "square_footage": to_int(r.get("square_footage") or r.get("squareFootage")),
        "year_built": to_int(r.get("year_built") or r.get("yearBuilt")),
        "city": to_str(r.get("city")),
        "state": to_str(r.get("state")),
        "amenities": to_list(r.get("amenities")),
        "current_rent": to_float(r.get("current_rent") if r.get("current_rent") is not None else r.get("rent")),
        "status": to_str(r.get("status") or "active").lower(),
        "views": to_int(r.get("views")),
        "created_at": to_datetime(r.get("created_at") or r.get("createdAt")),
    }


def to_listing(r: Dict[str, Any]) -> Optional[PropertyListing]:
    """Build a listing from a raw row, skipping rows that fail validation."""

    try:
        return PropertyListing(**map_listing_row(r))
    except ValidationError as exc:
        LOGGER.warning("Skipping invalid listing row id=%s errors=%s", r.get("id"), exc.error_count())
        return None
