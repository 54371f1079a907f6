"""Static market lookup tables used by the rent calculator and scoring.

All money values are monthly INR; areas are square feet.
"""

from __future__ import annotations

from typing import Dict, Optional

from ..utils.normalize import normalise_key

BASE_PRICE_PER_SQFT: Dict[str, float] = {
    "apartment": 4000,
    "house": 3500,
    "villa": 5000,
    "penthouse": 6000,
    "studio": 4500,
}
DEFAULT_BASE_PRICE_PER_SQFT = 4000.0

CITY_MULTIPLIERS: Dict[str, float] = {
    "mumbai": 1.8,
    "delhi": 1.6,
    "bangalore": 1.7,
    "hyderabad": 1.4,
    "chennai": 1.3,
    "kolkata": 1.2,
    "pune": 1.3,
    "ahmedabad": 1.1,
    "vishakapatnam": 1.0,
}

STATE_MULTIPLIERS: Dict[str, float] = {
    "maharashtra": 1.3,
    "delhi": 1.6,
    "karnataka": 1.2,
    "telangana": 1.1,
    "tamil nadu": 1.1,
    "west bengal": 1.0,
    "gujarat": 1.0,
    "andhra pradesh": 0.9,
}

DEFAULT_LOCATION_MULTIPLIER = 1.0
LOCATION_MULTIPLIER_FLOOR = 0.8

AMENITY_VALUES: Dict[str, float] = {
    "parking": 1000,
    "gym": 1500,
    "pool": 2000,
    "air conditioning": 2000,
    "security": 1000,
    "power backup": 1000,
    "lift": 800,
    "water supply": 500,
    "maintenance": 1000,
    "playground": 500,
    "garden": 500,
    "clubhouse": 1000,
    "internet": 800,
    "housekeeping": 1000,
}

BEDROOM_MULTIPLIERS: Dict[int, float] = {1: 1.0, 2: 1.3, 3: 1.6, 4: 1.9, 5: 2.2}
BATHROOM_MULTIPLIERS: Dict[int, float] = {1: 1.0, 2: 1.2, 3: 1.4, 4: 1.6}
DEFAULT_ROOM_MULTIPLIER = 1.0

DEFAULT_AREA_SQFT = 1000
PRICE_VARIANCE = 0.15


def base_price_per_sqft(property_type: Optional[str]) -> float:
    return float(BASE_PRICE_PER_SQFT.get(normalise_key(property_type), DEFAULT_BASE_PRICE_PER_SQFT))


def location_multiplier(city: Optional[str], state: Optional[str]) -> float:
    city_factor = CITY_MULTIPLIERS.get(normalise_key(city), DEFAULT_LOCATION_MULTIPLIER)
    state_factor = STATE_MULTIPLIERS.get(normalise_key(state), DEFAULT_LOCATION_MULTIPLIER)
    return float(max(city_factor, state_factor, LOCATION_MULTIPLIER_FLOOR))


def _room_multiplier(table: Dict[int, float], count: float) -> float:
    if float(count).is_integer():
        return float(table.get(int(count), DEFAULT_ROOM_MULTIPLIER))
    return DEFAULT_ROOM_MULTIPLIER


def bedroom_multiplier(bedrooms: float) -> float:
    return _room_multiplier(BEDROOM_MULTIPLIERS, bedrooms)


def bathroom_multiplier(bathrooms: float) -> float:
    return _room_multiplier(BATHROOM_MULTIPLIERS, bathrooms)


def amenity_value(tag: Optional[str]) -> float:
    return float(AMENITY_VALUES.get(normalise_key(tag), 0.0))


def bedroom_key(bedrooms: int) -> str:
    """Key used for per-bedroom market averages: ``studio`` or ``<n>bed``."""

    return "studio" if int(bedrooms) == 0 else f"{int(bedrooms)}bed"


__all__ = [
    "AMENITY_VALUES",
    "BASE_PRICE_PER_SQFT",
    "BATHROOM_MULTIPLIERS",
    "BEDROOM_MULTIPLIERS",
    "CITY_MULTIPLIERS",
    "DEFAULT_AREA_SQFT",
    "PRICE_VARIANCE",
    "STATE_MULTIPLIERS",
    "amenity_value",
    "base_price_per_sqft",
    "bathroom_multiplier",
    "bedroom_key",
    "bedroom_multiplier",
    "location_multiplier",
    "normalise_key",
]
