"""Best-effort parsing of free-text rental searches into structured filters.

The parser is a handful of regexes, not a grammar. Anything it cannot read is
left out of the result; it never raises on user input.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from ..models.listing import SearchFilters
from ..utils.coerce import to_float
from ..utils.logging import get_logger

LOGGER = get_logger("services.query_parser")

_NUMBER = r"(\d[\d,]*(?:\.\d+)?)(?:\s*(k)\b)?"
_PRICE_RE = re.compile(r"\bunder\s+(?:\$|rs\.?|inr|₹)?\s*" + _NUMBER + r"\b", re.IGNORECASE)
_BEDROOM_RE = re.compile(r"\b(\d+)\s*-?\s*(?:bed(?:room)?s?|bhk)\b", re.IGNORECASE)

_FILTER_KEYWORDS = (
    "under",
    "below",
    "with",
    "for",
    "near",
    "and",
    "max",
    "budget",
    "around",
    "that",
    "which",
)
_CITY_RE = re.compile(
    r"\bin\s+([a-z][a-z.'\- ]*?)\s*(?=$|[,;!?]|\s+(?:" + "|".join(_FILTER_KEYWORDS) + r")\b|\s+\d)",
    re.IGNORECASE,
)

_BUDGET_RE = re.compile(r"(\d{1,3}(?:,\d{2,3})+|\d+(?:\.\d+)?)(?:\s*(k)\b)?", re.IGNORECASE)
_PET_WORDS = ("pet", "dog", "cat")
MIN_BUDGET = 500
MAX_BUDGET = 1_000_000


def parse_natural_language_query(text: Any) -> SearchFilters:
    """Extract ``max_rent``, ``bedrooms`` and ``city`` from a free-text query."""

    if not isinstance(text, str) or not text.strip():
        return SearchFilters()

    fields: Dict[str, Any] = {}

    price = _PRICE_RE.search(text)
    if price:
        amount = _amount(price.group(1), price.group(2))
        if amount is not None:
            fields["max_rent"] = amount

    bedrooms = _BEDROOM_RE.search(text)
    if bedrooms and bedrooms.group(1).isdigit():
        fields["bedrooms"] = int(bedrooms.group(1))

    city = _CITY_RE.search(text)
    if city:
        name = city.group(1).strip(" .'-")
        if name:
            fields["city"] = name

    LOGGER.debug("parsed_query text=%r filters=%s", text, fields)
    return SearchFilters(**fields)


def extract_preferences(text: Any) -> Dict[str, Any]:
    """Pull budget, bedroom and pet hints out of onboarding chat text.

    Returns a partial preferences mapping shaped like ``UserPreferences``.
    """

    if not isinstance(text, str) or not text.strip():
        return {}

    prefs: Dict[str, Any] = {}
    lowered = text.lower()

    for match in _BUDGET_RE.finditer(lowered):
        amount = _amount(match.group(1), match.group(2))
        if amount is not None and MIN_BUDGET < amount < MAX_BUDGET:
            prefs["budget"] = {"max": amount}
            break

    bedrooms = _BEDROOM_RE.search(lowered)
    if bedrooms:
        prefs["bedrooms"] = {"min": int(bedrooms.group(1))}

    if any(word in lowered for word in _PET_WORDS):
        prefs["pet_policy"] = "allowed"
    return prefs


def _amount(digits: str, thousands: Optional[str]) -> Optional[float]:
    value = to_float(digits.replace(",", ""))
    if value is None:
        return None
    if thousands:
        value *= 1000
    return value


__all__ = ["parse_natural_language_query", "extract_preferences"]
