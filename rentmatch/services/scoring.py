"""Deterministic personalised match scoring and ranking."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..models.listing import PropertyListing, UserPreferences
from ..models.pricing import MarketInsight, PriceEstimate, RankedListing
from ..utils.logging import get_logger
from ..utils.normalize import SCORE_BOUNDS, ratio, saturating
from . import market_data
from .pricing import InvalidPropertyDataError, estimate_for_listing

LOGGER = get_logger("services.scoring")

AreaKey = Tuple[str, str]


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-term contributions of a single listing's match score."""

    budget: float
    amenities: float
    market_position: float
    quality: float
    popularity: float
    position_label: str
    rent: Optional[float]
    rent_estimated: bool
    price_estimate: Optional[PriceEstimate]

    @property
    def total(self) -> float:
        raw = self.budget + self.amenities + self.market_position + self.quality + self.popularity
        return SCORE_BOUNDS.clamp(round(raw, 2))


# ---------------------------------------------------------------------------
# Scoring configuration
# ---------------------------------------------------------------------------

BUDGET_WEIGHT = 30.0
AMENITY_WEIGHT = 25.0
POSITION_POINTS: Dict[str, float] = {
    "good-value": 20.0,
    "market-rate": 15.0,
    "premium": 10.0,
}
GOOD_VALUE_BELOW = 0.9
PREMIUM_ABOVE = 1.1

QUALITY_BONUS = 5.0
RECENT_BUILD_AFTER = 2010
AMENITY_COUNT_ABOVE = 5
LARGE_AREA_ABOVE = 1000

POPULARITY_CAP = 10.0
VIEWS_PER_POINT = 50.0

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def relative_pricing(rent: float, insight: Optional[MarketInsight], bedrooms: Optional[int]) -> str:
    """Classify ``rent`` against the bedroom-matched area average."""

    average = insight.average_for_bedrooms(bedrooms) if insight is not None else None
    value = ratio(rent, average)
    if value is None:
        return "unknown"
    if value < GOOD_VALUE_BELOW:
        return "good-value"
    if value <= PREMIUM_ABOVE:
        return "market-rate"
    return "premium"


def calculate_match_score(
    listing: PropertyListing,
    preferences: Optional[UserPreferences],
    insight: Optional[MarketInsight],
    *,
    estimate: Optional[PriceEstimate] = None,
) -> ScoreBreakdown:
    prefs = preferences or UserPreferences()
    rent_value, estimated, estimate = _effective_rent(listing, estimate)

    budget = 0.0
    ceiling = prefs.budget.max
    if rent_value is not None and ceiling is not None and rent_value <= ceiling:
        budget = BUDGET_WEIGHT

    amenities = 0.0
    wanted = prefs.amenity_keys()
    if wanted:
        amenities = AMENITY_WEIGHT * len(wanted & listing.amenity_keys()) / len(wanted)

    label = "unknown"
    if rent_value is not None:
        label = relative_pricing(rent_value, insight, listing.bedrooms)
    position = POSITION_POINTS.get(label, 0.0)

    quality = 0.0
    if listing.year_built is not None and listing.year_built > RECENT_BUILD_AFTER:
        quality += QUALITY_BONUS
    if len(listing.amenities) > AMENITY_COUNT_ABOVE:
        quality += QUALITY_BONUS
    if listing.square_footage is not None and listing.square_footage > LARGE_AREA_ABOVE:
        quality += QUALITY_BONUS

    popularity = saturating(listing.views, VIEWS_PER_POINT, POPULARITY_CAP)

    return ScoreBreakdown(
        budget=budget,
        amenities=amenities,
        market_position=position,
        quality=quality,
        popularity=popularity,
        position_label=label,
        rent=rent_value,
        rent_estimated=estimated,
        price_estimate=estimate,
    )


def rank_listings(
    listings: Iterable[PropertyListing],
    preferences: Optional[UserPreferences],
    insights: Mapping[AreaKey, MarketInsight],
    estimates: Optional[Mapping[str, PriceEstimate]] = None,
) -> List[RankedListing]:
    """Score every listing and order them best first.

    ``insights`` is keyed by normalised (city, state). ``estimates`` optionally
    supplies rent estimates already computed for unpriced listings, by id. Equal scores keep the
    newest listing first.
    """

    ranked: List[RankedListing] = []
    for listing in listings:
        insight = insights.get(area_key(listing.city, listing.state))
        known = estimates.get(listing.id) if estimates else None
        breakdown = calculate_match_score(listing, preferences, insight, estimate=known)
        ranked.append(
            RankedListing(
                listing=listing,
                score=breakdown.total,
                market_position=breakdown.position_label,
                rent=breakdown.rent,
                rent_estimated=breakdown.rent_estimated,
                price_estimate=breakdown.price_estimate,
            )
        )
    ranked.sort(key=_rank_key, reverse=True)
    return ranked


def area_key(city: str, state: str) -> AreaKey:
    return market_data.normalise_key(city), market_data.normalise_key(state)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _effective_rent(
    listing: PropertyListing, estimate: Optional[PriceEstimate]
) -> Tuple[Optional[float], bool, Optional[PriceEstimate]]:
    if listing.current_rent is not None:
        return float(listing.current_rent), False, None
    if estimate is not None:
        return float(estimate.total_price), True, estimate
    try:
        estimate = estimate_for_listing(listing)
    except InvalidPropertyDataError as exc:
        LOGGER.warning("rent_estimate_failed listing=%s error=%s", listing.id, exc)
        return None, False, None
    return float(estimate.total_price), True, estimate


def _rank_key(item: RankedListing) -> Tuple[float, datetime]:
    created = item.listing.created_at
    if created is None:
        created = _OLDEST
    elif created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return item.score, created


__all__ = [
    "ScoreBreakdown",
    "area_key",
    "calculate_match_score",
    "rank_listings",
    "relative_pricing",
]
