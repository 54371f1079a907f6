"""Renter-facing monthly cost breakdown and affordability assessment."""

from __future__ import annotations

import math
from typing import List, Optional

from ..models.listing import PropertyListing
from ..models.pricing import BasicCosts, CostAnalysis, CostRecommendation, MarketInsight, Rating
from ..utils.logging import get_logger
from ..utils.normalize import Bounds, normalise_key, ratio, round_half_up
from .pricing import estimate_for_listing

LOGGER = get_logger("services.cost_analysis")

DEPOSIT_MONTHS = 1.5
UTILITIES_PER_SQFT = 2.5
DEFAULT_UTILITIES = 2500.0
HOUSING_SHARE_OF_INCOME = 0.30

# Affordability drops one point per step above the comfortable level (INR / month).
AFFORDABLE_MONTHLY = 20000.0
AFFORDABILITY_STEP = 15000.0

_RATING_BOUNDS = Bounds(1.0, 5.0)
_LAUNDRY_TAGS = {normalise_key(tag) for tag in ("laundry", "in-unit laundry", "washer", "washing machine")}
_CENTRAL_MARKERS = ("downtown", "central", "city centre", "city center")


def build_cost_analysis(
    listing: PropertyListing,
    insight: Optional[MarketInsight],
    rent: Optional[float] = None,
) -> CostAnalysis:
    """Monthly and yearly housing costs for ``listing`` against its area.

    ``rent`` overrides the listed rent; unpriced listings use the calculator.
    """

    if rent is None:
        rent = listing.current_rent
    if rent is None:
        rent = float(estimate_for_listing(listing).total_price)

    deposit = rent * DEPOSIT_MONTHS
    if listing.square_footage:
        utilities = round(listing.square_footage * UTILITIES_PER_SQFT, 2)
    else:
        utilities = DEFAULT_UTILITIES
    total_monthly = rent + utilities
    income_needed = int(math.ceil(total_monthly * 12 / HOUSING_SHARE_OF_INCOME))

    market_average = insight.average_for_bedrooms(listing.bedrooms) if insight is not None else None
    location = listing.city or "the area"

    affordability = Rating(
        rating=affordability_rating(total_monthly),
        description=(
            f"This property would require an estimated annual income of INR {income_needed:,} "
            "to maintain a healthy budget."
        ),
    )
    value = value_rating(rent, market_average)

    summary = (
        f"This {listing.property_type.value} in {location} is priced at INR {round_half_up(rent):,}/month. "
        f"With utilities, total monthly housing expenses would be approximately INR {round_half_up(total_monthly):,}. "
        f"Keeping housing at {int(HOUSING_SHARE_OF_INCOME * 100)}% of income means an annual income of "
        f"about INR {income_needed:,}."
    )

    LOGGER.debug(
        "cost_analysis listing=%s rent=%.2f total=%.2f market_average=%s",
        listing.id,
        rent,
        total_monthly,
        market_average,
    )
    return CostAnalysis(
        listing_id=listing.id,
        basic_costs=BasicCosts(
            rent=rent,
            deposit=deposit,
            utilities=utilities,
            total_monthly_cost=total_monthly,
            yearly_projection=total_monthly * 12,
        ),
        market_average=market_average,
        market_is_estimate=bool(insight is not None and insight.is_estimate),
        income_needed=income_needed,
        affordability=affordability,
        value_assessment=value,
        highlights=_highlights(listing, utilities),
        summary=summary,
        recommendations=cost_recommendations(listing, rent, market_average),
    )


def affordability_rating(total_monthly: float) -> float:
    steps = math.floor((total_monthly - AFFORDABLE_MONTHLY) / AFFORDABILITY_STEP)
    return _RATING_BOUNDS.clamp(5 - steps)


def value_rating(rent: float, market_average: Optional[float]) -> Rating:
    """Rate value for money; at-market rent scores 4, cheaper scores higher."""

    relative = ratio(market_average, rent) if market_average else None
    score = _RATING_BOUNDS.clamp(round(4 * relative, 2)) if relative is not None else 3.0
    if score > 4.5:
        text = "Excellent value compared to similar properties in the area."
    elif score > 3.5:
        text = "Good value for the price and location."
    elif score > 2.5:
        text = "Average pricing for the area and features."
    else:
        text = "Higher than average pricing for this market segment."
    return Rating(rating=score, description=text)


def cost_recommendations(
    listing: PropertyListing, rent: float, market_average: Optional[float]
) -> List[CostRecommendation]:
    recommendations: List[CostRecommendation] = []
    if market_average:
        if rent > market_average * 1.1:
            saving = round_half_up(rent - market_average)
            recommendations.append(
                CostRecommendation(
                    type="price",
                    priority="high",
                    message=(
                        "This property is priced above the market average. Consider negotiating the rent "
                        "or looking for similar properties in the area."
                    ),
                    suggestion=(
                        f"You could save approximately INR {saving:,}/month by finding a property "
                        "closer to the market average."
                    ),
                )
            )
        elif rent < market_average * 0.9:
            recommendations.append(
                CostRecommendation(
                    type="price",
                    priority="low",
                    message="This property is priced below the market average, which could indicate good value.",
                    suggestion="Act quickly as properties at this price point tend to get rented fast.",
                )
            )

    if not listing.amenity_keys() & _LAUNDRY_TAGS:
        recommendations.append(
            CostRecommendation(
                type="amenity",
                priority="medium",
                message="No in-unit laundry available.",
                suggestion="Factor in additional time and cost for laundry services (typically INR 800-1,500/month).",
            )
        )

    place = f"{listing.title or ''} {listing.city}".lower()
    if any(marker in place for marker in _CENTRAL_MARKERS):
        recommendations.append(
            CostRecommendation(
                type="location",
                priority="low",
                message="Central location detected.",
                suggestion="Consider potential savings from reduced transportation costs if you work nearby.",
            )
        )
    return recommendations


def _highlights(listing: PropertyListing, utilities: float) -> List[str]:
    highlights = []
    if utilities < DEFAULT_UTILITIES:
        highlights.append("Low utility costs")
    keys = listing.amenity_keys()
    if keys & _LAUNDRY_TAGS:
        highlights.append("In-unit laundry can save on external costs")
    if "parking" in keys:
        highlights.append("Parking included (potential savings)")
    return highlights


__all__ = [
    "affordability_rating",
    "build_cost_analysis",
    "cost_recommendations",
    "value_rating",
]
