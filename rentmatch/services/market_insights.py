"""Market trend and insight generation for a city/state.

Insight is aggregated from stored listings when the area has enough priced
listings. Otherwise a seeded placeholder generator fills in internally
consistent numbers and the result is tagged as an estimate.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..models.listing import ListingStatus, PropertyListing
from ..models.pricing import (
    CompetitiveAnalysis,
    EstimatedMarketInsight,
    MarketInsight,
    PriceEstimate,
    PriceTiers,
    PricingAnalysis,
    RealMarketInsight,
)
from ..utils.logging import get_logger
from ..utils.normalize import Bounds, round_half_up
from . import market_data
from .pricing import get_market_position

LOGGER = get_logger("services.market_insights")

MIN_SAMPLE_SIZE = int(os.getenv("MARKET_MIN_SAMPLE_SIZE", "5"))
RECENT_WINDOW_DAYS = 90
MAX_ESTIMATE_BEDROOMS = 5

RngFactory = Callable[[int], np.random.Generator]

_DEMAND_BOUNDS = Bounds(0.0, 10.0)
_OCCUPIED = [ListingStatus.PENDING.value, ListingStatus.RENTED.value]


@dataclass(frozen=True)
class _Metrics:
    sample_size: int
    average_rent: float
    median_rent: Optional[float]
    by_bedrooms: Dict[str, float]
    price_per_sqft: Optional[float]
    yoy_growth_pct: Optional[float]
    demand_score: float
    inventory: str
    price_direction: str


def build_market_insight(
    city: str,
    state: str,
    listings: Optional[Iterable[PropertyListing]] = None,
    *,
    min_sample_size: Optional[int] = None,
    rng_factory: Optional[RngFactory] = None,
    now: Optional[datetime] = None,
) -> MarketInsight:
    """Return real insight for the area, or a seeded estimate when data is thin."""

    threshold = MIN_SAMPLE_SIZE if min_sample_size is None else max(1, int(min_sample_size))
    area = _area_frame(city, state, listings or [])
    priced = area.dropna(subset=["rent"]) if not area.empty else area

    if len(priced) >= threshold:
        metrics = _real_metrics(area, priced, now or datetime.now(timezone.utc))
        insight_cls = RealMarketInsight
    else:
        LOGGER.info(
            "market_insight_estimated city=%s state=%s priced=%s threshold=%s",
            city,
            state,
            len(priced),
            threshold,
        )
        metrics = _estimated_metrics(city, state, rng_factory or np.random.default_rng)
        insight_cls = EstimatedMarketInsight

    demand_level = _demand_level(metrics.demand_score)
    competitiveness = _competitiveness(demand_level, metrics.inventory)
    insight = insight_cls(
        city=city,
        state=state,
        sample_size=metrics.sample_size,
        average_rent=metrics.average_rent,
        median_rent=metrics.median_rent,
        average_rent_by_bedrooms=metrics.by_bedrooms,
        average_price_per_sqft=metrics.price_per_sqft,
        yoy_growth_pct=metrics.yoy_growth_pct,
        demand_score=metrics.demand_score,
        demand_level=demand_level,
        inventory=metrics.inventory,
        price_direction=metrics.price_direction,
        competitiveness=competitiveness,
        market_health=int(round(metrics.demand_score * 10)),
    )
    insight.recommendations = market_recommendations(insight)
    return insight


# ---------------------------------------------------------------------------
# Real aggregation
# ---------------------------------------------------------------------------


def _area_frame(city: str, state: str, listings: Iterable[PropertyListing]) -> pd.DataFrame:
    city_key = market_data.normalise_key(city)
    state_key = market_data.normalise_key(state)
    rows = []
    for listing in listings:
        if market_data.normalise_key(listing.city) != city_key:
            continue
        if state_key and market_data.normalise_key(listing.state) != state_key:
            continue
        rows.append(
            {
                "rent": listing.current_rent,
                "bedrooms": listing.bedrooms,
                "sqft": listing.square_footage,
                "status": listing.status.value,
                "views": listing.views,
                "created_at": listing.created_at,
            }
        )
    frame = pd.DataFrame(rows, columns=["rent", "bedrooms", "sqft", "status", "views", "created_at"])
    for col in ["rent", "sqft", "views"]:
        frame[col] = pd.to_numeric(frame[col], errors="coerce")
    frame["created_at"] = pd.to_datetime(frame["created_at"], errors="coerce", utc=True)
    return frame


def _real_metrics(area: pd.DataFrame, priced: pd.DataFrame, now: datetime) -> _Metrics:
    rents = priced["rent"].astype(float).to_numpy()
    by_bedrooms = {
        market_data.bedroom_key(int(beds)): float(round(group.mean(), 2))
        for beds, group in priced.groupby("bedrooms")["rent"]
    }

    sized = priced.dropna(subset=["sqft"])
    sized = sized[sized["sqft"] > 0]
    price_per_sqft = None
    if not sized.empty:
        price_per_sqft = float(round(sized["rent"].sum() / sized["sqft"].sum(), 2))

    occupied_share = float(area["status"].isin(_OCCUPIED).mean())
    views = area["views"].dropna()
    view_signal = min(1.0, float(views.median()) / 200.0) if not views.empty else 0.0
    demand_score = _DEMAND_BOUNDS.clamp(round(10 * (0.6 * occupied_share + 0.4 * view_signal), 1))

    active_share = float((area["status"] == ListingStatus.ACTIVE.value).mean())
    if active_share < 0.3:
        inventory = "low"
    elif active_share > 0.7:
        inventory = "high"
    else:
        inventory = "moderate"

    direction, growth = _price_direction(priced, now)
    return _Metrics(
        sample_size=int(len(priced)),
        average_rent=float(round(np.mean(rents), 2)),
        median_rent=float(np.median(rents)),
        by_bedrooms=by_bedrooms,
        price_per_sqft=price_per_sqft,
        yoy_growth_pct=growth,
        demand_score=demand_score,
        inventory=inventory,
        price_direction=direction,
    )


def _price_direction(priced: pd.DataFrame, now: datetime) -> Tuple[str, Optional[float]]:
    dated = priced.dropna(subset=["created_at"])
    if dated.empty:
        return "stable", None
    cutoff = pd.Timestamp(now - timedelta(days=RECENT_WINDOW_DAYS))
    cutoff = cutoff.tz_localize("UTC") if cutoff.tzinfo is None else cutoff.tz_convert("UTC")
    recent = dated[dated["created_at"] >= cutoff]["rent"]
    older = dated[dated["created_at"] < cutoff]["rent"]
    if recent.empty or older.empty:
        return "stable", None
    baseline = float(older.mean())
    if not baseline > 0:
        return "stable", None
    change = float(recent.mean()) / baseline - 1
    growth = round(change * 100, 1)
    if change > 0.03:
        return "rising", growth
    if change < -0.03:
        return "falling", growth
    return "stable", growth


# ---------------------------------------------------------------------------
# Seeded placeholder generator
# ---------------------------------------------------------------------------


def area_seed(city: str, state: str) -> int:
    """Stable seed for an area, independent of process hash randomisation."""

    key = f"{market_data.normalise_key(city)}|{market_data.normalise_key(state)}"
    return int(hashlib.sha256(key.encode("utf-8")).hexdigest()[:8], 16)


def _estimated_metrics(city: str, state: str, rng_factory: RngFactory) -> _Metrics:
    rng = rng_factory(area_seed(city, state))
    multiplier = market_data.location_multiplier(city, state)
    one_bed = float(rng.uniform(15000, 30000)) * multiplier
    by_bedrooms = {"studio": round(one_bed * 0.8, 2)}
    for beds in range(1, MAX_ESTIMATE_BEDROOMS + 1):
        by_bedrooms[market_data.bedroom_key(beds)] = round(one_bed * (1 + 0.35 * (beds - 1)), 2)

    growth = round(float(rng.uniform(-3.0, 9.0)), 1)
    if growth > 3:
        direction = "rising"
    elif growth < 0:
        direction = "falling"
    else:
        direction = "stable"

    values = list(by_bedrooms.values())
    return _Metrics(
        sample_size=0,
        average_rent=round(float(np.mean(values)), 2),
        median_rent=round(float(np.median(values)), 2),
        by_bedrooms=by_bedrooms,
        price_per_sqft=round(one_bed / 650.0, 2),
        yoy_growth_pct=growth,
        demand_score=round(float(rng.uniform(4.0, 9.5)), 1),
        inventory=str(rng.choice(["low", "moderate", "high"])),
        price_direction=direction,
    )


# ---------------------------------------------------------------------------
# Labels and recommendations
# ---------------------------------------------------------------------------


def _demand_level(score: float) -> str:
    if score >= 7:
        return "high"
    if score >= 4:
        return "medium"
    return "low"


def _competitiveness(demand_level: str, inventory: str) -> str:
    if demand_level == "high" and inventory == "low":
        return "very-competitive"
    if demand_level == "high" or inventory == "low":
        return "competitive"
    return "balanced"


_MARKET_RULES: Sequence[Tuple[int, Callable[[MarketInsight], bool], str]] = (
    (1, lambda i: i.is_estimate, "Limited data available for this area - figures are estimates, consider expanding the location search"),
    (2, lambda i: i.inventory == "low", "Limited inventory - be prepared to make quick decisions"),
    (3, lambda i: i.demand_level == "high", "High demand market - consider expanding search criteria"),
    (4, lambda i: i.price_direction == "rising", "Market prices are trending upward - consider acting quickly on good deals"),
    (5, lambda i: i.price_direction == "falling", "Prices are softening - there may be room to negotiate"),
    (6, lambda i: i.inventory == "high", "Plenty of listings available - compare several options before committing"),
    (7, lambda i: not i.is_estimate and i.sample_size < 10, "Few comparable listings - treat averages as indicative"),
)


def market_recommendations(insight: MarketInsight) -> List[str]:
    matched = [(priority, text) for priority, rule, text in _MARKET_RULES if rule(insight)]
    if not matched:
        return ["Market conditions are balanced - price and search as usual"]
    return [text for _, text in sorted(matched)]


def pricing_strategy(insight: MarketInsight) -> List[str]:
    strategies = []
    if insight.demand_level == "high":
        strategies.append("Consider aggressive pricing due to high demand")
    if insight.inventory == "low":
        strategies.append("Limited inventory supports premium pricing")
    if insight.price_direction == "rising":
        strategies.append("Market trending upward - price at upper range")
    elif insight.price_direction == "falling":
        strategies.append("Market softening - consider competitive pricing")
    if insight.demand_score > 8.5:
        strategies.append("High demand score supports premium positioning")
    return strategies or ["Price competitively based on market conditions"]


def pricing_confidence(estimate: PriceEstimate, insight: MarketInsight, square_footage: Optional[float]) -> int:
    confidence = 70
    if insight.demand_score > 7:
        confidence += 10
    if insight.market_health > 60:
        confidence += 10
    if square_footage:
        confidence += 5
    if estimate.amenities_value > 0:
        confidence += 5
    confidence = min(95, confidence)
    if insight.is_estimate:
        confidence = min(60, confidence)
    return confidence


def pricing_recommendations(recommended_rent: int, insight: MarketInsight, today: date) -> List[str]:
    recommendations = [f"Start at INR {recommended_rent:,} per month based on current market conditions"]
    if insight.competitiveness == "very-competitive":
        recommendations.append("Price competitively - market moves fast")
        recommendations.append("Consider offering move-in incentives")
    if 5 <= today.month <= 9:
        recommendations.append("Peak rental season - demand is typically higher")
    elif today.month >= 11 or today.month <= 3:
        recommendations.append("Off-peak season - consider flexible pricing")
    if insight.inventory == "low":
        recommendations.append("Low inventory - you have pricing power")
    if insight.is_estimate:
        recommendations.append("Area figures are estimated - verify against local listings before publishing")
    return recommendations


def build_pricing_analysis(
    estimate: PriceEstimate,
    insight: MarketInsight,
    *,
    bedrooms: Optional[int] = None,
    square_footage: Optional[float] = None,
    today: Optional[date] = None,
) -> PricingAnalysis:
    """Landlord-facing pricing analysis around a calculator estimate."""

    recommended = estimate.total_price
    area_average = insight.average_for_bedrooms(bedrooms)
    difference = None
    if area_average:
        difference = round_half_up((recommended - area_average) / area_average * 100)

    return PricingAnalysis(
        recommended_rent=recommended,
        price_range_min=estimate.price_range_min,
        price_range_max=estimate.price_range_max,
        tiers=PriceTiers(
            conservative=round_half_up(recommended * 0.92),
            recommended=recommended,
            aggressive=round_half_up(recommended * 1.08),
        ),
        estimate=estimate,
        market_insight=insight,
        competitive_analysis=CompetitiveAnalysis(
            area_average=area_average,
            percentage_difference=difference,
            market_position=get_market_position(recommended, area_average),
        ),
        pricing_strategy=pricing_strategy(insight),
        confidence=pricing_confidence(estimate, insight, square_footage),
        recommendations=pricing_recommendations(recommended, insight, today or date.today()),
    )


class MarketInsightService:
    """Fetches area listings from the store and builds insight from them."""

    def __init__(self, repository, min_sample_size: Optional[int] = None, rng_factory: Optional[RngFactory] = None) -> None:
        self.repository = repository
        self.min_sample_size = min_sample_size
        self.rng_factory = rng_factory

    def insight_for(self, city: str, state: str) -> MarketInsight:
        listings = self.repository.listings_in_area(city, state)
        return build_market_insight(
            city,
            state,
            listings,
            min_sample_size=self.min_sample_size,
            rng_factory=self.rng_factory,
        )


__all__ = [
    "MarketInsightService",
    "area_seed",
    "build_market_insight",
    "build_pricing_analysis",
    "market_recommendations",
    "pricing_confidence",
    "pricing_strategy",
]
