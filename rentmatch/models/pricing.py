"""Pydantic schemas for price estimates, market insight and ranking results."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..services.market_data import bedroom_key
from .listing import PropertyListing


class PriceEstimate(BaseModel):
    base_price: int
    amenities_value: int
    total_price: int
    price_range_min: int
    price_range_max: int
    location_multiplier: float
    bedroom_multiplier: float
    bathroom_multiplier: float
    currency: str = "INR"
    period: str = "month"


DemandLevel = Literal["low", "medium", "high"]
InventoryLevel = Literal["low", "moderate", "high"]
PriceDirection = Literal["rising", "stable", "falling"]
Competitiveness = Literal["balanced", "competitive", "very-competitive"]


class _MarketInsightBase(BaseModel):
    city: str
    state: str
    sample_size: int = 0
    average_rent: float
    median_rent: Optional[float] = None
    average_rent_by_bedrooms: Dict[str, float] = Field(default_factory=dict)
    average_price_per_sqft: Optional[float] = None
    yoy_growth_pct: Optional[float] = None
    demand_score: float = Field(..., ge=0, le=10)
    demand_level: DemandLevel
    inventory: InventoryLevel
    price_direction: PriceDirection
    competitiveness: Competitiveness
    market_health: int = Field(..., ge=0, le=100)
    recommendations: List[str] = Field(default_factory=list)
    generated_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def average_for_bedrooms(self, bedrooms: Optional[int]) -> Optional[float]:
        """Bedroom-matched area average, falling back to 1bed then the overall average."""

        if bedrooms is not None:
            value = self.average_rent_by_bedrooms.get(bedroom_key(bedrooms))
            if value:
                return value
        value = self.average_rent_by_bedrooms.get("1bed")
        if value:
            return value
        return self.average_rent or None


class RealMarketInsight(_MarketInsightBase):
    """Insight aggregated from stored listings for the area."""

    kind: Literal["real"] = "real"
    is_estimate: Literal[False] = False


class EstimatedMarketInsight(_MarketInsightBase):
    """Synthetic placeholder insight used when the area has too little data."""

    kind: Literal["estimated"] = "estimated"
    is_estimate: Literal[True] = True


MarketInsight = Annotated[Union[RealMarketInsight, EstimatedMarketInsight], Field(discriminator="kind")]


MarketPosition = Literal["good-value", "market-rate", "premium", "unknown"]


class RankedListing(BaseModel):
    listing: PropertyListing
    score: float = Field(..., ge=0, le=100)
    market_position: MarketPosition = "unknown"
    rent: Optional[float] = None
    rent_estimated: bool = False
    price_estimate: Optional[PriceEstimate] = None


class PriceTiers(BaseModel):
    conservative: int
    recommended: int
    aggressive: int


class CompetitiveAnalysis(BaseModel):
    area_average: Optional[float] = None
    percentage_difference: Optional[int] = None
    market_position: str


class PricingAnalysis(BaseModel):
    recommended_rent: int
    price_range_min: int
    price_range_max: int
    tiers: PriceTiers
    estimate: PriceEstimate
    market_insight: MarketInsight
    competitive_analysis: CompetitiveAnalysis
    pricing_strategy: List[str]
    confidence: int = Field(..., ge=0, le=100)
    recommendations: List[str]


class BasicCosts(BaseModel):
    rent: float
    deposit: float
    utilities: float
    total_monthly_cost: float
    yearly_projection: float


class Rating(BaseModel):
    rating: float = Field(..., ge=1, le=5)
    description: str


class CostRecommendation(BaseModel):
    type: Literal["price", "amenity", "location"]
    priority: Literal["low", "medium", "high"]
    message: str
    suggestion: str


class CostAnalysis(BaseModel):
    listing_id: str
    basic_costs: BasicCosts
    market_average: Optional[float] = None
    market_is_estimate: bool
    income_needed: int
    affordability: Rating
    value_assessment: Rating
    highlights: List[str] = Field(default_factory=list)
    summary: str
    recommendations: List[CostRecommendation] = Field(default_factory=list)


class DescriptionResult(BaseModel):
    description: str
    source: Literal["llm", "template"]
    fallback: bool
    fallback_reason: Optional[str] = None


class RentStatistics(BaseModel):
    """Summary of comparable rents; all zero when nothing matched."""

    count: int = 0
    average_rent: int = 0
    median_rent: float = 0
    min_rent: float = 0
    max_rent: float = 0
    q1_rent: float = 0
    q3_rent: float = 0
    average_size: int = 0
    price_per_sqft: float = 0


class Comparables(BaseModel):
    city: str
    state: str
    comparables: List[PropertyListing] = Field(default_factory=list)
    statistics: RentStatistics = Field(default_factory=RentStatistics)
    count: int = 0
