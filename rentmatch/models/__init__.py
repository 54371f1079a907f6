"""Pydantic records consumed and produced by the pricing and ranking engine."""

from .listing import (
    BudgetRange,
    CountRange,
    ListingStatus,
    PropertyDraft,
    PropertyListing,
    PropertyType,
    SearchFilters,
    UserPreferences,
)
from .pricing import (
    Comparables,
    CompetitiveAnalysis,
    CostAnalysis,
    DescriptionResult,
    EstimatedMarketInsight,
    MarketInsight,
    PriceEstimate,
    PricingAnalysis,
    RankedListing,
    RealMarketInsight,
    RentStatistics,
)

__all__ = [
    "BudgetRange",
    "CountRange",
    "ListingStatus",
    "PropertyDraft",
    "PropertyListing",
    "PropertyType",
    "SearchFilters",
    "UserPreferences",
    "Comparables",
    "CompetitiveAnalysis",
    "CostAnalysis",
    "DescriptionResult",
    "EstimatedMarketInsight",
    "MarketInsight",
    "PriceEstimate",
    "PricingAnalysis",
    "RankedListing",
    "RealMarketInsight",
    "RentStatistics",
]
