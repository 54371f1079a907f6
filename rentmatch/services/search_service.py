"""Search orchestration: parse, fetch once, price gaps, score and rank."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..db.repo import Repo, get_repository
from ..models.listing import PropertyListing, SearchFilters, UserPreferences
from ..models.pricing import MarketInsight, PriceEstimate, RankedListing
from ..utils.logging import get_logger
from .market_insights import MarketInsightService
from .pricing import InvalidPropertyDataError, estimate_for_listing
from .query_parser import parse_natural_language_query
from .scoring import AreaKey, area_key, rank_listings

LOGGER = get_logger("services.search")

DEFAULT_LIMIT = 20


@dataclass
class SearchResult:
    filters: SearchFilters
    results: List[RankedListing]
    total: int
    query: Optional[str] = None
    insights: Dict[AreaKey, MarketInsight] = field(default_factory=dict)


class SearchService:
    def __init__(self, repository: Repo, insight_service: MarketInsightService) -> None:
        self.repository = repository
        self.insight_service = insight_service

    def natural_search(
        self,
        query: str,
        preferences: Optional[UserPreferences] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> SearchResult:
        filters = parse_natural_language_query(query)
        result = self.search(filters, preferences, limit=limit)
        result.query = query
        return result

    def search(
        self,
        filters: Optional[SearchFilters],
        preferences: Optional[UserPreferences] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> SearchResult:
        filters = filters or SearchFilters()
        candidates = self.repository.find_listings(filters)

        priced: List[PropertyListing] = []
        estimates: Dict[str, PriceEstimate] = {}
        for listing in candidates:
            if listing.current_rent is None:
                try:
                    estimate = estimate_for_listing(listing)
                except InvalidPropertyDataError as exc:
                    LOGGER.warning("Skipping unpriceable listing id=%s error=%s", listing.id, exc)
                    continue
                if filters.max_rent is not None and estimate.total_price > filters.max_rent:
                    continue
                estimates[listing.id] = estimate
            priced.append(listing)

        insights: Dict[AreaKey, MarketInsight] = {}
        for listing in priced:
            key = area_key(listing.city, listing.state)
            if key not in insights:
                insights[key] = self.insight_service.insight_for(listing.city, listing.state)

        ranked = rank_listings(priced, preferences, insights, estimates=estimates)
        LOGGER.info(
            "search_completed filters=%s candidates=%s ranked=%s",
            filters.as_dict(),
            len(candidates),
            len(ranked),
        )
        return SearchResult(
            filters=filters,
            results=ranked[:limit],
            total=len(ranked),
            insights=insights,
        )


_SERVICE_SINGLETON: SearchService | None = None


def get_search_service() -> SearchService:
    global _SERVICE_SINGLETON
    if _SERVICE_SINGLETON is None:
        repository = get_repository()
        _SERVICE_SINGLETON = SearchService(repository, MarketInsightService(repository))
    return _SERVICE_SINGLETON


def reset_search_service() -> None:
    global _SERVICE_SINGLETON
    _SERVICE_SINGLETON = None
