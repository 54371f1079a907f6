from rentmatch.db.repo import Repo
from rentmatch.models.listing import SearchFilters, UserPreferences
from rentmatch.services.market_insights import MarketInsightService
from rentmatch.services.search_service import SearchService


def _records():
    return [
        {"id": "p1", "property_type": "apartment", "bedrooms": 2, "bathrooms": 2, "square_footage": 900,
         "city": "Pune", "state": "Maharashtra", "amenities": "parking|gym", "current_rent": 25000,
         "status": "active", "views": 120, "created_at": "2025-05-01T10:00:00Z"},
        {"id": "p2", "property_type": "apartment", "bedrooms": 2, "bathrooms": 1, "square_footage": 800,
         "city": "Pune", "state": "Maharashtra", "amenities": "parking", "current_rent": 35000,
         "status": "active", "views": 40, "created_at": "2025-06-01T10:00:00Z"},
        {"id": "p3", "property_type": "house", "bedrooms": 3, "bathrooms": 2, "square_footage": 1500,
         "city": "Pune", "state": "Maharashtra", "amenities": "garden", "current_rent": 28000,
         "status": "active", "views": 10, "created_at": "2025-04-01T10:00:00Z"},
        {"id": "p4", "property_type": "apartment", "bedrooms": 2, "bathrooms": 1, "square_footage": 700,
         "city": "Pune", "state": "Maharashtra", "amenities": "", "current_rent": 20000,
         "status": "rented", "views": 300, "created_at": "2025-03-01T10:00:00Z"},
        {"id": "p5", "property_type": "apartment", "bedrooms": 2, "bathrooms": 1, "square_footage": 650,
         "city": "Pune", "state": "Maharashtra", "amenities": "wifi", "current_rent": None,
         "status": "active", "views": 5, "created_at": "2025-07-01T10:00:00Z"},
        {"id": "d1", "property_type": "studio", "bedrooms": 0, "bathrooms": 1, "square_footage": 400,
         "city": "Delhi", "state": "Delhi", "amenities": "security", "current_rent": 18000,
         "status": "active", "views": 60, "created_at": "2025-02-01T10:00:00Z"},
        {"id": "bad", "property_type": "apartment", "bedrooms": -3, "bathrooms": 1,
         "city": "Pune", "state": "Maharashtra", "current_rent": 10000},
    ]


def _service(min_sample_size=None):
    repo = Repo(records=_records())
    return SearchService(repo, MarketInsightService(repo, min_sample_size=min_sample_size))


def test_invalid_rows_are_skipped_on_load():
    repo = Repo(records=_records())
    assert "bad" not in {listing.id for listing in repo.all_listings()}
    assert repo.mode == "memory"


def test_natural_search_applies_parsed_filters():
    result = _service().natural_search("2 bedroom under 30000 in pune")
    assert result.query == "2 bedroom under 30000 in pune"
    assert result.filters.as_dict() == {"max_rent": 30000, "bedrooms": 2, "city": "pune"}
    assert [item.listing.id for item in result.results] == ["p1"]
    assert result.total == 1


def test_unpriced_listing_is_estimated_and_kept_without_ceiling():
    result = _service().search(SearchFilters(city="Pune", bedrooms=2))
    by_id = {item.listing.id: item for item in result.results}
    assert set(by_id) == {"p1", "p2", "p5"}
    assert by_id["p5"].rent_estimated
    assert by_id["p5"].price_estimate is not None
    assert by_id["p5"].rent == by_id["p5"].price_estimate.total_price
    assert not by_id["p1"].rent_estimated


def test_search_builds_one_insight_per_area():
    result = _service(min_sample_size=4).search(SearchFilters())
    assert set(result.insights) == {("pune", "maharashtra"), ("delhi", "delhi")}
    assert result.insights[("pune", "maharashtra")].is_estimate is False
    assert result.insights[("delhi", "delhi")].is_estimate is True


def test_preferences_drive_ranking_and_limit():
    prefs = UserPreferences(budget={"max": 30000}, amenities=["gym", "parking"])
    result = _service().search(SearchFilters(city="Pune"), prefs, limit=2)
    assert result.total == 4
    assert len(result.results) == 2
    assert result.results[0].listing.id == "p1"
    assert result.results[0].score >= result.results[1].score


def test_empty_query_returns_every_active_listing():
    result = _service().natural_search("")
    assert result.filters.is_empty()
    assert {item.listing.id for item in result.results} == {"p1", "p2", "p3", "p5", "d1"}
    assert all(0 <= item.score <= 100 for item in result.results)
