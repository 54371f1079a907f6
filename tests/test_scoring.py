from datetime import datetime, timezone

from rentmatch.models.listing import PropertyListing, UserPreferences
from rentmatch.models.pricing import RealMarketInsight
from rentmatch.services.scoring import (
    area_key,
    calculate_match_score,
    rank_listings,
    relative_pricing,
)


def _listing(**overrides) -> PropertyListing:
    fields = {
        "id": "L1",
        "property_type": "apartment",
        "bedrooms": 2,
        "bathrooms": 1,
        "square_footage": 800,
        "year_built": 2005,
        "city": "Pune",
        "state": "Maharashtra",
        "amenities": ["parking"],
        "current_rent": 20_000,
        "views": 0,
    }
    fields.update(overrides)
    return PropertyListing(**fields)


def _insight(two_bed: float = 20_000) -> RealMarketInsight:
    return RealMarketInsight(
        city="Pune",
        state="Maharashtra",
        sample_size=8,
        average_rent=two_bed,
        average_rent_by_bedrooms={"2bed": two_bed},
        demand_score=5.0,
        demand_level="medium",
        inventory="moderate",
        price_direction="stable",
        competitiveness="balanced",
        market_health=50,
    )


def _prefs(**fields) -> UserPreferences:
    return UserPreferences(**fields)


def test_budget_fit_is_binary():
    listing = _listing(current_rent=20_000)
    assert calculate_match_score(listing, _prefs(budget={"max": 25_000}), None).budget == 30
    assert calculate_match_score(listing, _prefs(budget={"max": 20_000}), None).budget == 30
    assert calculate_match_score(listing, _prefs(budget={"max": 15_000}), None).budget == 0
    assert calculate_match_score(listing, _prefs(), None).budget == 0


def test_amenity_overlap_ratio():
    listing = _listing(amenities=["Gym", "wifi"])
    score = calculate_match_score(listing, _prefs(amenities=["gym", "parking"]), None)
    assert score.amenities == 12.5
    assert calculate_match_score(listing, _prefs(), None).amenities == 0


def test_market_position_points():
    insight = _insight(20_000)
    cheap = calculate_match_score(_listing(current_rent=17_000), None, insight)
    boundary = calculate_match_score(_listing(current_rent=22_000), None, insight)
    pricey = calculate_match_score(_listing(current_rent=23_000), None, insight)
    blind = calculate_match_score(_listing(current_rent=17_000), None, None)
    assert (cheap.position_label, cheap.market_position) == ("good-value", 20)
    assert (boundary.position_label, boundary.market_position) == ("market-rate", 15)
    assert (pricey.position_label, pricey.market_position) == ("premium", 10)
    assert (blind.position_label, blind.market_position) == ("unknown", 0)


def test_relative_pricing_falls_back_to_one_bed_average():
    insight = _insight()
    insight.average_rent_by_bedrooms = {"1bed": 10_000}
    assert relative_pricing(20_000, insight, 3) == "premium"


def test_quality_and_popularity_terms():
    listing = _listing(
        year_built=2015,
        square_footage=1200,
        amenities=["a", "b", "c", "d", "e", "f"],
        views=250,
    )
    score = calculate_match_score(listing, None, None)
    assert score.quality == 15
    assert score.popularity == 5
    assert calculate_match_score(_listing(views=10_000), None, None).popularity == 10
    assert calculate_match_score(_listing(views=None), None, None).popularity == 0


def test_score_stays_within_bounds():
    best = _listing(
        current_rent=10_000,
        year_built=2020,
        square_footage=1500,
        amenities=["gym", "parking", "pool", "wifi", "garden", "lift"],
        views=5_000,
    )
    prefs = _prefs(budget={"max": 50_000}, amenities=["gym", "parking"])
    top = calculate_match_score(best, prefs, _insight())
    assert top.total == 100

    worst = _listing(current_rent=None, square_footage=None, amenities=[], views=None)
    low = calculate_match_score(worst, _prefs(amenities=["pool"]), None)
    assert 0 <= low.total <= 100


def test_unpriced_listing_is_scored_on_an_estimate():
    listing = _listing(current_rent=None)
    score = calculate_match_score(listing, None, _insight())
    assert score.rent_estimated
    assert score.price_estimate is not None
    assert score.rent == score.price_estimate.total_price


def test_ranking_orders_by_score_then_newest():
    insight = {area_key("Pune", "Maharashtra"): _insight()}
    old = _listing(id="old", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    new = _listing(id="new", created_at=datetime(2025, 1, 1))
    undated = _listing(id="undated")
    better = _listing(id="better", views=500, created_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
    ranked = rank_listings([undated, old, better, new], None, insight)
    assert [item.listing.id for item in ranked] == ["better", "new", "old", "undated"]
    scores = [item.score for item in ranked]
    assert scores == sorted(scores, reverse=True)


def test_ranking_is_deterministic():
    insight = {area_key("Pune", "Maharashtra"): _insight()}
    listings = [_listing(id=str(i), current_rent=15_000 + 1_000 * i, views=20 * i) for i in range(6)]
    prefs = _prefs(budget={"max": 18_000}, amenities=["parking"])
    first = rank_listings(listings, prefs, insight)
    second = rank_listings(listings, prefs, insight)
    assert [r.listing.id for r in first] == [r.listing.id for r in second]
    assert [r.score for r in first] == [r.score for r in second]


def test_amenity_tags_match_across_separators():
    listing = _listing(amenities=["air conditioning", "Power-Backup"])
    prefs = _prefs(amenities=["air_conditioning", "power backup"])
    assert calculate_match_score(listing, prefs, None).amenities == 25


def test_listing_amenities_dedupe_across_separators():
    listing = _listing(amenities=["Air-Conditioning", "air conditioning", "air_conditioning", "gym"])
    assert listing.amenities == ["Air-Conditioning", "gym"]
    assert listing.amenity_keys() == {"air conditioning", "gym"}
