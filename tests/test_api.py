from fastapi.testclient import TestClient

from rentmatch.api import app

client = TestClient(app)


def test_health_endpoint():
    resp = client.get("/api/health")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "ok"
    assert payload["listings"] > 0


def test_listings_endpoint():
    resp = client.get("/api/listings")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["total"] == len(payload["items"])
    assert all(item["status"] == "active" for item in payload["items"])

    mumbai = client.get("/api/listings", params={"city": "mumbai"}).json()
    assert mumbai["total"] > 0
    assert all(item["city"] == "Mumbai" for item in mumbai["items"])


def test_cost_analysis_endpoint():
    resp = client.get("/api/listings/mum-001/cost-analysis")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["listing_id"] == "mum-001"
    assert payload["basic_costs"]["rent"] == 85000
    assert 1 <= payload["affordability"]["rating"] <= 5
    assert payload["market_is_estimate"] is False


def test_cost_analysis_unknown_listing():
    resp = client.get("/api/listings/missing/cost-analysis")
    assert resp.status_code == 404


def test_pricing_estimate_endpoint():
    resp = client.post(
        "/api/pricing/estimate",
        json={
            "property_type": "apartment",
            "bedrooms": 2,
            "bathrooms": 1,
            "square_footage": 900,
            "city": "mumbai",
            "amenities": ["parking", "gym"],
        },
    )
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["total_price"] == 8426500
    assert payload["price_range_min"] == 7162525
    assert payload["price_range_max"] == 9690475


def test_pricing_estimate_rejects_invalid_numbers():
    resp = client.post("/api/pricing/estimate", json={"bedrooms": "lots"})
    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "bedrooms"


def test_pricing_analysis_endpoint():
    resp = client.post(
        "/api/pricing/analysis",
        json={"property_type": "apartment", "bedrooms": 2, "square_footage": 900, "city": "Mumbai", "state": "Maharashtra"},
    )
    assert resp.status_code == 200
    payload = resp.json()
    tiers = payload["tiers"]
    assert tiers["conservative"] < tiers["recommended"] < tiers["aggressive"]
    assert payload["market_insight"]["is_estimate"] is False
    assert payload["market_insight"]["kind"] == "real"
    assert 0 <= payload["confidence"] <= 95


def test_market_insights_endpoint_tags_estimates():
    thin = client.get("/api/market/insights", params={"city": "Pune", "state": "Maharashtra"}).json()
    assert thin["is_estimate"] is True
    assert thin["kind"] == "estimated"
    again = client.get("/api/market/insights", params={"city": "Pune", "state": "Maharashtra"}).json()
    assert again["average_rent"] == thin["average_rent"]


def test_natural_search_endpoint():
    resp = client.post("/api/search/natural", json={"query": "2 bedroom under 60000 in Mumbai"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["filters"] == {"max_rent": 60000, "bedrooms": 2, "city": "Mumbai"}
    assert [item["listing"]["id"] for item in payload["results"]] == ["mum-006"]


def test_rank_endpoint_orders_by_score():
    resp = client.post(
        "/api/search/rank",
        json={
            "filters": {"city": "Bangalore"},
            "preferences": {"budget": {"max": 60000}, "amenities": ["gym", "parking"]},
        },
    )
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert results[0]["listing"]["id"] == "blr-001"
    scores = [item["score"] for item in results]
    assert scores == sorted(scores, reverse=True)
    assert all(0 <= score <= 100 for score in scores)


def test_extract_preferences_endpoint():
    resp = client.post("/api/ai/extract-preferences", json={"text": "budget 30k, 2 bedrooms, have a cat"})
    assert resp.status_code == 200
    assert resp.json()["preferences"] == {
        "budget": {"max": 30000},
        "bedrooms": {"min": 2},
        "pet_policy": "allowed",
    }


def test_generate_description_without_data():
    resp = client.post("/api/ai/generate-description", json={})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["fallback"] is True
    assert payload["fallback_reason"] == "missing_property_data"


def test_pricing_estimate_rejects_overflowing_area():
    resp = client.post("/api/pricing/estimate", json={"square_footage": 1e306, "city": "mumbai"})
    assert resp.status_code == 422
    assert resp.json()["detail"]["field"] == "square_footage"


def test_pricing_analysis_accepts_float_bedroom_count():
    resp = client.post(
        "/api/pricing/analysis",
        json={"property_type": "apartment", "bedrooms": 2.0, "square_footage": 900, "city": "Mumbai", "state": "Maharashtra"},
    )
    assert resp.status_code == 200
    payload = resp.json()
    by_bed = payload["market_insight"]["average_rent_by_bedrooms"]
    assert payload["competitive_analysis"]["area_average"] == by_bed["2bed"]
    assert by_bed["2bed"] != by_bed["1bed"]


def test_comparables_endpoint():
    resp = client.get(
        "/api/market/comparables",
        params={"city": "Mumbai", "state": "Maharashtra", "bedrooms": 2},
    )
    assert resp.status_code == 200
    payload = resp.json()
    assert [item["id"] for item in payload["comparables"]] == ["mum-006", "mum-001"]
    assert payload["count"] == 2
    stats = payload["statistics"]
    assert stats["average_rent"] == 69500
    assert stats["median_rent"] == 85000
    assert (stats["min_rent"], stats["max_rent"]) == (54000, 85000)


def test_comparables_endpoint_requires_state():
    resp = client.get("/api/market/comparables", params={"city": "Mumbai"})
    assert resp.status_code == 422
