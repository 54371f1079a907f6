import math
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .db.repo import get_repository
from .models.listing import PropertyDraft, SearchFilters, UserPreferences
from .services.comparables import find_comparables
from .services.cost_analysis import build_cost_analysis
from .services.description import DescriptionGenerator
from .services.market_insights import MarketInsightService, build_pricing_analysis
from .services.pricing import InvalidPropertyDataError, calculate_rent_price
from .services.query_parser import extract_preferences
from .services.search_service import get_search_service
from .utils.coerce import to_whole
from .utils.logging import get_logger

LOGGER = get_logger("api")

app = FastAPI(title="rentmatch")
router = APIRouter(prefix="/api")
repo = get_repository()
insight_service = MarketInsightService(repo)
search_service = get_search_service()
describer = DescriptionGenerator()


def _sanitize(value: Any) -> Any:
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    if isinstance(value, dict):
        return {k: _sanitize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_sanitize(item) for item in value]
    return value


def _payload(model: Any) -> Any:
    return _sanitize(jsonable_encoder(model))


class PropertyReq(BaseModel):
    property_type: Optional[str] = None
    bedrooms: Any = None
    bathrooms: Any = None
    square_footage: Any = None
    city: Optional[str] = ""
    state: Optional[str] = ""
    amenities: List[str] = Field(default_factory=list)


class NaturalSearchReq(BaseModel):
    query: str = ""
    preferences: Optional[UserPreferences] = None
    limit: int = Field(20, ge=1, le=200)


class RankReq(BaseModel):
    filters: Optional[SearchFilters] = None
    preferences: Optional[UserPreferences] = None
    limit: int = Field(20, ge=1, le=200)


class TextReq(BaseModel):
    text: str = ""


def _estimate(req: PropertyReq):
    try:
        return calculate_rent_price(**req.model_dump())
    except InvalidPropertyDataError as exc:
        raise HTTPException(422, detail={"field": exc.field, "message": str(exc)}) from exc


@router.get("/health")
def health():
    return {"status": "ok", "listings": len(repo.all_listings()), "llm": describer.available}


@router.get("/listings")
def list_listings(
    city: Optional[str] = Query(None),
    max_rent: Optional[float] = Query(None, ge=0),
    bedrooms: Optional[int] = Query(None, ge=0),
    limit: int = Query(200, ge=1, le=500),
):
    filters = SearchFilters(city=city, max_rent=max_rent, bedrooms=bedrooms)
    rows = repo.find_listings(filters, limit=limit)
    return {"items": [_payload(row) for row in rows], "total": len(rows)}


@router.get("/listings/{listing_id}/cost-analysis")
def cost_analysis(listing_id: str):
    try:
        listing = repo.get_listing(listing_id)
    except ValueError as exc:
        raise HTTPException(404, detail=str(exc)) from exc
    insight = insight_service.insight_for(listing.city, listing.state)
    try:
        analysis = build_cost_analysis(listing, insight)
    except InvalidPropertyDataError as exc:
        raise HTTPException(422, detail={"field": exc.field, "message": str(exc)}) from exc
    return _payload(analysis)


@router.post("/pricing/estimate")
def pricing_estimate(req: PropertyReq):
    return _payload(_estimate(req))


@router.post("/pricing/analysis")
def pricing_analysis(req: PropertyReq):
    estimate = _estimate(req)
    insight = insight_service.insight_for(req.city or "", req.state or "")
    analysis = build_pricing_analysis(
        estimate,
        insight,
        bedrooms=to_whole(req.bedrooms),
        square_footage=req.square_footage,
    )
    return _payload(analysis)


@router.get("/market/insights")
def market_insights(city: str = Query(..., min_length=1), state: str = Query("")):
    return _payload(insight_service.insight_for(city, state))


@router.get("/market/comparables")
def market_comparables(
    city: str = Query(..., min_length=1),
    state: str = Query(..., min_length=1),
    bedrooms: Optional[int] = Query(None, ge=0),
    bathrooms: Optional[float] = Query(None, ge=0),
    property_type: Optional[str] = Query(None),
    min_rent: Optional[float] = Query(None, ge=0),
    max_rent: Optional[float] = Query(None, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    result = find_comparables(
        repo,
        city,
        state,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        property_type=property_type,
        min_rent=min_rent,
        max_rent=max_rent,
        limit=limit,
    )
    return _payload(result)


@router.post("/search/natural")
def natural_search(req: NaturalSearchReq):
    result = search_service.natural_search(req.query, req.preferences, limit=req.limit)
    return {
        "query": result.query,
        "filters": result.filters.as_dict(),
        "results": [_payload(item) for item in result.results],
        "total": result.total,
    }


@router.post("/search/rank")
def rank_search(req: RankReq):
    result = search_service.search(req.filters, req.preferences, limit=req.limit)
    return {
        "filters": result.filters.as_dict(),
        "results": [_payload(item) for item in result.results],
        "total": result.total,
    }


@router.post("/ai/generate-description")
def generate_description(req: Optional[PropertyDraft] = None):
    return _payload(describer.generate(req))


@router.post("/ai/extract-preferences")
def preferences_from_text(req: TextReq):
    return {"preferences": extract_preferences(req.text)}


app.include_router(router)
