"""Pydantic models representing listings, renter preferences and search filters."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..utils.normalize import normalise_key


class PropertyType(str, Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    CONDO = "condo"
    TOWNHOUSE = "townhouse"
    STUDIO = "studio"
    LOFT = "loft"
    VILLA = "villa"
    PENTHOUSE = "penthouse"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    RENTED = "rented"
    INACTIVE = "inactive"


class PropertyListing(BaseModel):
    """A rentable property as the engine sees it.

    ``current_rent`` may be absent; the rent calculator then supplies an
    estimate at read time. Rents are monthly INR.
    """

    id: str
    title: Optional[str] = None
    property_type: PropertyType
    bedrooms: int = Field(..., ge=0)
    bathrooms: float = Field(..., ge=0)
    square_footage: Optional[int] = Field(None, ge=0)
    year_built: Optional[int] = None
    city: str
    state: str = ""
    amenities: List[str] = Field(default_factory=list)
    current_rent: Optional[float] = Field(None, ge=0)
    status: ListingStatus = ListingStatus.ACTIVE
    views: Optional[int] = Field(None, ge=0)
    created_at: Optional[datetime] = None

    @field_validator("property_type", mode="before")
    @classmethod
    def _lower_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("amenities", mode="before")
    @classmethod
    def _dedupe_amenities(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        seen = set()
        tags: List[str] = []
        for tag in value:
            text = str(tag).strip()
            key = normalise_key(text)
            if not text or key in seen:
                continue
            seen.add(key)
            tags.append(text)
        return tags

    def amenity_keys(self) -> set:
        return {normalise_key(tag) for tag in self.amenities}


class SearchFilters(BaseModel):
    max_rent: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    city: Optional[str] = None

    def is_empty(self) -> bool:
        return self.max_rent is None and self.bedrooms is None and not self.city

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class BudgetRange(BaseModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)


class CountRange(BaseModel):
    min: Optional[int] = Field(None, ge=0)
    max: Optional[int] = Field(None, ge=0)


class UserPreferences(BaseModel):
    """Renter preferences, read-only to the engine."""

    budget: BudgetRange = Field(default_factory=BudgetRange)
    bedrooms: CountRange = Field(default_factory=CountRange)
    amenities: List[str] = Field(default_factory=list)
    pet_policy: Optional[str] = None

    def amenity_keys(self) -> set:
        return {normalise_key(tag) for tag in self.amenities if normalise_key(tag)}


class PropertyDraft(BaseModel):
    """Partial property data a landlord submits before the listing exists."""

    property_type: Optional[str] = None
    title: Optional[str] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    square_footage: Optional[int] = Field(None, ge=0)
    city: Optional[str] = None
    state: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    rent: Optional[float] = Field(None, ge=0)

    def is_empty(self) -> bool:
        return not any(
            value not in (None, "", [])
            for value in self.model_dump().values()
        )
