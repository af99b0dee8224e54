from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from pydantic import BaseModel, Field, UUID4, field_validator, model_validator

from westudy.models.listing import ApprovalStatus
from westudy.schemas.catalog import Amenity, Category, UniversitySummary
from westudy.schemas.user import UserSummary

# Value the front end sends for "any category / any university"
ALL_SENTINEL = "__ALL__"


# Filters for GET /listings - request scoped, never persisted
class ListingFilters(BaseModel):
    search_term: Optional[str] = None
    category: Optional[str] = None
    university: Optional[str] = None  # university acronym, e.g. 'USP'
    min_price: Optional[Decimal] = Field(default=None, ge=0)
    max_price: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("search_term", "category", "university", mode="before")
    @classmethod
    def blank_or_all_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v or v == ALL_SENTINEL:
                return None
        return v

    @model_validator(mode="after")
    def check_price_bounds(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        return self


class ListingImage(BaseModel):
    url: str
    alt: Optional[str] = None

    class Config:
        from_attributes = True


# Listing card (GET /listings)
class ListingSummary(BaseModel):
    id: UUID4
    title: str
    images: List[ListingImage] = []
    monthly_price: Decimal
    address: str
    guests: int
    bedrooms: int
    beds: int
    baths: int
    rating: Decimal
    review_count: int
    university: Optional[UniversitySummary] = None
    category_id: Optional[str] = None
    room_type: str
    is_available: bool

    class Config:
        from_attributes = True


# Listing detail (GET /listings/{id})
class ListingDetail(ListingSummary):
    description: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    amenities: List[Amenity] = []
    host: Optional[UserSummary] = None
    category: Optional[Category] = None
    cancellation_policy: Optional[str] = None
    house_rules: Optional[str] = None
    safety_and_property: Optional[str] = None
    approval_status: ApprovalStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Listing submission (POST /listings, POST /admin/listings)
class ListingCreate(BaseModel):
    title: str = Field(min_length=3, max_length=255)
    description: str = ""
    monthly_price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    address: str = Field(min_length=3)
    lat: Optional[float] = None
    lng: Optional[float] = None
    guests: int = Field(default=1, ge=1)
    bedrooms: int = Field(default=1, ge=0)
    beds: int = Field(default=1, ge=0)
    baths: int = Field(default=1, ge=0)
    room_type: str = "Quarto Individual"
    university_acronym: Optional[str] = None
    category_id: Optional[str] = None
    amenity_ids: List[str] = []
    image_urls: List[str] = []
    cancellation_policy: Optional[str] = None
    house_rules: Optional[str] = None
    safety_and_property: Optional[str] = None
