from uuid import UUID
from typing import Optional
from decimal import Decimal

import pydantic
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.api.deps import get_credentials
from westudy.core.config import settings
from westudy.core.credentials import Credentials
from westudy.core.errors import ValidationError
from westudy.schemas.listing import ListingCreate, ListingDetail, ListingFilters, ListingSummary
from westudy.schemas.common import PaginatedResponse
from westudy.services import listings as listing_service
from westudy.utils.pagination import page_response

router = APIRouter(prefix="/listings", tags=["Listings"])


def listing_filters(
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    category: Optional[str] = Query(None, description="Category id, or __ALL__"),
    university: Optional[str] = Query(None, description="University acronym, or __ALL__"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
) -> ListingFilters:
    try:
        return ListingFilters(
            search_term=search_term,
            category=category,
            university=university,
            min_price=min_price,
            max_price=max_price,
        )
    except pydantic.ValidationError as exc:
        raise ValidationError(exc.errors()[0]["msg"])


@router.get("/", response_model=PaginatedResponse[ListingSummary])
def list_listings(
    filters: ListingFilters = Depends(listing_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.EXPLORE_PAGE_SIZE, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Browse published listings, newest first.

    A page shorter than `limit` is the last one.
    """
    listings, total = listing_service.list_listings(db, filters, page, limit)
    return page_response(listings, total, page, limit, schema=ListingSummary)


@router.get("/{listing_id}", response_model=ListingDetail)
def get_listing(listing_id: UUID, db: Session = Depends(get_db)):
    return listing_service.get_listing(db, listing_id)


@router.post("/", response_model=ListingDetail, status_code=status.HTTP_201_CREATED)
def submit_listing(
    data: ListingCreate,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    """Submit a room; it becomes browsable once an administrator approves it."""
    return listing_service.create_listing(db, credentials, data)
