from uuid import UUID
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.api.deps import get_admin_credentials
from westudy.core.credentials import Credentials
from westudy.models.listing import ApprovalStatus
from westudy.schemas.common import PaginatedResponse
from westudy.schemas.listing import ListingCreate, ListingDetail
from westudy.services import listings as listing_service
from westudy.utils.pagination import page_response

router = APIRouter(prefix="/admin/listings", tags=["Admin - Listings"])


@router.get("/", response_model=PaginatedResponse[ListingDetail])
def list_listings(
    approval_status: Optional[ApprovalStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    """Listings in any approval state; `status=pending` is the room-approval queue."""
    listings, total = listing_service.list_by_approval_status(db, credentials, approval_status, page, limit)
    return page_response(listings, total, page, limit, schema=ListingDetail)


@router.post("/", response_model=ListingDetail, status_code=status.HTTP_201_CREATED)
def add_listing(
    data: ListingCreate,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    """Add a room directly; it is published without review."""
    return listing_service.create_listing(db, credentials, data)


@router.patch("/{listing_id}/approve", response_model=ListingDetail)
def approve_listing(
    listing_id: UUID,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    return listing_service.set_approval_status(db, credentials, listing_id, ApprovalStatus.approved)


@router.patch("/{listing_id}/reject", response_model=ListingDetail)
def reject_listing(
    listing_id: UUID,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    return listing_service.set_approval_status(db, credentials, listing_id, ApprovalStatus.rejected)
