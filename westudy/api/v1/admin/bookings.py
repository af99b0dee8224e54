from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.api.deps import get_admin_credentials
from westudy.core.credentials import Credentials
from westudy.models.booking import BookingStatus
from westudy.schemas.booking import AdminBooking
from westudy.schemas.common import PaginatedResponse
from westudy.services import bookings as booking_service
from westudy.utils.pagination import page_response

router = APIRouter(prefix="/admin/bookings", tags=["Admin - Bookings"])


@router.get("/", response_model=PaginatedResponse[AdminBooking])
def list_all_bookings(
    status: Optional[BookingStatus] = Query(None, description="confirmed | pending | cancelled | completed"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    """All bookings across users, most recently booked first."""
    bookings, total = booking_service.list_all_bookings(db, credentials, status, page, limit)
    return page_response(bookings, total, page, limit, schema=AdminBooking)
