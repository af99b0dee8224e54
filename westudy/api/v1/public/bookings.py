from uuid import UUID
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.api.deps import get_credentials
from westudy.core.credentials import Credentials
from westudy.schemas.booking import Booking as BookingSchema, BookingCreate, UnlockResponse
from westudy.services import bookings as booking_service

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    """
    Book a room for the authenticated user.

    - 404 if the listing does not exist.
    - 409 `listing_unavailable` if the room is already taken.
    """
    return booking_service.book(
        db,
        credentials,
        listing_id=data.listing_id,
        check_in=data.check_in_date,
        check_out=data.check_out_date,
        guests=data.guests,
    )


@router.get("/", response_model=List[BookingSchema])
def list_my_bookings(
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    return booking_service.list_bookings(db, credentials)


@router.get("/{booking_id}", response_model=BookingSchema)
def get_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    return booking_service.get_booking(db, credentials, booking_id)


@router.patch("/{booking_id}/cancel", response_model=BookingSchema)
def cancel_booking(
    booking_id: UUID,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    return booking_service.cancel(db, credentials, booking_id)


@router.post("/{booking_id}/unlock", response_model=UnlockResponse)
def unlock_door(
    booking_id: UUID,
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_credentials),
):
    """Authorize a door unlock for a confirmed booking owned by the caller."""
    return booking_service.unlock(db, credentials, booking_id)
