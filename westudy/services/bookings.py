"""Booking workflow: atomic availability check-and-set, cancellation, door unlock."""

import logging
import uuid
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload, selectinload

from westudy.core.config import settings
from westudy.core.credentials import Credentials
from westudy.core.errors import (
    ConflictError,
    ForbiddenError,
    ListingUnavailableError,
    NotFoundError,
    ValidationError,
)
from westudy.models.booking import Booking, BookingStatus
from westudy.models.listing import ApprovalStatus, Listing
from westudy.utils.dates import utcnow
from westudy.utils.pagination import paginate

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# Bookings that still hold the room
ACTIVE_STATUSES = (BookingStatus.confirmed,)


def quote_total(monthly_price: Decimal, check_in: date, check_out: date) -> Decimal:
    """Prorate the monthly price over the stay, one billing period = BILLING_PERIOD_DAYS nights."""
    nights = (check_out - check_in).days
    if nights <= 0:
        raise ValidationError("check_out_date must be after check_in_date")
    total = Decimal(monthly_price) * nights / settings.BILLING_PERIOD_DAYS
    return total.quantize(CENTS, rounding=ROUND_HALF_UP)


def _booking_options():
    return (
        joinedload(Booking.listing).selectinload(Listing.images),
        joinedload(Booking.listing).joinedload(Listing.university),
    )


def get_booking(db: Session, credentials: Credentials, booking_id: uuid.UUID) -> Booking:
    """Load one of the caller's bookings; other people's bookings read as missing."""
    booking = (
        db.query(Booking)
        .options(*_booking_options())
        .filter(Booking.id == booking_id, Booking.user_id == credentials.user_id)
        .first()
    )
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def book(
    db: Session,
    credentials: Credentials,
    listing_id: uuid.UUID,
    check_in: date,
    check_out: date,
    guests: int,
) -> Booking:
    """
    Reserve a listing for the caller.

    - NotFoundError if the listing does not exist or is not published.
    - ListingUnavailableError if somebody already holds it.
    - The availability flip is a single conditional UPDATE, so two
      concurrent requests cannot both win.
    """
    if guests < 1:
        raise ValidationError("guests must be at least 1")

    listing = (
        db.query(Listing)
        .filter(Listing.id == listing_id, Listing.approval_status == ApprovalStatus.approved)
        .first()
    )
    if not listing:
        raise NotFoundError("Listing not found")
    if guests > listing.guests:
        raise ValidationError(f"This room accepts at most {listing.guests} guest(s)")
    if not listing.is_available:
        raise ListingUnavailableError()

    total_price = quote_total(listing.monthly_price, check_in, check_out)

    claimed = (
        db.query(Listing)
        .filter(Listing.id == listing_id, Listing.is_available == True)  # noqa: E712
        .update({"is_available": False}, synchronize_session=False)
    )
    if claimed != 1:
        db.rollback()
        raise ListingUnavailableError()

    booking = Booking(
        user_id=credentials.user_id,
        listing_id=listing_id,
        check_in_date=check_in,
        check_out_date=check_out,
        guests=guests,
        total_price=total_price,
        status=BookingStatus.confirmed,
    )
    db.add(booking)
    db.commit()

    logger.info("Booking %s created for listing %s by %s", booking.id, listing_id, credentials.user_id)
    return get_booking(db, credentials, booking.id)


def list_bookings(db: Session, credentials: Credentials) -> List[Booking]:
    """The caller's bookings, most recent check-in first."""
    return (
        db.query(Booking)
        .options(*_booking_options())
        .filter(Booking.user_id == credentials.user_id)
        .order_by(Booking.check_in_date.desc(), Booking.booked_at.desc())
        .all()
    )


def cancel(db: Session, credentials: Credentials, booking_id: uuid.UUID) -> Booking:
    """Cancel a confirmed booking and put the room back on the market."""
    booking = get_booking(db, credentials, booking_id)
    if booking.status != BookingStatus.confirmed:
        raise ConflictError(
            f"Only confirmed bookings can be cancelled (current status: '{booking.status.value}')"
        )

    booking.status = BookingStatus.cancelled
    booking.cancelled_at = utcnow()
    _release_listing(db, booking.listing_id, exclude_booking_id=booking.id)
    db.commit()

    logger.info("Booking %s cancelled by %s", booking.id, credentials.user_id)
    return get_booking(db, credentials, booking_id)


def unlock(db: Session, credentials: Credentials, booking_id: uuid.UUID) -> dict:
    """
    Authorize a door unlock for a booking.

    Only the booking owner may unlock, and only while the booking is
    confirmed. No lock hardware is driven from here.
    """
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.user_id != credentials.user_id:
        raise ForbiddenError("You do not have permission for this booking")
    if booking.status != BookingStatus.confirmed:
        raise ForbiddenError(f"Cannot unlock a booking with status: {booking.status.value}")

    logger.info("User %s unlocked the door for booking %s", credentials.user_id, booking_id)
    return {"success": True, "message": f"Door for booking {booking_id} unlocked successfully."}


def _release_listing(db: Session, listing_id: uuid.UUID, exclude_booking_id: Optional[uuid.UUID] = None) -> None:
    """Mark a listing available again unless another booking still holds it."""
    holders = db.query(Booking.id).filter(
        Booking.listing_id == listing_id,
        Booking.status.in_(ACTIVE_STATUSES),
    )
    if exclude_booking_id is not None:
        holders = holders.filter(Booking.id != exclude_booking_id)
    if holders.first() is None:
        db.query(Listing).filter(Listing.id == listing_id).update(
            {"is_available": True}, synchronize_session=False
        )


def complete_past_bookings(db: Session, today: Optional[date] = None) -> int:
    """
    Mark confirmed bookings whose check-out date has passed as completed
    and release their listings.

    Returns the number of bookings completed.
    """
    today = today or date.today()
    finished = (
        db.query(Booking)
        .filter(Booking.status == BookingStatus.confirmed, Booking.check_out_date < today)
        .all()
    )
    if not finished:
        return 0

    for booking in finished:
        booking.status = BookingStatus.completed
    db.flush()
    for listing_id in {b.listing_id for b in finished}:
        _release_listing(db, listing_id)

    db.commit()
    return len(finished)


def list_all_bookings(
    db: Session, credentials: Credentials, status: Optional[BookingStatus], page: int, limit: int
) -> Tuple[List[Booking], int]:
    credentials.require_admin()
    query = db.query(Booking).options(joinedload(Booking.user), *_booking_options())
    if status:
        query = query.filter(Booking.status == status)
    return paginate(query.order_by(Booking.booked_at.desc(), Booking.id), page, limit)
