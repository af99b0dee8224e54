from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, UUID4, model_validator
from decimal import Decimal
from datetime import date, datetime

from westudy.models.booking import BookingStatus


# Booking - Create (POST /bookings)
class BookingCreate(BaseModel):
    listing_id: UUID4
    check_in_date: date
    check_out_date: date
    guests: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self


# Booking - Full response (POST /bookings, GET /bookings/{id})
class Booking(BaseModel):
    id: UUID4
    listing_id: UUID4
    user_id: UUID4
    check_in_date: date
    check_out_date: date
    guests: int
    total_price: Decimal
    status: BookingStatus
    booked_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    listing: Optional[ListingSummary] = None

    class Config:
        from_attributes = True


# Booking - Admin view (GET /admin/bookings, includes user info)
class AdminBooking(Booking):
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


# POST /bookings/{id}/unlock
class UnlockResponse(BaseModel):
    success: bool
    message: str


# Import at the bottom to avoid circular imports
from westudy.schemas.listing import ListingSummary  # noqa: E402
from westudy.schemas.user import UserSummary  # noqa: E402

Booking.model_rebuild()
AdminBooking.model_rebuild()
