from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from westudy.db.session import get_db
from westudy.api.deps import get_admin_credentials
from westudy.core.credentials import Credentials
from westudy.schemas.admin import BookingStatusCount, DashboardStats, MonthlyRevenuePoint
from westudy.services import admin as admin_service

router = APIRouter(prefix="/admin/dashboard", tags=["Admin - Dashboard"])


@router.get("/stats", response_model=DashboardStats)
def get_stats(
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    """
    Headline numbers for the dashboard cards.

    - `total_revenue`: platform share of confirmed and completed bookings.
    - `new_users`: accounts created in the last 30 days.
    - `pending_approvals`: rooms waiting for review.
    - `active_bookings`: confirmed bookings.
    """
    return admin_service.dashboard_stats(db, credentials)


@router.get("/monthly-revenue", response_model=List[MonthlyRevenuePoint])
def get_monthly_revenue(
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    return admin_service.monthly_revenue(db, credentials)


@router.get("/booking-status", response_model=List[BookingStatusCount])
def get_booking_status(
    db: Session = Depends(get_db),
    credentials: Credentials = Depends(get_admin_credentials),
):
    return admin_service.booking_status_breakdown(db, credentials)
