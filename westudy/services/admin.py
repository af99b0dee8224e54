"""Admin dashboard aggregates and user management."""

import logging
import uuid
from collections import OrderedDict
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from westudy.core.config import settings
from westudy.core.credentials import Credentials
from westudy.core.errors import ConflictError, NotFoundError
from westudy.models.booking import Booking, BookingStatus
from westudy.models.listing import ApprovalStatus, Listing
from westudy.models.user import User
from westudy.schemas.admin import BookingStatusCount, DashboardStats, MonthlyRevenuePoint
from westudy.schemas.user import AdminUserUpdate
from westudy.utils.dates import utcnow
from westudy.utils.pagination import paginate
from westudy.utils.search import LIKE_ESCAPE, contains_pattern

logger = logging.getLogger(__name__)

# Statuses that represent real collected money
PAID_STATUSES = (BookingStatus.confirmed, BookingStatus.completed)

CENTS = Decimal("0.01")
NEW_USER_WINDOW_DAYS = 30
REVENUE_MONTHS = 6


def _platform_share(amount) -> Decimal:
    share = Decimal(str(amount or 0)) * Decimal(str(settings.PLATFORM_FEE_RATE))
    return share.quantize(CENTS, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


def dashboard_stats(db: Session, credentials: Credentials) -> DashboardStats:
    credentials.require_admin()

    gross = (
        db.query(func.coalesce(func.sum(Booking.total_price), 0))
        .filter(Booking.status.in_(PAID_STATUSES))
        .scalar()
    )
    new_users = (
        db.query(func.count(User.id))
        .filter(User.created_at >= utcnow() - timedelta(days=NEW_USER_WINDOW_DAYS))
        .scalar()
    )
    pending_approvals = (
        db.query(func.count(Listing.id))
        .filter(Listing.approval_status == ApprovalStatus.pending)
        .scalar()
    )
    active_bookings = (
        db.query(func.count(Booking.id))
        .filter(Booking.status == BookingStatus.confirmed)
        .scalar()
    )

    return DashboardStats(
        total_revenue=_platform_share(gross),
        new_users=new_users or 0,
        pending_approvals=pending_approvals or 0,
        active_bookings=active_bookings or 0,
    )


def _month_starts(today: date, count: int) -> List[date]:
    """First day of the last `count` months, oldest first, current month included."""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append(date(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def monthly_revenue(
    db: Session, credentials: Credentials, today: Optional[date] = None
) -> List[MonthlyRevenuePoint]:
    """
    Platform revenue per booked-at month for the last six months.

    Months without bookings are reported as zero. Grouping happens in
    Python so the query stays portable across database backends.
    """
    credentials.require_admin()
    today = today or utcnow().date()
    starts = _month_starts(today, REVENUE_MONTHS)

    since = datetime.combine(starts[0], time.min, tzinfo=timezone.utc)

    buckets = OrderedDict((d.strftime("%Y-%m"), Decimal("0")) for d in starts)
    rows = (
        db.query(Booking.booked_at, Booking.total_price)
        .filter(Booking.status.in_(PAID_STATUSES), Booking.booked_at >= since)
        .all()
    )
    for booked_at, total_price in rows:
        key = booked_at.strftime("%Y-%m")
        if key in buckets:
            buckets[key] += Decimal(str(total_price))

    return [MonthlyRevenuePoint(month=k, revenue=_platform_share(v)) for k, v in buckets.items()]


def booking_status_breakdown(db: Session, credentials: Credentials) -> List[BookingStatusCount]:
    """Number of bookings per status; every status is present, zero or not."""
    credentials.require_admin()
    counts = dict(
        db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
    )
    return [BookingStatusCount(status=s.value, count=counts.get(s, 0)) for s in BookingStatus]


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def list_users(
    db: Session, credentials: Credentials, search: Optional[str], page: int, limit: int
) -> Tuple[List[User], int]:
    credentials.require_admin()
    query = db.query(User)
    if search and search.strip():
        pattern = contains_pattern(search.strip())
        query = query.filter(
            or_(User.name.ilike(pattern, escape=LIKE_ESCAPE), User.email.ilike(pattern, escape=LIKE_ESCAPE))
        )
    return paginate(query.order_by(User.created_at.desc(), User.id), page, limit)


def update_user(
    db: Session, credentials: Credentials, user_id: uuid.UUID, data: AdminUserUpdate
) -> User:
    credentials.require_admin()
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if user.id == credentials.user_id and (
        changes.get("is_active") is False or changes.get("is_admin") is False
    ):
        raise ConflictError("Administrators cannot deactivate or demote themselves")

    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("User %s updated by %s: %s", user_id, credentials.user_id, changes)
    return user
