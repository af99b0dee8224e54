from decimal import Decimal
from pydantic import BaseModel


# Admin dashboard (GET /admin/dashboard/stats)
class DashboardStats(BaseModel):
    total_revenue: Decimal
    new_users: int
    pending_approvals: int
    active_bookings: int


class MonthlyRevenuePoint(BaseModel):
    month: str  # YYYY-MM
    revenue: Decimal


class BookingStatusCount(BaseModel):
    status: str
    count: int
