from westudy.schemas.common import PaginatedResponse, ErrorResponse, MessageResponse
from westudy.schemas.user import (
    User, UserCreate, AdminCreate, LoginRequest, UserUpdate, AdminUserUpdate,
    UserSummary, Token, ForgotPasswordRequest, ResetPasswordRequest,
)
from westudy.schemas.catalog import Category, Amenity, UniversityArea, UniversitySummary
from westudy.schemas.listing import (
    ListingFilters, ListingImage, ListingSummary, ListingDetail, ListingCreate,
)
from westudy.schemas.booking import Booking, BookingCreate, AdminBooking, UnlockResponse
from westudy.schemas.message import ChatMessage, ChatConversation, ConversationCreate, MessageCreate
from westudy.schemas.admin import DashboardStats, MonthlyRevenuePoint, BookingStatusCount
