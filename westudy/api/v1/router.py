from fastapi import APIRouter

# Auth
from westudy.api.v1.public.auth import router as auth_router

# Public - discovery
from westudy.api.v1.public.listings import router as public_listings_router
from westudy.api.v1.public.catalog import router as catalog_router

# Public - bookings
from westudy.api.v1.public.bookings import router as bookings_router

# Public - messages
from westudy.api.v1.public.messages import router as messages_router

# Public - user profile
from westudy.api.v1.public.me import router as me_router

# Admin
from westudy.api.v1.admin.dashboard import router as dashboard_router
from westudy.api.v1.admin.users import router as admin_users_router
from westudy.api.v1.admin.bookings import router as admin_bookings_router
from westudy.api.v1.admin.listings import router as admin_listings_router

api_router = APIRouter()

# --- Auth ---
api_router.include_router(auth_router)

# --- Public: discovery ---
api_router.include_router(public_listings_router)
api_router.include_router(catalog_router)

# --- Public: bookings ---
api_router.include_router(bookings_router)

# --- Public: messages ---
api_router.include_router(messages_router)

# --- Public: profile ---
api_router.include_router(me_router)

# --- Admin ---
api_router.include_router(dashboard_router)
api_router.include_router(admin_users_router)
api_router.include_router(admin_bookings_router)
api_router.include_router(admin_listings_router)
