
from fastapi import APIRouter

# Theaters: seat map design
from app.api.v1.public.theaters import router as theaters_router

# Events: browse, organizer CRUD, seat map
from app.api.v1.public.events import router as events_router

# Bookings
from app.api.v1.public.bookings import router as bookings_router

# Admin
from app.api.v1.admin.events import router as admin_events_router
from app.api.v1.admin.bookings import router as admin_bookings_router
from app.api.v1.admin.users import router as admin_users_router

api_router = APIRouter()

# --- Theaters ---
api_router.include_router(theaters_router)

# --- Events ---
api_router.include_router(events_router)

# --- Bookings ---
api_router.include_router(bookings_router)

# --- Admin ---
api_router.include_router(admin_events_router)
api_router.include_router(admin_bookings_router)
api_router.include_router(admin_users_router)
