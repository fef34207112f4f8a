from fastapi import APIRouter

# Auth (staff)
from app.api.v1.public.auth import router as auth_router

# Public — catalog, slots, booking, loyalty
from app.api.v1.public.catalog import router as catalog_router
from app.api.v1.public.availability import router as availability_router
from app.api.v1.public.appointments import router as appointments_router
from app.api.v1.public.loyalty import router as loyalty_router

# Admin
from app.api.v1.admin.availability import (
    router as admin_professional_availability_router,
    availability_router as admin_availability_router,
)
from app.api.v1.admin.appointments import router as admin_appointments_router

api_router = APIRouter()

# --- Auth ---
api_router.include_router(auth_router)

# --- Public ---
api_router.include_router(catalog_router)
api_router.include_router(availability_router)
api_router.include_router(appointments_router)
api_router.include_router(loyalty_router)

# --- Admin ---
api_router.include_router(admin_professional_availability_router)
api_router.include_router(admin_availability_router)
api_router.include_router(admin_appointments_router)
