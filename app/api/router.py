"""
API router setup
Public booking routes and JWT-protected schedule management
"""
from fastapi import APIRouter

from app.api.routes import appointments, businesses

api_router = APIRouter()

# ============================================================================
# BUSINESS ROUTES (slots are public, /me requires JWT)
# ============================================================================
api_router.include_router(businesses.router)

# ============================================================================
# APPOINTMENT ROUTES
# ============================================================================
api_router.include_router(appointments.router)
