"""VoxMail API Routes Package

This module aggregates all route handlers into a single router
that can be included in the main FastAPI application.
"""

from fastapi import APIRouter

from .auth import router as auth_router
from .emails import router as emails_router
from .voice import router as voice_router


# Create main API router
api_router = APIRouter(prefix="/api")

# Include all sub-routers
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(emails_router, prefix="/emails", tags=["emails"])
api_router.include_router(voice_router, prefix="/voice", tags=["voice"])

__all__ = ["api_router"]
