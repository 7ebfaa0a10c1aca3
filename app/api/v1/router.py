"""
NDC Fare Engine - API V1 Router
Main router for API version 1 endpoints
"""

from fastapi import APIRouter

from app.api.v1.endpoints import pricing
from app.core.config import settings


api_router = APIRouter()


# === Pricing Routes ===
api_router.include_router(
    pricing.router,
    prefix="/pricing",
    tags=["Pricing"]
)


# === Health Check ===
@api_router.get("/health", tags=["Health"])
async def health_check():
    """API health check endpoint."""
    return {
        "status": "healthy",
        "service": "ndc-fare-engine",
        "version": settings.APP_VERSION
    }
