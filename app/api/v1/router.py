"""API v1 router configuration."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth,
    creatives,
    emails,
    health,
    usage,
    users,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(creatives.router, tags=["Creatives"])
api_router.include_router(usage.router, tags=["Usage"])
api_router.include_router(emails.router, tags=["Emails"])
