"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from campus_events.api.routes import auth, profile, events, applications, admin

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(profile.router)
api_router.include_router(events.router)
api_router.include_router(applications.router)
api_router.include_router(admin.router)
