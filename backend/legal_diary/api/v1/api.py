"""
Main API router aggregator
"""
from fastapi import APIRouter

from legal_diary.api.v1.endpoints import (
    calendar,
    cases,
    dashboard,
    google,
    health,
    hearings,
)

api_router = APIRouter()

# Include routers
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(hearings.router, prefix="/hearings", tags=["Hearings"])
api_router.include_router(cases.router, prefix="/cases", tags=["Cases"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["Calendar"])
api_router.include_router(google.router, prefix="/google", tags=["Google Calendar"])
api_router.include_router(health.router, prefix="/health", tags=["Health"])
