"""
Main API router for MockPrep

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from src.api.endpoints import analysis, mock, audio, history

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    analysis.router,
    tags=["Analysis"]
)

api_router.include_router(
    mock.router,
    prefix="/mock",
    tags=["Mock Interview"]
)

api_router.include_router(
    audio.router,
    prefix="/audio",
    tags=["Audio"]
)

api_router.include_router(
    history.router,
    prefix="/history",
    tags=["History"]
)
