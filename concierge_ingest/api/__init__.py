"""
API package initialization.

Router modules:
- uploads: concierge report upload, upload history, batch errors, templates
"""

from fastapi import APIRouter

from concierge_ingest.api.uploads import router as uploads_router

# Create main API router
api_router = APIRouter()

# uploads router carries its own /concierge prefix
api_router.include_router(uploads_router)

__all__ = [
    "api_router",
    "uploads_router",
]
