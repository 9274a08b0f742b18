"""
API Router.

Aggregates all API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.endpoints import geo_tracking

router = APIRouter()

router.include_router(geo_tracking.router)
