"""
Geo Tracking API Endpoints.

Mobile field agents post location pings and visits; the history views list
and correct them.
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.domain.geo_tracking.service import GeoTrackingService
from backend.app.domain.geo_tracking.validation import parse_record_id, parse_user_id_filter
from backend.app.schemas.geo_tracking import GeoTrackingResponse

router = APIRouter(prefix="/geo-tracking", tags=["Geo Tracking"])


async def get_geo_tracking_service(db: AsyncSession = Depends(get_db)) -> GeoTrackingService:
    return GeoTrackingService(db)


@router.post("", response_model=GeoTrackingResponse, status_code=status.HTTP_201_CREATED)
async def create_geo_tracking(
    payload: Any = Body(...),
    service: GeoTrackingService = Depends(get_geo_tracking_service)
):
    """
    Add a new geo-tracking record (live ping or visit).

    Returns 400 with every failing field, or 404 if the user does not exist.
    """
    record = await service.create(payload)
    return GeoTrackingResponse.model_validate(record)


@router.get("", response_model=List[GeoTrackingResponse])
async def list_geo_tracking(
    user_id: Optional[str] = Query(None, alias="userId", description="Only this user's records"),
    service: GeoTrackingService = Depends(get_geo_tracking_service)
):
    """
    List the 100 most recent records, newest first.
    """
    records = await service.list(user_id=parse_user_id_filter(user_id))
    return [GeoTrackingResponse.model_validate(record) for record in records]


@router.patch("/{record_id}", response_model=GeoTrackingResponse)
async def update_geo_tracking(
    record_id: str = Path(..., description="Geo-tracking record ID"),
    payload: Any = Body(...),
    service: GeoTrackingService = Depends(get_geo_tracking_service)
):
    """
    Update an existing geo-tracking record.

    Only fields present in the body change; an explicit null clears a nullable field.
    """
    record = await service.update(parse_record_id(record_id), payload)
    return GeoTrackingResponse.model_validate(record)
