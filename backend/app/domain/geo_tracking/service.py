"""
Geo Tracking Service (Domain Logic).

Wires validation, the precision codec, the update merger and the store
together for the HTTP layer.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import RecordNotFoundError, UserNotFoundError
from backend.app.domain.geo_tracking.fields import Set
from backend.app.domain.geo_tracking.merge import build_insert_values, build_mutation
from backend.app.domain.geo_tracking.store import GeoTrackingStore
from backend.app.domain.geo_tracking.validation import validate_create, validate_update
from backend.app.models.geo_tracking import GeoTracking

logger = logging.getLogger("geotracking.service")


class GeoTrackingService:

    def __init__(self, db: AsyncSession):
        self.store = GeoTrackingStore(db)

    async def create(self, payload: Any) -> GeoTracking:
        """
        Ingest a ping or visit.

        Flow:
        1. Validate payload (all failing fields reported)
        2. Verify the referenced user exists
        3. Convert coordinates and timestamps
        4. Insert
        """
        data = validate_create(payload)

        if not await self.store.user_exists(data.user_id):
            raise UserNotFoundError(data.user_id)

        record = await self.store.insert(build_insert_values(data))
        logger.info("Geo-tracking record %s added for user %s", record.id, record.user_id)
        return record

    async def list(self, user_id: Optional[int] = None) -> List[GeoTracking]:
        return await self.store.list(user_id=user_id)

    async def update(self, record_id: int, payload: Any) -> GeoTracking:
        """
        Apply a partial update.

        Only columns present in the payload change; ``updated_at`` always does.
        """
        patch = validate_update(record_id, payload)

        existing = await self.store.get(record_id)
        if existing is None:
            raise RecordNotFoundError(record_id)

        new_user = patch.get("user_id")
        if isinstance(new_user, Set) and not await self.store.user_exists(new_user.value):
            raise UserNotFoundError(new_user.value)

        mutation = build_mutation(patch, existing)
        record = await self.store.update(record_id, mutation)
        logger.info(
            "Geo-tracking record %s updated (%s)",
            record.id, ", ".join(sorted(patch.touched)) or "no fields",
        )
        return record
