"""
Persistence for geo-tracking records.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import RecordNotFoundError, StorageError, UserNotFoundError
from backend.app.models.geo_tracking import GeoTracking
from backend.app.models.user import User

logger = logging.getLogger("geotracking.store")

# Fixed page size of the listing; there is no cursor beyond it
LIST_LIMIT = 100

# Ids are 32-bit INTEGER columns; anything larger cannot exist
MAX_ID = 2**31 - 1


def _storable_id(value: int) -> bool:
    return 0 < value <= MAX_ID


class GeoTrackingStore:
    """
    Record Store over an async SQLAlchemy session.

    ``insert`` and ``update`` each commit their own transaction, so a reader
    never sees a half-written row.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _storage_errors(self, message: str):
        try:
            yield
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("%s: %s", message, exc)
            raise StorageError(message) from exc

    async def user_exists(self, user_id: int) -> bool:
        if not _storable_id(user_id):
            return False
        async with self._storage_errors("Failed to look up user"):
            result = await self.db.execute(select(User.id).where(User.id == user_id))
            return result.scalar_one_or_none() is not None

    async def get(self, record_id: int) -> Optional[GeoTracking]:
        if not _storable_id(record_id):
            return None
        async with self._storage_errors("Failed to fetch geo-tracking record"):
            return await self.db.get(GeoTracking, record_id)

    async def insert(self, values: Dict[str, Any]) -> GeoTracking:
        record = GeoTracking(**values)
        async with self._storage_errors("Failed to add geo-tracking record"):
            self.db.add(record)
            try:
                await self.db.commit()
            except IntegrityError:
                # The user was removed between the existence check and the insert
                await self.db.rollback()
                raise UserNotFoundError(values["user_id"]) from None
            await self.db.refresh(record)
            return record

    async def update(self, record_id: int, mutation: Dict[str, Any]) -> GeoTracking:
        """Apply ``mutation`` to one record, raising ``RecordNotFoundError`` if it is gone."""
        if not _storable_id(record_id):
            raise RecordNotFoundError(record_id)

        async with self._storage_errors("Failed to update geo-tracking record"):
            record = await self.db.get(GeoTracking, record_id)
            if record is None:
                raise RecordNotFoundError(record_id)

            for column, value in mutation.items():
                setattr(record, column, value)

            await self.db.commit()
            await self.db.refresh(record)
            return record

    async def list(self, user_id: Optional[int] = None) -> List[GeoTracking]:
        """Most recent records first, optionally for a single user."""
        if user_id is not None and not _storable_id(user_id):
            return []

        query = select(GeoTracking)
        if user_id is not None:
            query = query.where(GeoTracking.user_id == user_id)
        query = query.order_by(
            GeoTracking.recorded_at.desc(), GeoTracking.id.desc()
        ).limit(LIST_LIMIT)

        async with self._storage_errors("Failed to fetch geo-tracking records"):
            result = await self.db.execute(query)
            return list(result.scalars().all())
