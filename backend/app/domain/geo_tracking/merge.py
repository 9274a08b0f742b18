"""
Conversion of validated input into column values.

``build_mutation`` turns a classified patch into the minimal set of column
assignments; ``build_insert_values`` does the same for a full create.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from backend.app.domain.geo_tracking.fields import ABSENT, CLEAR, GeoTrackingPatch
from backend.app.domain.geo_tracking.precision import COORDINATE_COLUMNS, to_decimal
from backend.app.schemas.geo_tracking import GeoTrackingCreate

TIMESTAMP_COLUMNS = frozenset({"recorded_at", "check_in_time", "check_out_time"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return as_utc(value)


def _convert(column: str, value: Any) -> Any:
    if column in COORDINATE_COLUMNS:
        return to_decimal(value, column)
    if column in TIMESTAMP_COLUMNS:
        return _to_timestamp(value)
    return value


def next_updated_at(existing: Any = None, now: Optional[datetime] = None) -> datetime:
    """
    Timestamp for ``updated_at`` on a mutation.

    Always later than the record's previous ``updated_at``, even when the
    clock has not moved since the last write.
    """
    now = as_utc(now or utcnow())
    previous = getattr(existing, "updated_at", None)
    if previous is not None:
        previous = as_utc(previous)
        if now <= previous:
            now = previous + timedelta(microseconds=1)
    return now


def build_mutation(
    patch: GeoTrackingPatch,
    existing: Any = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the column assignments for a partial update.

    ``ABSENT`` columns never appear; ``CLEAR`` columns map to ``None``;
    ``updated_at`` is always present.
    """
    mutation: Dict[str, Any] = {}
    for column, change in patch.changes.items():
        if change is ABSENT:
            continue
        if change is CLEAR:
            mutation[column] = None
        else:
            mutation[column] = _convert(column, change.value)

    mutation["updated_at"] = next_updated_at(existing, now)
    return mutation


def build_insert_values(create: GeoTrackingCreate, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Column values for a new record, including the store-managed timestamps."""
    now = as_utc(now or utcnow())
    values = {
        column: (None if value is None else _convert(column, value))
        for column, value in create.model_dump().items()
    }
    if values["recorded_at"] is None:
        values["recorded_at"] = now
    values["created_at"] = now
    values["updated_at"] = now
    return values
