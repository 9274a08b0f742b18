"""
Validation of untrusted geo-tracking input.

Every entry point either returns a typed value or raises
``RecordValidationError`` listing every failing field.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from backend.app.core.exceptions import RecordValidationError
from backend.app.domain.geo_tracking.fields import ABSENT, CLEAR, FieldChange, GeoTrackingPatch, Set
from backend.app.schemas.geo_tracking import GeoTrackingCreate, GeoTrackingUpdate

logger = logging.getLogger("geotracking.validation")

_POSITIVE_INT = re.compile(r"[0-9]+")

# Columns an update may touch, in model order
UPDATABLE_COLUMNS = tuple(GeoTrackingUpdate.model_fields)

# NOT NULL columns: a null sent for one of these is ignored rather than rejected
NOT_NULL_COLUMNS = frozenset({"user_id", "latitude", "longitude", "recorded_at"})


def _rejections(exc: ValidationError) -> List[Dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]) or "body",
            "reason": error["msg"],
        }
        for error in exc.errors()
    ]


def _require_object(payload: Any) -> List[Dict[str, str]]:
    if isinstance(payload, Mapping):
        return []
    return [{"field": "body", "reason": "must be a JSON object"}]


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_create(payload: Any) -> GeoTrackingCreate:
    """Validate a create payload, collecting every failing field."""
    errors = _require_object(payload)
    if errors:
        raise RecordValidationError(errors)

    try:
        return GeoTrackingCreate.model_validate(payload)
    except ValidationError as exc:
        errors = _rejections(exc)
        logger.warning("Rejected create payload: %s", errors)
        raise RecordValidationError(errors) from None


def validate_update(record_id: Any, payload: Any) -> GeoTrackingPatch:
    """
    Validate a partial update and classify every updatable column.

    Omitted keys become ``ABSENT``, nulls on nullable columns become
    ``CLEAR`` and everything else becomes ``Set(value)``. Nulls sent for
    NOT NULL columns are dropped to ``ABSENT``.
    """
    errors = []
    if not _is_positive_int(record_id):
        errors.append({"field": "id", "reason": "must be a positive integer"})
    errors.extend(_require_object(payload))
    if errors:
        raise RecordValidationError(errors, message="Invalid data provided for update")

    try:
        data = GeoTrackingUpdate.model_validate(payload)
    except ValidationError as exc:
        errors = _rejections(exc)
        logger.warning("Rejected update payload for record %s: %s", record_id, errors)
        raise RecordValidationError(errors, message="Invalid data provided for update") from None

    changes: Dict[str, FieldChange] = {}
    for column in UPDATABLE_COLUMNS:
        if column not in data.model_fields_set:
            changes[column] = ABSENT
            continue
        value = getattr(data, column)
        if value is not None:
            changes[column] = Set(value)
        elif column in NOT_NULL_COLUMNS:
            logger.debug("Ignoring null for NOT NULL column %s on record %s", column, record_id)
            changes[column] = ABSENT
        else:
            changes[column] = CLEAR

    return GeoTrackingPatch(record_id=record_id, changes=changes)


def _parse_positive_int(raw: str, field: str, message: str) -> int:
    if _POSITIVE_INT.fullmatch(raw) and int(raw) > 0:
        return int(raw)
    raise RecordValidationError(
        [{"field": field, "reason": "must be a positive integer"}],
        message=message,
    )


def parse_record_id(raw: str) -> int:
    """Parse the ``:id`` path segment of an update request."""
    return _parse_positive_int(raw, "id", "Invalid ID format")


def parse_user_id_filter(raw: Optional[str]) -> Optional[int]:
    """Parse the optional ``userId`` query filter; empty counts as not supplied."""
    if raw is None or raw == "":
        return None
    return _parse_positive_int(raw, "userId", "Invalid userId provided")
