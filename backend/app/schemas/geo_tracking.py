"""
Geo Tracking Pydantic schemas.

Request models carry the per-field constraints; the response model is the
canonical stored representation returned by every endpoint.
"""

import ipaddress
import re
from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    AnyUrl,
    AwareDatetime,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from backend.app.domain.geo_tracking.precision import LATITUDE, LONGITUDE, render
from backend.app.models.enums import ActivityType

_url_adapter = TypeAdapter(AnyUrl)

# YYYY-MM-DDTHH:MM[:SS[.fff]] followed by Z or a numeric offset
_ISO_DATETIME = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})",
    re.ASCII,
)


def _require_iso_string(value: Any) -> Any:
    if value is None:
        return value
    if not isinstance(value, str) or not _ISO_DATETIME.fullmatch(value):
        raise ValueError("must be an ISO-8601 date-time string with a timezone")
    return value


def _check_ip_address(value: str) -> str:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        raise ValueError("must be a valid IPv4 or IPv6 address") from None
    return value


def _check_url(value: str) -> str:
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid URL") from None
    return value


IsoDateTime = Annotated[AwareDatetime, BeforeValidator(_require_iso_string)]
IpAddressStr = Annotated[StrictStr, AfterValidator(_check_ip_address)]
UrlStr = Annotated[StrictStr, AfterValidator(_check_url)]
Percentage = Annotated[StrictFloat, Field(ge=0, le=100)]
Latitude = Annotated[StrictFloat, Field(ge=-90, le=90)]
Longitude = Annotated[StrictFloat, Field(ge=-180, le=180)]
UserId = Annotated[StrictInt, Field(gt=0)]


class _GeoTrackingFields(BaseModel):
    """Optional device and visit fields shared by create and update payloads."""

    # Only the camelCase keys count; snake_case keys are unknown and dropped
    model_config = ConfigDict(
        alias_generator=to_camel,
        use_enum_values=True,
        allow_inf_nan=False,
        extra="ignore",
    )

    # Device / context metadata
    speed: Optional[StrictFloat] = None
    heading: Optional[StrictFloat] = None
    accuracy: Optional[StrictFloat] = None
    altitude: Optional[StrictFloat] = None
    provider: Optional[StrictStr] = None
    batt: Optional[Percentage] = None
    is_charging: Optional[StrictBool] = None
    network: Optional[StrictStr] = None
    connection_type: Optional[StrictStr] = None
    wifi_status: Optional[StrictBool] = None
    ip_address: Optional[IpAddressStr] = None
    location_type: Optional[StrictStr] = None
    activity_type: Optional[ActivityType] = None
    activity_confidence: Optional[Percentage] = None
    app_state: Optional[StrictStr] = None

    # Visit metadata
    check_in_time: Optional[IsoDateTime] = None
    check_out_time: Optional[IsoDateTime] = None
    visit_purpose: Optional[StrictStr] = None
    site_name: Optional[StrictStr] = None
    address: Optional[StrictStr] = None
    check_in_photo_url: Optional[UrlStr] = None
    check_out_photo_url: Optional[UrlStr] = None


class GeoTrackingCreate(_GeoTrackingFields):
    """Schema for ingesting a new ping or visit."""
    user_id: UserId
    latitude: Latitude
    longitude: Longitude
    # Omitted means "now"; an explicit null is rejected
    recorded_at: IsoDateTime = None


class GeoTrackingUpdate(_GeoTrackingFields):
    """
    Schema for a partial update.

    Presence is read from ``model_fields_set``; a ``None`` attribute alone
    does not tell an omitted key from an explicit null.
    """
    user_id: Optional[UserId] = None
    latitude: Optional[Latitude] = None
    longitude: Optional[Longitude] = None
    recorded_at: Optional[IsoDateTime] = None


class GeoTrackingResponse(BaseModel):
    """Stored geo-tracking record as returned by the API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    user_id: int
    latitude: str
    longitude: str
    recorded_at: datetime

    speed: Optional[float] = None
    heading: Optional[float] = None
    accuracy: Optional[float] = None
    altitude: Optional[float] = None
    provider: Optional[str] = None
    batt: Optional[float] = None
    is_charging: Optional[bool] = None
    network: Optional[str] = None
    connection_type: Optional[str] = None
    wifi_status: Optional[bool] = None
    ip_address: Optional[str] = None
    location_type: Optional[str] = None
    activity_type: Optional[str] = None
    activity_confidence: Optional[float] = None
    app_state: Optional[str] = None

    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    visit_purpose: Optional[str] = None
    site_name: Optional[str] = None
    address: Optional[str] = None
    check_in_photo_url: Optional[str] = None
    check_out_photo_url: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    @field_validator("latitude", mode="before")
    @classmethod
    def render_latitude(cls, value: Any) -> str:
        return render(value, LATITUDE)

    @field_validator("longitude", mode="before")
    @classmethod
    def render_longitude(cls, value: Any) -> str:
        return render(value, LONGITUDE)

    @field_validator("recorded_at", "check_in_time", "check_out_time", "created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive datetimes; everything is written in UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
