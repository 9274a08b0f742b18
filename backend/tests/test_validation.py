"""
Unit tests for create/update validation and field classification.
"""

from datetime import datetime, timezone

import pytest

from backend.app.core.exceptions import RecordValidationError
from backend.app.domain.geo_tracking.fields import ABSENT, CLEAR, Set
from backend.app.domain.geo_tracking.validation import (
    parse_record_id,
    parse_user_id_filter,
    validate_create,
    validate_update,
)


def ping(**overrides):
    payload = {"userId": 7, "latitude": 19.076, "longitude": 72.8777}
    payload.update(overrides)
    return payload


# Create

def test_minimal_ping_is_accepted():
    data = validate_create(ping())
    assert data.user_id == 7
    assert data.latitude == 19.076
    assert data.recorded_at is None


@pytest.mark.parametrize("latitude, longitude", [(90, -180), (-90, 180), (0, 0)])
def test_coordinate_bounds_are_inclusive(latitude, longitude):
    data = validate_create(ping(latitude=latitude, longitude=longitude))
    assert (data.latitude, data.longitude) == (latitude, longitude)


def test_out_of_range_coordinates_are_both_reported():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_create(ping(latitude=91, longitude=-181))

    assert sorted(exc_info.value.fields) == ["latitude", "longitude"]
    assert exc_info.value.status_code == 400


def test_every_failing_field_is_reported():
    payload = {
        "latitude": "19.07",
        "longitude": 72.8,
        "batt": 120,
        "isCharging": "yes",
        "ipAddress": "999.1.1.1",
        "checkInPhotoUrl": "not a url",
        "recordedAt": "yesterday",
    }
    with pytest.raises(RecordValidationError) as exc_info:
        validate_create(payload)

    assert set(exc_info.value.fields) == {
        "userId", "latitude", "batt", "isCharging", "ipAddress", "checkInPhotoUrl", "recordedAt"
    }
    for error in exc_info.value.errors:
        assert error["reason"]


@pytest.mark.parametrize("user_id", [0, -3, "7", True, 1.5])
def test_user_id_must_be_positive_integer(user_id):
    with pytest.raises(RecordValidationError) as exc_info:
        validate_create(ping(userId=user_id))
    assert exc_info.value.fields == ["userId"]


@pytest.mark.parametrize("activity", ["still", "in_vehicle"])
def test_known_activity_types_are_accepted(activity):
    assert validate_create(ping(activityType=activity)).activity_type == activity


def test_unknown_activity_type_is_rejected_on_create():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_create(ping(activityType="walking"))
    assert exc_info.value.fields == ["activityType"]


@pytest.mark.parametrize("address", ["10.0.0.1", "2001:db8::1"])
def test_ip_addresses_of_both_families_are_accepted(address):
    assert validate_create(ping(ipAddress=address)).ip_address == address


def test_timestamps_are_parsed():
    data = validate_create(ping(
        recordedAt="2024-05-01T10:00:00Z",
        checkInTime="2024-05-01T09:30:00+05:30",
        checkOutTime=None,
    ))
    assert data.recorded_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert data.check_in_time.utcoffset().total_seconds() == 5.5 * 3600
    assert data.check_out_time is None


def test_timestamp_without_timezone_is_rejected():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_create(ping(checkInTime="2024-05-01T09:30:00"))
    assert exc_info.value.fields == ["checkInTime"]


def test_recorded_at_cannot_be_null_on_create():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_create(ping(recordedAt=None))
    assert exc_info.value.fields == ["recordedAt"]


def test_unix_timestamp_number_is_not_a_timestamp():
    with pytest.raises(RecordValidationError):
        validate_create(ping(recordedAt=1714557600))


@pytest.mark.parametrize("value", ["1714557600", "1714557600.5", "2024-05-01 10:00:00Z", "2024-05-01"])
def test_timestamp_strings_must_be_iso_with_t_separator(value):
    with pytest.raises(RecordValidationError) as exc_info:
        validate_create(ping(recordedAt=value))
    assert exc_info.value.fields == ["recordedAt"]

    with pytest.raises(RecordValidationError) as exc_info:
        validate_update(5, {"checkInTime": value})
    assert exc_info.value.fields == ["checkInTime"]


@pytest.mark.parametrize("value", ["2024-05-01T10:00:00Z", "2024-05-01T10:00:00.123+05:30"])
def test_iso_timestamp_variants_are_accepted(value):
    assert validate_create(ping(recordedAt=value)).recorded_at.tzinfo is not None


def test_snake_case_keys_do_not_fill_fields():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_create({"user_id": 7, "latitude": 19.076, "longitude": 72.8777})
    assert exc_info.value.fields == ["userId"]

    assert validate_create(ping(is_charging=True)).is_charging is None


def test_non_object_body_is_rejected():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_create([ping()])
    assert exc_info.value.fields == ["body"]


def test_unknown_keys_are_ignored():
    data = validate_create(ping(deviceModel="Pixel"))
    assert not hasattr(data, "deviceModel")


# Update

def test_update_classifies_absent_clear_and_set():
    patch = validate_update(5, {"batt": 42, "checkOutTime": None})

    assert patch.record_id == 5
    assert patch.get("batt") == Set(42)
    assert patch.get("check_out_time") is CLEAR
    assert patch.get("check_in_time") is ABSENT
    assert patch.get("latitude") is ABSENT
    assert patch.touched == {"batt": 42, "check_out_time": None}


def test_null_on_not_null_columns_is_ignored():
    patch = validate_update(5, {"latitude": None, "longitude": None, "recordedAt": None, "userId": None})
    assert patch.touched == {}


def test_update_applies_create_constraints():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_update(5, {"activityType": "walking", "latitude": 91, "activityConfidence": -1})
    assert sorted(exc_info.value.fields) == ["activityConfidence", "activityType", "latitude"]


def test_update_accepts_known_activity_type():
    assert validate_update(5, {"activityType": "in_vehicle"}).get("activity_type") == Set("in_vehicle")


@pytest.mark.parametrize("record_id", [0, -1, "5", None])
def test_update_requires_positive_id(record_id):
    with pytest.raises(RecordValidationError) as exc_info:
        validate_update(record_id, {"batt": 1})
    assert exc_info.value.fields == ["id"]


def test_empty_update_touches_nothing():
    assert validate_update(1, {}).touched == {}


def test_snake_case_null_does_not_clear():
    patch = validate_update(1, {"check_out_time": None, "visit_purpose": "Audit"})
    assert patch.touched == {}
    assert patch.get("check_out_time") is ABSENT


# Path and query parsing

def test_parse_record_id():
    assert parse_record_id("12") == 12
    for raw in ["0", "-1", "1.5", "abc", "", "١٢"]:
        with pytest.raises(RecordValidationError):
            parse_record_id(raw)


def test_parse_user_id_filter():
    assert parse_user_id_filter(None) is None
    assert parse_user_id_filter("") is None
    assert parse_user_id_filter("7") == 7
    with pytest.raises(RecordValidationError) as exc_info:
        parse_user_id_filter("seven")
    assert exc_info.value.fields == ["userId"]
