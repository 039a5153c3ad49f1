from datetime import date, time

import pytest
from pydantic import ValidationError

from app.models.activity_track import TrackStatus
from app.schemas.activity_track import ActivityTrackCreate, ActivityTrackList, ActivityTrackUpdate
from app.schemas.attendance import (
    AttendanceCheck,
    AttendanceRecordUpdate,
    ManualAttendanceRequest,
    QRScanRequest,
)
from app.schemas.user import SessionValidation, UserRegister


def test_activity_track_create_parses_date_and_time():
    data = ActivityTrackCreate(name=" Taller ", event_date="2026-05-10", event_time="14:30")
    assert data.name == "Taller"
    assert data.event_date == date(2026, 5, 10)
    assert data.event_time == time(14, 30)


def test_activity_track_create_accepts_seconds():
    data = ActivityTrackCreate(name="Taller", event_date="2026-05-10", event_time="14:30:15")
    assert data.event_time == time(14, 30, 15)


@pytest.mark.parametrize("value", ["10/05/2026", "2026-5-10", "tomorrow"])
def test_activity_track_create_rejects_bad_date_format(value):
    with pytest.raises(ValidationError, match="Event date must be in YYYY-MM-DD format"):
        ActivityTrackCreate(name="Taller", event_date=value)


def test_activity_track_create_rejects_impossible_date():
    with pytest.raises(ValidationError, match="valid calendar date"):
        ActivityTrackCreate(name="Taller", event_date="2026-02-30")


@pytest.mark.parametrize("value", ["2pm", "14", "25:00"])
def test_activity_track_create_rejects_bad_time(value):
    with pytest.raises(ValidationError, match="HH:MM or HH:MM:SS"):
        ActivityTrackCreate(name="Taller", event_date="2026-05-10", event_time=value)


def test_activity_track_create_requires_name_and_date():
    with pytest.raises(ValidationError, match="Name and event date are required"):
        ActivityTrackCreate(event_date="2026-05-10")
    with pytest.raises(ValidationError, match="Name and event date are required"):
        ActivityTrackCreate(name="Taller")


def test_activity_track_update_keeps_only_sent_fields():
    data = ActivityTrackUpdate.model_validate({"location": "Sala 2", "scanning_active": True, "id": 9})
    assert data.model_dump(exclude_unset=True) == {"location": "Sala 2"}


def test_activity_track_update_rejects_null_status():
    with pytest.raises(ValidationError):
        ActivityTrackUpdate(status=None)


def test_activity_track_update_parses_status():
    assert ActivityTrackUpdate(status="completed").status == TrackStatus.COMPLETED


def test_activity_track_list_serializes_wire_names():
    body = ActivityTrackList(activity_tracks=[], total=0, page=1, limit=10, total_pages=0).model_dump(by_alias=True)
    assert set(body) == {"activityTracks", "total", "page", "limit", "totalPages"}


def test_qr_scan_request_reads_camel_case():
    scan = QRScanRequest.model_validate({"qrData": {"record_id": 4, "name": "Ana"}, "activityTrackId": 2})
    assert scan.qr_data.record_id == 4
    assert scan.activity_track_id == 2


@pytest.mark.parametrize("qr_data", [None, {"name": "Ana"}, {"record_id": 4}, {"record_id": 4, "name": ""}])
def test_qr_scan_request_requires_record_and_name(qr_data):
    with pytest.raises(ValidationError, match="QR data with record_id and name is required"):
        QRScanRequest.model_validate({"qrData": qr_data, "activityTrackId": 2})


def test_manual_attendance_rejects_unknown_type():
    with pytest.raises(ValidationError, match="beneficiario"):
        ManualAttendanceRequest(activity_track_id=1, attendance_type="visitor", full_name="Ana Soto")


def test_manual_beneficiario_requires_record_id():
    with pytest.raises(ValidationError, match="Record ID is required for beneficiario attendance"):
        ManualAttendanceRequest(activity_track_id=1, attendance_type="beneficiario", full_name="Ana Soto")


def test_manual_guest_without_record_id():
    entry = ManualAttendanceRequest(activity_track_id=1, attendance_type="guest", full_name=" Luis Mora ")
    assert entry.record_id is None
    assert entry.full_name == "Luis Mora"


def test_attendance_update_is_restricted_to_contact_fields():
    data = AttendanceRecordUpdate.model_validate({"phone": "88887777", "attendance_type": "guest"})
    assert data.model_dump(exclude_unset=True) == {"phone": "88887777"}


def test_attendance_check_alias():
    assert AttendanceCheck(has_attended=True).model_dump(by_alias=True) == {"hasAttended": True}


def test_session_validation_alias():
    assert SessionValidation(valid=True, user_id=3).model_dump(by_alias=True) == {"valid": True, "userId": 3}


def test_user_register_validations():
    user = UserRegister(
        username="ana",
        email="Ana@Example.org",
        password="abc123",
        full_name="Ana  Soto",
        phone="88887777",
    )
    assert user.email == "ana@example.org"
    assert user.full_name == "Ana Soto"

    with pytest.raises(ValidationError):
        UserRegister(username="ana1", email="a@b.co", password="abc123", full_name="Ana Soto")
    with pytest.raises(ValidationError):
        UserRegister(username="ana", email="a@b.co", password="abc123", full_name="Ana")
    with pytest.raises(ValidationError):
        UserRegister(username="ana", email="a@b.co", password="abc", full_name="Ana Soto")
    with pytest.raises(ValidationError):
        UserRegister(username="ana", email="a@b.co", password="abc123", full_name="Ana Soto", phone="123")
