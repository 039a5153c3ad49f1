import re
from datetime import date, datetime, time
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

from app.models.activity_track import TrackStatus
from app.schemas.attendance import AttendanceRecordList

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")


def parse_event_date(value):
    if value is None or isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("Event date must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError("Event date must be a valid calendar date")


def parse_event_time(value):
    if value is None or isinstance(value, time):
        return value
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValueError("Event time must be in HH:MM or HH:MM:SS format")
    try:
        return time.fromisoformat(value)
    except ValueError:
        raise ValueError("Event time must be in HH:MM or HH:MM:SS format")


EventDate = Annotated[date | None, BeforeValidator(parse_event_date)]
EventTime = Annotated[time | None, BeforeValidator(parse_event_time)]


class ActivityTrackCreate(BaseModel):
    name: str | None = None
    description: str | None = None
    event_date: EventDate = None
    event_time: EventTime = None
    location: str | None = None
    status: TrackStatus | None = None

    @model_validator(mode="after")
    def require_name_and_date(self):
        if not (self.name and self.name.strip()) or self.event_date is None:
            raise ValueError("Name and event date are required")
        self.name = self.name.strip()
        return self


class ActivityTrackUpdate(BaseModel):
    """Fields an operator may change. Anything else in the body is ignored."""
    name: str | None = None
    description: str | None = None
    event_date: EventDate = None
    event_time: EventTime = None
    location: str | None = None
    status: TrackStatus | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str:
        if value is None or not value.strip():
            raise ValueError("Name cannot be empty")
        return value.strip()

    @field_validator("event_date", "status")
    @classmethod
    def not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be empty")
        return value


class ActivityTrackResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    event_date: date
    event_time: time | None
    location: str | None
    status: TrackStatus
    scanning_active: bool
    created_by: int
    created_at: datetime
    updated_at: datetime


class ActivityTrackDetail(ActivityTrackResponse):
    created_by_name: str | None = None
    total_attendance: int = 0
    beneficiarios_count: int = 0
    guests_count: int = 0


class ActivityTrackList(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activity_tracks: list[ActivityTrackDetail] = Field(alias="activityTracks")
    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")


class ActivityTrackCollection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activity_tracks: list[ActivityTrackResponse] = Field(alias="activityTracks")


class ActiveScanningResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str | None = None
    active_track: ActivityTrackResponse | None = Field(default=None, alias="activeTrack")


class ActivityTrackCreated(BaseModel):
    message: str
    activity_track_id: int


class ActivityTrackAttendance(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activity_track: ActivityTrackDetail = Field(alias="activityTrack")
    attendance_records: AttendanceRecordList = Field(alias="attendanceRecords")
