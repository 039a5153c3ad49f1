from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.attendance_record import AttendanceMethod, AttendanceType


class QRData(BaseModel):
    """Payload encoded in a beneficiary's QR code."""
    record_id: int | None = None
    name: str | None = None


class QRScanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    qr_data: QRData | None = Field(default=None, alias="qrData")
    activity_track_id: int | None = Field(default=None, alias="activityTrackId")

    @model_validator(mode="after")
    def require_payload(self):
        if self.qr_data is None or self.qr_data.record_id is None or not self.qr_data.name:
            raise ValueError("QR data with record_id and name is required")
        if self.activity_track_id is None:
            raise ValueError("Activity track ID is required")
        return self


class ManualAttendanceRequest(BaseModel):
    activity_track_id: int
    attendance_type: str
    full_name: str
    record_id: int | None = None
    cedula: str | None = None
    phone: str | None = None

    @field_validator("attendance_type")
    @classmethod
    def known_type(cls, value: str) -> str:
        if value not in {t.value for t in AttendanceType}:
            raise ValueError('Attendance type must be either "beneficiario" or "guest"')
        return value

    @field_validator("full_name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Full name is required")
        return value.strip()

    @model_validator(mode="after")
    def beneficiario_needs_record(self):
        if self.attendance_type == AttendanceType.BENEFICIARIO.value and self.record_id is None:
            raise ValueError("Record ID is required for beneficiario attendance")
        return self


class AttendanceRecordUpdate(BaseModel):
    """Corrections allowed after the fact."""
    full_name: str | None = None
    cedula: str | None = None
    phone: str | None = None

    @field_validator("full_name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            raise ValueError("Full name cannot be empty")
        return value.strip()


class AttendanceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    activity_track_id: int
    record_id: int | None
    attendance_type: AttendanceType
    full_name: str
    cedula: str | None
    phone: str | None
    attendance_method: AttendanceMethod
    scanned_at: datetime
    created_by: int
    created_at: datetime
    updated_at: datetime
    activity_track_name: str | None = None
    activity_track_date: date | None = None
    record_number: str | None = None
    created_by_name: str | None = None


class AttendanceCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    attendance_record: AttendanceRecordResponse = Field(alias="attendanceRecord")


class AttendanceRecordList(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    records: list[AttendanceRecordResponse]
    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")


class RecentAttendance(BaseModel):
    records: list[AttendanceRecordResponse]


class AttendanceStats(BaseModel):
    total_attendance: int = 0
    beneficiarios_count: int = 0
    guests_count: int = 0
    qr_scans_count: int = 0
    manual_entries_count: int = 0


class DailyAttendance(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(alias="date")
    total: int
    beneficiarios: int
    guests: int


class DateRangeStats(AttendanceStats):
    daily_breakdown: list[DailyAttendance] = []


class AttendanceStatsResponse(BaseModel):
    stats: AttendanceStats


class DateRangeStatsResponse(BaseModel):
    stats: DateRangeStats


class AttendanceCheck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_attended: bool = Field(alias="hasAttended")
