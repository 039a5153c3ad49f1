from app.models.base import Base, TimestampMixin
from app.models.user import User, Role, UserStatus, user_roles
from app.models.record import Record, PersonalData, RecordStatus
from app.models.activity_track import ActivityTrack, TrackStatus
from app.models.attendance_record import AttendanceRecord, AttendanceType, AttendanceMethod

__all__ = [
    "Base", "TimestampMixin",
    "User", "Role", "UserStatus", "user_roles",
    "Record", "PersonalData", "RecordStatus",
    "ActivityTrack", "TrackStatus",
    "AttendanceRecord", "AttendanceType", "AttendanceMethod",
]
