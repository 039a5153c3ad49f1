from app.schemas.common import MessageResponse
from app.schemas.activity_track import (
    ActivityTrackCreate,
    ActivityTrackUpdate,
    ActivityTrackResponse,
    ActivityTrackDetail,
    ActivityTrackList,
)
from app.schemas.attendance import (
    QRScanRequest,
    ManualAttendanceRequest,
    AttendanceRecordUpdate,
    AttendanceRecordResponse,
    AttendanceRecordList,
    AttendanceStats,
)

__all__ = [
    "MessageResponse",
    "ActivityTrackCreate",
    "ActivityTrackUpdate",
    "ActivityTrackResponse",
    "ActivityTrackDetail",
    "ActivityTrackList",
    "QRScanRequest",
    "ManualAttendanceRequest",
    "AttendanceRecordUpdate",
    "AttendanceRecordResponse",
    "AttendanceRecordList",
    "AttendanceStats",
]
