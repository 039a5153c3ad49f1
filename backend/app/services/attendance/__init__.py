from app.services.attendance.tracks import ActivityTrackService
from app.services.attendance.records import AttendanceFilters, AttendanceService
from app.services.attendance.analytics import AttendanceAnalytics, render_csv

__all__ = [
    "ActivityTrackService",
    "AttendanceFilters",
    "AttendanceService",
    "AttendanceAnalytics",
    "render_csv",
]
