# backend/app/api/attendance_records.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.deps import CurrentUser, get_current_user, require_admin
from app.models.attendance_record import AttendanceMethod, AttendanceType
from app.schemas.attendance import (
    AttendanceCheck,
    AttendanceCreated,
    AttendanceRecordList,
    AttendanceRecordResponse,
    AttendanceRecordUpdate,
    AttendanceStatsResponse,
    DateRangeStatsResponse,
    ManualAttendanceRequest,
    QRScanRequest,
    RecentAttendance,
)
from app.schemas.common import MessageResponse, total_pages
from app.services.attendance.records import AttendanceFilters, AttendanceService
from app.utils.dates import parse_date, parse_date_range

router = APIRouter(prefix="/attendance-records", tags=["attendance-records"])


@router.post("/qr-scan", response_model=AttendanceCreated, status_code=status.HTTP_201_CREATED)
async def process_qr_scan(
    scan: QRScanRequest,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> AttendanceCreated:
    """Record a beneficiario from a scanned QR code against the scanning track."""
    record = await AttendanceService(session).process_qr_scan(scan, operator_id=user.id)
    return AttendanceCreated(
        message="Attendance recorded successfully via QR scan",
        attendance_record=record,
    )


@router.post("/manual", response_model=AttendanceCreated, status_code=status.HTTP_201_CREATED)
async def create_manual_attendance(
    entry: ManualAttendanceRequest,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> AttendanceCreated:
    record = await AttendanceService(session).create_manual(entry, operator_id=user.id)
    return AttendanceCreated(
        message="Attendance recorded successfully via manual entry",
        attendance_record=record,
    )


@router.get("", response_model=AttendanceRecordList)
async def list_attendance_records(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    activity_track_id: int | None = Query(None, alias="activityTrackId"),
    attendance_type: AttendanceType | None = Query(None, alias="attendanceType"),
    attendance_method: AttendanceMethod | None = Query(None, alias="attendanceMethod"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> AttendanceRecordList:
    filters = AttendanceFilters(
        activity_track_id=activity_track_id,
        attendance_type=attendance_type,
        attendance_method=attendance_method,
        start_date=parse_date(start_date),
        end_date=parse_date(end_date),
    )
    records, total = await AttendanceService(session).list_records(filters, page=page, limit=limit)
    return AttendanceRecordList(
        records=records,
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


@router.get("/recent", response_model=RecentAttendance)
async def list_recent_attendance(
    limit: int = Query(10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> RecentAttendance:
    return RecentAttendance(records=await AttendanceService(session).recent(limit=limit))


@router.get("/stats/date-range", response_model=DateRangeStatsResponse)
async def get_stats_by_date_range(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> DateRangeStatsResponse:
    start, end = parse_date_range(start_date, end_date, required=True)
    return DateRangeStatsResponse(stats=await AttendanceService(session).stats_by_date_range(start, end))


@router.get("/activity-track/{track_id}", response_model=AttendanceRecordList)
async def list_attendance_by_track(
    track_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> AttendanceRecordList:
    records, total = await AttendanceService(session).list_by_track(track_id, page=page, limit=limit)
    return AttendanceRecordList(
        records=records,
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


@router.get("/activity-track/{track_id}/stats", response_model=AttendanceStatsResponse)
async def get_track_stats(
    track_id: int,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> AttendanceStatsResponse:
    return AttendanceStatsResponse(stats=await AttendanceService(session).stats(track_id))


@router.get("/activity-track/{track_id}/check/{record_id}", response_model=AttendanceCheck)
async def check_beneficiario_attendance(
    track_id: int,
    record_id: int,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> AttendanceCheck:
    return AttendanceCheck(has_attended=await AttendanceService(session).has_attended(track_id, record_id))


@router.get("/{attendance_id}", response_model=AttendanceRecordResponse)
async def get_attendance_record(
    attendance_id: int,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> AttendanceRecordResponse:
    return await AttendanceService(session).require(attendance_id)


@router.put("/{attendance_id}", response_model=MessageResponse)
async def update_attendance_record(
    attendance_id: int,
    data: AttendanceRecordUpdate,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> MessageResponse:
    """Correct the contact details of an attendance."""
    await AttendanceService(session).update(attendance_id, data)
    return MessageResponse(message="Attendance record updated successfully")


@router.delete("/{attendance_id}", response_model=MessageResponse)
async def delete_attendance_record(
    attendance_id: int,
    session: AsyncSession = Depends(get_session),
    admin: CurrentUser = Depends(require_admin),
) -> MessageResponse:
    await AttendanceService(session).delete(attendance_id, operator_id=admin.id)
    return MessageResponse(message="Attendance record deleted successfully")
