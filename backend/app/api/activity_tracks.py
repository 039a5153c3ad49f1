# backend/app/api/activity_tracks.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.deps import CurrentUser, get_current_user
from app.models.activity_track import TrackStatus
from app.schemas.activity_track import (
    ActiveScanningResponse,
    ActivityTrackAttendance,
    ActivityTrackCollection,
    ActivityTrackCreate,
    ActivityTrackCreated,
    ActivityTrackDetail,
    ActivityTrackList,
    ActivityTrackResponse,
    ActivityTrackUpdate,
)
from app.schemas.attendance import AttendanceRecordList
from app.schemas.common import MessageResponse, total_pages
from app.services.attendance.records import AttendanceService
from app.services.attendance.tracks import ActivityTrackService
from app.utils.dates import parse_date_range

router = APIRouter(prefix="/activity-tracks", tags=["activity-tracks"])


@router.post("", response_model=ActivityTrackCreated, status_code=status.HTTP_201_CREATED)
async def create_activity_track(
    data: ActivityTrackCreate,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> ActivityTrackCreated:
    track = await ActivityTrackService(session).create(data, created_by=user.id)
    return ActivityTrackCreated(
        message="Activity track created successfully",
        activity_track_id=track.id,
    )


@router.get("", response_model=ActivityTrackList)
async def list_activity_tracks(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    track_status: TrackStatus | None = Query(None, alias="status"),
    created_by: int | None = Query(None, alias="createdBy"),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> ActivityTrackList:
    tracks, total = await ActivityTrackService(session).list_tracks(
        page=page, limit=limit, status=track_status, created_by=created_by
    )
    return ActivityTrackList(
        activity_tracks=tracks,
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


@router.get("/upcoming", response_model=ActivityTrackCollection)
async def list_upcoming_activity_tracks(
    limit: int = Query(10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> ActivityTrackCollection:
    tracks = await ActivityTrackService(session).list_upcoming(limit=limit)
    return ActivityTrackCollection(activity_tracks=[ActivityTrackResponse.model_validate(t) for t in tracks])


@router.get("/date-range", response_model=ActivityTrackCollection)
async def list_activity_tracks_by_date_range(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> ActivityTrackCollection:
    start, end = parse_date_range(start_date, end_date, required=True)
    tracks = await ActivityTrackService(session).list_by_date_range(start, end)
    return ActivityTrackCollection(activity_tracks=[ActivityTrackResponse.model_validate(t) for t in tracks])


@router.get("/active-scanning", response_model=ActiveScanningResponse)
async def get_active_scanning_track(
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> ActiveScanningResponse:
    """The one track currently accepting QR scans, if any."""
    track = await ActivityTrackService(session).get_active_scanning()
    if track is None:
        return ActiveScanningResponse(message="No active scanning activity track", active_track=None)
    return ActiveScanningResponse(active_track=ActivityTrackResponse.model_validate(track))


@router.get("/{track_id}", response_model=ActivityTrackDetail)
async def get_activity_track(
    track_id: int,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> ActivityTrackDetail:
    return await ActivityTrackService(session).get_with_stats(track_id)


@router.put("/{track_id}", response_model=MessageResponse)
async def update_activity_track(
    track_id: int,
    data: ActivityTrackUpdate,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> MessageResponse:
    await ActivityTrackService(session).update(track_id, data)
    return MessageResponse(message="Activity track updated successfully")


@router.delete("/{track_id}", response_model=MessageResponse)
async def delete_activity_track(
    track_id: int,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> MessageResponse:
    await ActivityTrackService(session).delete(track_id)
    return MessageResponse(message="Activity track deleted successfully")


@router.put("/{track_id}/start-scanning", response_model=MessageResponse)
async def start_scanning(
    track_id: int,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> MessageResponse:
    """Open QR scanning on this track and close it on every other track."""
    await ActivityTrackService(session).start_scanning(track_id)
    return MessageResponse(message="QR scanning started successfully")


@router.put("/{track_id}/stop-scanning", response_model=MessageResponse)
async def stop_scanning(
    track_id: int,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> MessageResponse:
    await ActivityTrackService(session).stop_scanning(track_id)
    return MessageResponse(message="QR scanning stopped successfully")


@router.get("/{track_id}/attendance", response_model=ActivityTrackAttendance)
async def get_activity_track_attendance(
    track_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> ActivityTrackAttendance:
    track = await ActivityTrackService(session).get_with_stats(track_id)
    records, total = await AttendanceService(session).list_by_track(track_id, page=page, limit=limit)
    return ActivityTrackAttendance(
        activity_track=track,
        attendance_records=AttendanceRecordList(
            records=records,
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages(total, limit),
        ),
    )
