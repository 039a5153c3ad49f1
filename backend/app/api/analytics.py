# backend/app/api/analytics.py
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.deps import CurrentUser, get_current_user
from app.core.errors import BadRequestError
from app.services.attendance.analytics import AttendanceAnalytics, render_csv
from app.utils.dates import parse_date_range

router = APIRouter(prefix="/analytics", tags=["analytics"])


def parse_track_ids(raw: str | None) -> list[int]:
    if not raw:
        raise BadRequestError("Activity IDs are required")
    ids = []
    for part in raw.split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    if len(ids) < 2:
        raise BadRequestError("At least 2 activity IDs are required for comparison")
    return ids


@router.get("/overview")
async def get_overview(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> dict[str, Any]:
    start, end = parse_date_range(start_date, end_date)
    return await AttendanceAnalytics(session).overview(start, end)


@router.get("/activity/comparison")
async def compare_activities(
    activity_ids: str | None = Query(None, alias="activityIds"),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> dict[str, Any]:
    return await AttendanceAnalytics(session).comparison(parse_track_ids(activity_ids))


@router.get("/activity/{track_id}/report")
async def get_activity_report(
    track_id: int,
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> dict[str, Any]:
    return await AttendanceAnalytics(session).activity_report(track_id)


@router.get("/insights")
async def get_insights(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> dict[str, Any]:
    start, end = parse_date_range(start_date, end_date)
    return await AttendanceAnalytics(session).insights(start, end)


@router.get("/export", response_model=None)
async def export_attendance(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    export_format: str = Query("json", alias="format", pattern="^(json|csv)$"),
    session: AsyncSession = Depends(get_session),
    user: CurrentUser = Depends(get_current_user),
) -> dict[str, Any] | Response:
    """Every attendance in the scan-date range, as JSON or as a CSV download."""
    start, end = parse_date_range(start_date, end_date)
    analytics = AttendanceAnalytics(session)
    if export_format == "csv":
        rows = await analytics.export_rows(start, end)
        return Response(
            content=render_csv(rows),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="attendance_export.csv"'},
        )
    return await analytics.export(start, end)
