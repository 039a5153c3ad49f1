"""Read-only attendance analytics and exports."""
import csv
import io
from datetime import date, datetime, timezone

from sqlalchemy import case, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_track import ActivityTrack, TrackStatus
from app.models.attendance_record import AttendanceMethod, AttendanceRecord, AttendanceType
from app.models.record import Record
from app.models.user import User
from app.schemas.activity_track import ActivityTrackResponse
from app.services.attendance.records import AttendanceService, scan_date
from app.services.attendance.tracks import ActivityTrackService

# extract("dow") numbering, Sunday first
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

EXPORT_COLUMNS = [
    ("id", "ID"),
    ("activity_track_id", "Activity Track ID"),
    ("activity_name", "Activity Name"),
    ("event_date", "Event Date"),
    ("event_time", "Event Time"),
    ("location", "Location"),
    ("record_id", "Record ID"),
    ("record_number", "Record Number"),
    ("attendance_type", "Attendance Type"),
    ("full_name", "Full Name"),
    ("cedula", "Cedula"),
    ("phone", "Phone"),
    ("attendance_method", "Attendance Method"),
    ("scanned_at", "Scanned At"),
    ("created_by_name", "Created By"),
    ("created_at", "Created At"),
]


def _scan_range(start_date: date | None, end_date: date | None) -> list:
    if start_date is None or end_date is None:
        return []
    return [scan_date().between(start_date, end_date)]


def _enum_value(value):
    return getattr(value, "value", value)


def _csv_cell(value):
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


class AttendanceAnalytics:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.attendance = AttendanceService(session)
        self.tracks = ActivityTrackService(session)

    async def overview(self, start_date: date | None = None, end_date: date | None = None) -> dict:
        if start_date and end_date:
            overall = (await self.attendance.stats_by_date_range(start_date, end_date)).model_dump(by_alias=True)
        else:
            overall = (await self.attendance.stats()).model_dump()
            overall["daily_breakdown"] = []

        per_track = (
            select(ActivityTrack.id, ActivityTrack.status, func.count(AttendanceRecord.id).label("attendance_count"))
            .outerjoin(AttendanceRecord, AttendanceRecord.activity_track_id == ActivityTrack.id)
            .group_by(ActivityTrack.id, ActivityTrack.status)
            .subquery()
        )
        activity_result = await self.session.execute(
            select(
                func.count(per_track.c.id).label("total_activities"),
                func.count(case((per_track.c.status == TrackStatus.ACTIVE, 1))).label("active_activities"),
                func.count(case((per_track.c.status == TrackStatus.COMPLETED, 1))).label("completed_activities"),
                func.avg(per_track.c.attendance_count).label("avg_attendance_per_activity"),
            )
        )
        activity_stats = dict(activity_result.mappings().one())
        average = activity_stats["avg_attendance_per_activity"]
        activity_stats["avg_attendance_per_activity"] = round(float(average), 2) if average is not None else 0.0

        top_result = await self.session.execute(
            select(
                ActivityTrack.id,
                ActivityTrack.name,
                ActivityTrack.event_date,
                func.count(AttendanceRecord.id).label("attendance_count"),
                func.count(case((AttendanceRecord.attendance_type == AttendanceType.BENEFICIARIO, 1))).label(
                    "beneficiarios_count"
                ),
                func.count(case((AttendanceRecord.attendance_type == AttendanceType.GUEST, 1))).label("guests_count"),
            )
            .outerjoin(AttendanceRecord, AttendanceRecord.activity_track_id == ActivityTrack.id)
            .group_by(ActivityTrack.id, ActivityTrack.name, ActivityTrack.event_date)
            .order_by(func.count(AttendanceRecord.id).desc(), ActivityTrack.id)
            .limit(5)
        )

        return {
            "overview": {
                "overall_stats": overall,
                "activity_stats": activity_stats,
                "top_activities": [dict(row) for row in top_result.mappings().all()],
                "attendance_trends": await self.attendance.daily_trend(days=30),
            }
        }

    async def activity_report(self, track_id: int) -> dict:
        track = await self.tracks.require(track_id)
        stats = await self.attendance.stats(track_id)
        records, _ = await self.attendance.list_by_track(track_id, page=1, limit=1000)

        def group(predicate) -> dict:
            matched = [record for record in records if predicate(record)]
            return {"count": len(matched), "records": matched}

        hourly_result = await self.session.execute(
            select(
                extract("hour", AttendanceRecord.scanned_at).label("hour"),
                func.count(AttendanceRecord.id).label("count"),
            )
            .where(AttendanceRecord.activity_track_id == track_id)
            .group_by(extract("hour", AttendanceRecord.scanned_at))
            .order_by(extract("hour", AttendanceRecord.scanned_at))
        )
        hourly = [{"hour": int(row["hour"]), "count": row["count"]} for row in hourly_result.mappings().all()]

        return {
            "activity_track": ActivityTrackResponse.model_validate(track),
            "statistics": stats,
            "breakdown": {
                "by_type": {
                    "beneficiarios": group(lambda r: r.attendance_type == AttendanceType.BENEFICIARIO),
                    "guests": group(lambda r: r.attendance_type == AttendanceType.GUEST),
                },
                "by_method": {
                    "qr_scans": group(lambda r: r.attendance_method == AttendanceMethod.QR_SCAN),
                    "manual_entries": group(lambda r: r.attendance_method == AttendanceMethod.MANUAL_FORM),
                },
                "hourly_breakdown": hourly,
            },
        }

    async def comparison(self, track_ids: list[int]) -> dict:
        """Stats side by side. Unknown ids are skipped."""
        comparison = []
        for track_id in track_ids:
            track = await self.tracks.get(track_id)
            if track is None:
                continue
            comparison.append({
                "activity_track": ActivityTrackResponse.model_validate(track),
                "statistics": await self.attendance.stats(track_id),
            })
        return {"comparison": comparison}

    async def insights(self, start_date: date | None = None, end_date: date | None = None) -> dict:
        in_range = _scan_range(start_date, end_date)
        dow = extract("dow", AttendanceRecord.scanned_at)
        hour = extract("hour", AttendanceRecord.scanned_at)
        beneficiarios = func.count(case((AttendanceRecord.attendance_type == AttendanceType.BENEFICIARIO, 1)))
        guests = func.count(case((AttendanceRecord.attendance_type == AttendanceType.GUEST, 1)))

        day_result = await self.session.execute(
            select(
                dow.label("day_number"),
                func.count(AttendanceRecord.id).label("attendance_count"),
                beneficiarios.label("beneficiarios_count"),
                guests.label("guests_count"),
            )
            .where(*in_range)
            .group_by(dow)
            .order_by(dow)
        )
        day_patterns = []
        for row in day_result.mappings().all():
            entry = dict(row)
            entry["day_number"] = int(entry["day_number"])
            entry["day_name"] = DAY_NAMES[entry["day_number"] % 7]
            day_patterns.append(entry)

        hour_result = await self.session.execute(
            select(hour.label("hour"), func.count(AttendanceRecord.id).label("attendance_count"))
            .where(*in_range)
            .group_by(hour)
            .order_by(func.count(AttendanceRecord.id).desc())
            .limit(10)
        )
        hourly_patterns = [
            {"hour": int(row["hour"]), "attendance_count": row["attendance_count"]}
            for row in hour_result.mappings().all()
        ]

        method_result = await self.session.execute(
            select(
                scan_date().label("date"),
                func.count(case((AttendanceRecord.attendance_method == AttendanceMethod.QR_SCAN, 1))).label("qr_scans"),
                func.count(case((AttendanceRecord.attendance_method == AttendanceMethod.MANUAL_FORM, 1))).label(
                    "manual_entries"
                ),
                func.count(AttendanceRecord.id).label("total"),
            )
            .where(*in_range)
            .group_by(scan_date())
            .order_by(scan_date().desc())
            .limit(30)
        )

        top_result = await self.session.execute(
            select(
                AttendanceRecord.record_id,
                AttendanceRecord.full_name,
                func.count(AttendanceRecord.id).label("attendance_count"),
                func.count(func.distinct(AttendanceRecord.activity_track_id)).label("activities_attended"),
            )
            .where(AttendanceRecord.attendance_type == AttendanceType.BENEFICIARIO, *in_range)
            .group_by(AttendanceRecord.record_id, AttendanceRecord.full_name)
            .order_by(func.count(AttendanceRecord.id).desc())
            .limit(10)
        )

        return {
            "insights": {
                "day_of_week_patterns": day_patterns,
                "hourly_patterns": hourly_patterns,
                "method_trends": [dict(row) for row in method_result.mappings().all()],
                "top_beneficiarios": [dict(row) for row in top_result.mappings().all()],
            }
        }

    async def export_rows(self, start_date: date | None = None, end_date: date | None = None) -> list[dict]:
        result = await self.session.execute(
            select(
                AttendanceRecord.id,
                AttendanceRecord.activity_track_id,
                ActivityTrack.name.label("activity_name"),
                ActivityTrack.event_date,
                ActivityTrack.event_time,
                ActivityTrack.location,
                AttendanceRecord.record_id,
                Record.record_number,
                AttendanceRecord.attendance_type,
                AttendanceRecord.full_name,
                AttendanceRecord.cedula,
                AttendanceRecord.phone,
                AttendanceRecord.attendance_method,
                AttendanceRecord.scanned_at,
                User.full_name.label("created_by_name"),
                AttendanceRecord.created_at,
            )
            .outerjoin(ActivityTrack, ActivityTrack.id == AttendanceRecord.activity_track_id)
            .outerjoin(Record, Record.id == AttendanceRecord.record_id)
            .outerjoin(User, User.id == AttendanceRecord.created_by)
            .where(*_scan_range(start_date, end_date))
            .order_by(AttendanceRecord.scanned_at.desc())
        )
        rows = []
        for row in result.mappings().all():
            entry = dict(row)
            entry["attendance_type"] = _enum_value(entry["attendance_type"])
            entry["attendance_method"] = _enum_value(entry["attendance_method"])
            rows.append(entry)
        return rows

    async def export(self, start_date: date | None = None, end_date: date | None = None) -> dict:
        rows = await self.export_rows(start_date, end_date)
        return {
            "export_data": rows,
            "metadata": {
                "total_records": len(rows),
                "export_date": datetime.now(timezone.utc).isoformat(),
                "date_range": (
                    {"start": start_date.isoformat(), "end": end_date.isoformat()}
                    if start_date and end_date
                    else "all_time"
                ),
            },
        }


def render_csv(rows: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow([header for _, header in EXPORT_COLUMNS])
    for row in rows:
        writer.writerow([_csv_cell(row.get(key)) for key, _ in EXPORT_COLUMNS])
    return buffer.getvalue()
