"""Attendance recording: QR scans, manual entries and the read side."""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import Date, case, cast, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, ConflictError, NotFoundError
from app.models.activity_track import ActivityTrack
from app.models.attendance_record import (
    BENEFICIARIO_UNIQUE_INDEX,
    AttendanceMethod,
    AttendanceRecord,
    AttendanceType,
)
from app.models.record import PersonalData, Record, RecordStatus
from app.models.user import User
from app.schemas.attendance import (
    AttendanceRecordResponse,
    AttendanceRecordUpdate,
    AttendanceStats,
    DailyAttendance,
    DateRangeStats,
    ManualAttendanceRequest,
    QRScanRequest,
)
from app.services.attendance.tracks import TRACK_NOT_FOUND, ActivityTrackService

logger = logging.getLogger(__name__)

DUPLICATE_ATTENDANCE = "Attendance already recorded for this beneficiario in this activity"
RECORD_NOT_FOUND = "Attendance record not found"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def attendance_counters() -> list:
    """Aggregate columns shared by every stats query."""
    return [
        func.count(AttendanceRecord.id).label("total_attendance"),
        func.count(case((AttendanceRecord.attendance_type == AttendanceType.BENEFICIARIO, 1))).label(
            "beneficiarios_count"
        ),
        func.count(case((AttendanceRecord.attendance_type == AttendanceType.GUEST, 1))).label("guests_count"),
        func.count(case((AttendanceRecord.attendance_method == AttendanceMethod.QR_SCAN, 1))).label(
            "qr_scans_count"
        ),
        func.count(case((AttendanceRecord.attendance_method == AttendanceMethod.MANUAL_FORM, 1))).label(
            "manual_entries_count"
        ),
    ]


def scan_date():
    return cast(AttendanceRecord.scanned_at, Date)


def detail_select():
    """Attendance rows with the track, beneficiary and operator columns joined in."""
    return (
        select(
            AttendanceRecord,
            ActivityTrack.name.label("activity_track_name"),
            ActivityTrack.event_date.label("activity_track_date"),
            Record.record_number.label("record_number"),
            User.full_name.label("created_by_name"),
        )
        .outerjoin(ActivityTrack, ActivityTrack.id == AttendanceRecord.activity_track_id)
        .outerjoin(Record, Record.id == AttendanceRecord.record_id)
        .outerjoin(User, User.id == AttendanceRecord.created_by)
    )


def to_response(row) -> AttendanceRecordResponse:
    record, track_name, track_date, record_number, created_by_name = row
    return AttendanceRecordResponse.model_validate(record).model_copy(
        update={
            "activity_track_name": track_name,
            "activity_track_date": track_date,
            "record_number": record_number,
            "created_by_name": created_by_name,
        }
    )


def is_duplicate_attendance(error: IntegrityError) -> bool:
    message = str(error.orig)
    return (
        BENEFICIARIO_UNIQUE_INDEX in message
        # SQLite reports the columns instead of the index name
        or "attendance_records.activity_track_id, attendance_records.record_id" in message
    )


@dataclass
class AttendanceFilters:
    activity_track_id: int | None = None
    attendance_type: AttendanceType | None = None
    attendance_method: AttendanceMethod | None = None
    start_date: date | None = None
    end_date: date | None = None

    def clauses(self) -> list:
        clauses = []
        if self.activity_track_id is not None:
            clauses.append(AttendanceRecord.activity_track_id == self.activity_track_id)
        if self.attendance_type is not None:
            clauses.append(AttendanceRecord.attendance_type == self.attendance_type)
        if self.attendance_method is not None:
            clauses.append(AttendanceRecord.attendance_method == self.attendance_method)
        if self.start_date is not None:
            clauses.append(scan_date() >= self.start_date)
        if self.end_date is not None:
            clauses.append(scan_date() <= self.end_date)
        return clauses


class AttendanceService:
    """Records attendance against activity tracks.

    A beneficiario appears at most once per track. The check below gives the
    friendly error; ``uq_attendance_records_beneficiario`` settles races
    between two operators scanning the same code.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.tracks = ActivityTrackService(session)

    async def process_qr_scan(self, request: QRScanRequest, operator_id: int) -> AttendanceRecordResponse:
        qr = request.qr_data
        active_track = await self.tracks.get_active_scanning()
        if active_track is None:
            raise BadRequestError("No active scanning activity track. Please start QR scanning first.")
        if active_track.id != request.activity_track_id:
            raise BadRequestError(
                "QR scan does not match the currently active activity track",
                extra={"activeTrackId": active_track.id},
            )

        result = await self.session.execute(
            select(Record.id, PersonalData.full_name, PersonalData.cedula, PersonalData.phone)
            .outerjoin(PersonalData, PersonalData.record_id == Record.id)
            .where(Record.id == qr.record_id, Record.status == RecordStatus.ACTIVE)
        )
        beneficiary = result.first()
        if beneficiary is None:
            raise NotFoundError("Record not found or not active")

        if await self.has_attended(active_track.id, qr.record_id):
            raise ConflictError(DUPLICATE_ATTENDANCE)

        attendance = AttendanceRecord(
            activity_track_id=active_track.id,
            record_id=qr.record_id,
            attendance_type=AttendanceType.BENEFICIARIO,
            # The beneficiary file is authoritative over the name in the code
            full_name=beneficiary.full_name or qr.name,
            cedula=beneficiary.cedula,
            phone=beneficiary.phone,
            attendance_method=AttendanceMethod.QR_SCAN,
            scanned_at=_utcnow(),
            created_by=operator_id,
        )
        await self._insert(attendance)
        logger.info(
            f"QR attendance {attendance.id} recorded for record {qr.record_id} "
            f"in activity track {active_track.id} by user {operator_id}"
        )
        return await self.require(attendance.id)

    async def create_manual(
        self, request: ManualAttendanceRequest, operator_id: int
    ) -> AttendanceRecordResponse:
        attendance_type = AttendanceType(request.attendance_type)
        if await self.tracks.get(request.activity_track_id) is None:
            raise NotFoundError(TRACK_NOT_FOUND)

        if attendance_type == AttendanceType.BENEFICIARIO:
            result = await self.session.execute(select(Record.id).where(Record.id == request.record_id))
            if result.scalar_one_or_none() is None:
                raise NotFoundError("Record not found")
            if await self.has_attended(request.activity_track_id, request.record_id):
                raise ConflictError(DUPLICATE_ATTENDANCE)

        attendance = AttendanceRecord(
            activity_track_id=request.activity_track_id,
            record_id=request.record_id if attendance_type == AttendanceType.BENEFICIARIO else None,
            attendance_type=attendance_type,
            full_name=request.full_name,
            cedula=request.cedula,
            phone=request.phone,
            attendance_method=AttendanceMethod.MANUAL_FORM,
            scanned_at=_utcnow(),
            created_by=operator_id,
        )
        await self._insert(attendance)
        logger.info(
            f"Manual {attendance_type.value} attendance {attendance.id} recorded "
            f"in activity track {request.activity_track_id} by user {operator_id}"
        )
        return await self.require(attendance.id)

    async def _insert(self, attendance: AttendanceRecord) -> None:
        self.session.add(attendance)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if is_duplicate_attendance(e):
                raise ConflictError(DUPLICATE_ATTENDANCE) from e
            raise
        await self.session.refresh(attendance)

    async def get(self, attendance_id: int) -> AttendanceRecordResponse | None:
        result = await self.session.execute(
            detail_select().where(AttendanceRecord.id == attendance_id)
        )
        row = result.first()
        return to_response(row) if row else None

    async def require(self, attendance_id: int) -> AttendanceRecordResponse:
        record = await self.get(attendance_id)
        if record is None:
            raise NotFoundError(RECORD_NOT_FOUND)
        return record

    async def list_records(
        self,
        filters: AttendanceFilters | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[AttendanceRecordResponse], int]:
        """Filtered page, most recent scan first, plus the unpaginated total."""
        clauses = (filters or AttendanceFilters()).clauses()

        count_result = await self.session.execute(
            select(func.count(AttendanceRecord.id)).where(*clauses)
        )
        total = count_result.scalar_one()

        result = await self.session.execute(
            detail_select()
            .where(*clauses)
            .order_by(AttendanceRecord.scanned_at.desc(), AttendanceRecord.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return [to_response(row) for row in result.all()], total

    async def list_by_track(
        self, track_id: int, page: int = 1, limit: int = 50
    ) -> tuple[list[AttendanceRecordResponse], int]:
        return await self.list_records(AttendanceFilters(activity_track_id=track_id), page=page, limit=limit)

    async def recent(self, limit: int = 10) -> list[AttendanceRecordResponse]:
        result = await self.session.execute(
            detail_select().order_by(AttendanceRecord.scanned_at.desc(), AttendanceRecord.id.desc()).limit(limit)
        )
        return [to_response(row) for row in result.all()]

    async def update(self, attendance_id: int, data: AttendanceRecordUpdate) -> None:
        result = await self.session.execute(
            select(AttendanceRecord).where(AttendanceRecord.id == attendance_id)
        )
        attendance = result.scalar_one_or_none()
        if attendance is None:
            raise NotFoundError(RECORD_NOT_FOUND)

        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise BadRequestError("No fields to update")
        for field, value in changes.items():
            setattr(attendance, field, value)
        await self.session.commit()
        logger.info(f"Attendance record {attendance_id} corrected: {sorted(changes)}")

    async def delete(self, attendance_id: int, operator_id: int) -> None:
        result = await self.session.execute(
            select(AttendanceRecord).where(AttendanceRecord.id == attendance_id)
        )
        attendance = result.scalar_one_or_none()
        if attendance is None:
            raise NotFoundError(RECORD_NOT_FOUND)
        await self.session.delete(attendance)
        await self.session.commit()
        logger.info(f"Attendance record {attendance_id} deleted by user {operator_id}")

    async def has_attended(self, track_id: int, record_id: int) -> bool:
        result = await self.session.execute(
            select(AttendanceRecord.id)
            .where(
                AttendanceRecord.activity_track_id == track_id,
                AttendanceRecord.record_id == record_id,
                AttendanceRecord.attendance_type == AttendanceType.BENEFICIARIO,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def stats(self, track_id: int | None = None) -> AttendanceStats:
        """Counters for one track, or for every attendance when ``track_id`` is None."""
        query = select(*attendance_counters())
        if track_id is not None:
            query = query.where(AttendanceRecord.activity_track_id == track_id)
        result = await self.session.execute(query)
        return AttendanceStats.model_validate(dict(result.mappings().one()))

    async def stats_by_date_range(self, start_date: date, end_date: date) -> DateRangeStats:
        """Counters for tracks whose event falls in the range, with a per-event-day breakdown."""
        in_range = ActivityTrack.event_date.between(start_date, end_date)

        totals = await self.session.execute(
            select(*attendance_counters())
            .join(ActivityTrack, ActivityTrack.id == AttendanceRecord.activity_track_id)
            .where(in_range)
        )
        summary = dict(totals.mappings().one())

        daily = await self.session.execute(
            select(
                ActivityTrack.event_date.label("date"),
                func.count(AttendanceRecord.id).label("total"),
                func.count(case((AttendanceRecord.attendance_type == AttendanceType.BENEFICIARIO, 1))).label(
                    "beneficiarios"
                ),
                func.count(case((AttendanceRecord.attendance_type == AttendanceType.GUEST, 1))).label("guests"),
            )
            .join(ActivityTrack, ActivityTrack.id == AttendanceRecord.activity_track_id)
            .where(in_range)
            .group_by(ActivityTrack.event_date)
            .order_by(ActivityTrack.event_date)
        )
        breakdown = [DailyAttendance.model_validate(dict(row)) for row in daily.mappings().all()]
        return DateRangeStats(**summary, daily_breakdown=breakdown)

    async def daily_trend(self, days: int = 30, now: datetime | None = None) -> list[dict]:
        since = (now or _utcnow()) - timedelta(days=days)
        result = await self.session.execute(
            select(
                scan_date().label("date"),
                func.count(AttendanceRecord.id).label("total_attendance"),
                func.count(case((AttendanceRecord.attendance_type == AttendanceType.BENEFICIARIO, 1))).label(
                    "beneficiarios_count"
                ),
                func.count(case((AttendanceRecord.attendance_type == AttendanceType.GUEST, 1))).label("guests_count"),
            )
            .where(AttendanceRecord.scanned_at >= since)
            .group_by(scan_date())
            .order_by(scan_date().desc())
        )
        return [dict(row) for row in result.mappings().all()]
