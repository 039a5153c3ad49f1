"""Activity track lifecycle and the global QR-scanning window."""
import logging
from datetime import date

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, ConflictError, NotFoundError
from app.models.activity_track import ActivityTrack, TrackStatus
from app.models.attendance_record import AttendanceRecord, AttendanceType
from app.models.user import User
from app.schemas.activity_track import (
    ActivityTrackCreate,
    ActivityTrackDetail,
    ActivityTrackResponse,
    ActivityTrackUpdate,
)

logger = logging.getLogger(__name__)

TRACK_NOT_FOUND = "Activity track not found"


def _attendance_counts():
    return (
        select(
            AttendanceRecord.activity_track_id.label("activity_track_id"),
            func.count(AttendanceRecord.id).label("total_attendance"),
            func.count(case((AttendanceRecord.attendance_type == AttendanceType.BENEFICIARIO, 1))).label(
                "beneficiarios_count"
            ),
            func.count(case((AttendanceRecord.attendance_type == AttendanceType.GUEST, 1))).label("guests_count"),
        )
        .group_by(AttendanceRecord.activity_track_id)
        .subquery()
    )


def _detail_select():
    counts = _attendance_counts()
    return (
        select(
            ActivityTrack,
            User.full_name.label("created_by_name"),
            func.coalesce(counts.c.total_attendance, 0).label("total_attendance"),
            func.coalesce(counts.c.beneficiarios_count, 0).label("beneficiarios_count"),
            func.coalesce(counts.c.guests_count, 0).label("guests_count"),
        )
        .outerjoin(User, User.id == ActivityTrack.created_by)
        .outerjoin(counts, counts.c.activity_track_id == ActivityTrack.id)
    )


def to_detail(row) -> ActivityTrackDetail:
    track, created_by_name, total, beneficiarios, guests = row
    return ActivityTrackDetail(
        **ActivityTrackResponse.model_validate(track).model_dump(),
        created_by_name=created_by_name,
        total_attendance=total or 0,
        beneficiarios_count=beneficiarios or 0,
        guests_count=guests or 0,
    )


class ActivityTrackService:
    """Activity track operations bound to one database session.

    At most one track system-wide has ``scanning_active`` set. The partial
    unique index ``uq_activity_tracks_scanning_active`` backs that up when two
    operators start scanning at the same moment.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, data: ActivityTrackCreate, created_by: int) -> ActivityTrack:
        track = ActivityTrack(
            name=data.name,
            description=data.description,
            event_date=data.event_date,
            event_time=data.event_time,
            location=data.location,
            status=data.status or TrackStatus.ACTIVE,
            scanning_active=False,
            created_by=created_by,
        )
        self.session.add(track)
        await self.session.commit()
        await self.session.refresh(track)
        logger.info(f"Activity track {track.id} created by user {created_by}")
        return track

    async def get(self, track_id: int) -> ActivityTrack | None:
        result = await self.session.execute(
            select(ActivityTrack).where(ActivityTrack.id == track_id)
        )
        return result.scalar_one_or_none()

    async def require(self, track_id: int) -> ActivityTrack:
        track = await self.get(track_id)
        if track is None:
            raise NotFoundError(TRACK_NOT_FOUND)
        return track

    async def get_with_stats(self, track_id: int) -> ActivityTrackDetail:
        result = await self.session.execute(
            _detail_select().where(ActivityTrack.id == track_id)
        )
        row = result.first()
        if row is None:
            raise NotFoundError(TRACK_NOT_FOUND)
        return to_detail(row)

    async def list_tracks(
        self,
        page: int = 1,
        limit: int = 10,
        status: TrackStatus | None = None,
        created_by: int | None = None,
    ) -> tuple[list[ActivityTrackDetail], int]:
        """Page of tracks with attendance counters, newest event first."""
        filters = []
        if status is not None:
            filters.append(ActivityTrack.status == status)
        if created_by is not None:
            filters.append(ActivityTrack.created_by == created_by)

        count_result = await self.session.execute(
            select(func.count()).select_from(ActivityTrack).where(*filters)
        )
        total = count_result.scalar_one()

        result = await self.session.execute(
            _detail_select()
            .where(*filters)
            .order_by(ActivityTrack.event_date.desc(), ActivityTrack.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return [to_detail(row) for row in result.all()], total

    async def update(self, track_id: int, data: ActivityTrackUpdate) -> ActivityTrack:
        track = await self.require(track_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise BadRequestError("No fields to update")

        for field, value in changes.items():
            setattr(track, field, value)

        # Only active tracks may hold the scanning window
        if track.status != TrackStatus.ACTIVE and track.scanning_active:
            track.scanning_active = False
            logger.info(f"QR scanning closed for activity track {track_id} (status {track.status.value})")

        await self.session.commit()
        await self.session.refresh(track)
        return track

    async def delete(self, track_id: int) -> None:
        track = await self.require(track_id)
        result = await self.session.execute(
            select(func.count(AttendanceRecord.id)).where(AttendanceRecord.activity_track_id == track_id)
        )
        attendance_count = result.scalar_one()
        if attendance_count:
            raise ConflictError(
                "Cannot delete an activity track that has attendance records",
                details=f"{attendance_count} attendance records reference this activity track",
            )

        await self.session.delete(track)
        try:
            await self.session.commit()
        except IntegrityError as e:
            # Attendance was recorded between the check and the delete
            await self.session.rollback()
            raise ConflictError("Cannot delete an activity track that has attendance records") from e
        logger.info(f"Activity track {track_id} deleted")

    async def start_scanning(self, track_id: int) -> ActivityTrack:
        """Open the scanning window on ``track_id`` and close it everywhere else."""
        track = await self.require(track_id)
        if track.status != TrackStatus.ACTIVE:
            raise BadRequestError("Only active activity tracks can have QR scanning enabled")

        try:
            await self.session.execute(
                update(ActivityTrack)
                .where(ActivityTrack.scanning_active.is_(True), ActivityTrack.id != track_id)
                .values(scanning_active=False)
            )
            track.scanning_active = True
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Concurrent scanning start lost for activity track {track_id}")
            raise ConflictError(
                "Another activity track started QR scanning at the same time. Please try again."
            ) from e

        logger.info(f"QR scanning started for activity track {track_id}")
        return track

    async def stop_scanning(self, track_id: int) -> ActivityTrack:
        track = await self.require(track_id)
        if track.scanning_active:
            track.scanning_active = False
            await self.session.commit()
            logger.info(f"QR scanning stopped for activity track {track_id}")
        return track

    async def get_active_scanning(self) -> ActivityTrack | None:
        result = await self.session.execute(
            select(ActivityTrack).where(ActivityTrack.scanning_active.is_(True)).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_by_date_range(self, start_date: date, end_date: date) -> list[ActivityTrack]:
        result = await self.session.execute(
            select(ActivityTrack)
            .where(ActivityTrack.event_date.between(start_date, end_date))
            .order_by(ActivityTrack.event_date, ActivityTrack.event_time)
        )
        return list(result.scalars().all())

    async def list_upcoming(self, limit: int = 10, today: date | None = None) -> list[ActivityTrack]:
        """Active tracks whose event is today or later, soonest first."""
        today = today or date.today()
        result = await self.session.execute(
            select(ActivityTrack)
            .where(ActivityTrack.status == TrackStatus.ACTIVE, ActivityTrack.event_date >= today)
            .order_by(ActivityTrack.event_date, ActivityTrack.event_time)
            .limit(limit)
        )
        return list(result.scalars().all())
