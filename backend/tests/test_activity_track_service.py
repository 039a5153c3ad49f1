"""Tests for ActivityTrackService."""
from datetime import date, datetime, time, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Update

from app.core.errors import BadRequestError, ConflictError, NotFoundError
from app.models.activity_track import ActivityTrack, TrackStatus
from app.schemas.activity_track import ActivityTrackCreate, ActivityTrackUpdate
from app.services.attendance.tracks import ActivityTrackService


def _track(track_id: int = 1, status: TrackStatus = TrackStatus.ACTIVE, scanning: bool = False) -> ActivityTrack:
    now = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    return ActivityTrack(
        id=track_id,
        name=f"Taller {track_id}",
        description=None,
        event_date=date(2026, 5, 10),
        event_time=time(9, 0),
        location="Sala 1",
        status=status,
        scanning_active=scanning,
        created_by=1,
        created_at=now,
        updated_at=now,
    )


def _result(scalar=None) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalar_one.return_value = scalar
    return result


def _mock_session(*results) -> MagicMock:
    session = MagicMock(spec=AsyncSession)
    session.execute = AsyncMock(side_effect=list(results))
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.mark.asyncio
async def test_create_starts_active_and_not_scanning():
    session = _mock_session()
    service = ActivityTrackService(session)

    track = await service.create(
        ActivityTrackCreate(name="Taller", event_date="2026-05-10", event_time="09:00"),
        created_by=7,
    )

    added = session.add.call_args[0][0]
    assert added is track
    assert track.status == TrackStatus.ACTIVE
    assert track.scanning_active is False
    assert track.created_by == 7
    assert track.event_date == date(2026, 5, 10)
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_keeps_requested_status():
    session = _mock_session()
    service = ActivityTrackService(session)

    track = await service.create(
        ActivityTrackCreate.model_validate({"name": "Taller D", "event_date": "2026-06-01", "status": "inactive"}),
        created_by=7,
    )

    assert track.status == TrackStatus.INACTIVE
    assert track.scanning_active is False


@pytest.mark.asyncio
async def test_require_raises_not_found():
    service = ActivityTrackService(_mock_session(_result(None)))

    with pytest.raises(NotFoundError, match="Activity track not found"):
        await service.require(99)


@pytest.mark.asyncio
async def test_get_with_stats_builds_detail():
    result = MagicMock()
    result.first.return_value = (_track(3), "Ana Soto", 5, 3, 2)
    service = ActivityTrackService(_mock_session(result))

    detail = await service.get_with_stats(3)

    assert detail.id == 3
    assert detail.created_by_name == "Ana Soto"
    assert detail.total_attendance == 5
    assert detail.beneficiarios_count == 3
    assert detail.guests_count == 2


@pytest.mark.asyncio
async def test_get_with_stats_missing_track():
    result = MagicMock()
    result.first.return_value = None
    service = ActivityTrackService(_mock_session(result))

    with pytest.raises(NotFoundError):
        await service.get_with_stats(3)


@pytest.mark.asyncio
async def test_list_returns_page_and_total():
    rows = MagicMock()
    rows.all.return_value = [(_track(1), "Ana Soto", 0, 0, 0), (_track(2), None, None, None, None)]
    session = _mock_session(_result(12), rows)
    service = ActivityTrackService(session)

    tracks, total = await service.list_tracks(page=2, limit=2, status=TrackStatus.ACTIVE)

    assert total == 12
    assert [t.id for t in tracks] == [1, 2]
    assert tracks[1].total_attendance == 0
    assert session.execute.await_count == 2


@pytest.mark.asyncio
async def test_start_scanning_missing_track():
    session = _mock_session(_result(None))

    with pytest.raises(NotFoundError):
        await ActivityTrackService(session).start_scanning(5)
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [TrackStatus.INACTIVE, TrackStatus.COMPLETED])
async def test_start_scanning_requires_active_status(status):
    session = _mock_session(_result(_track(1, status=status)))

    with pytest.raises(BadRequestError, match="Only active activity tracks can have QR scanning enabled"):
        await ActivityTrackService(session).start_scanning(1)
    assert session.execute.await_count == 1
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_start_scanning_clears_others_then_sets_target():
    track = _track(2)
    session = _mock_session(_result(track), MagicMock())

    result = await ActivityTrackService(session).start_scanning(2)

    assert result is track
    assert track.scanning_active is True
    clear_statement = session.execute.await_args_list[1][0][0]
    assert isinstance(clear_statement, Update)
    assert "scanning_active" in str(clear_statement)
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_start_scanning_is_idempotent_for_scanning_track():
    track = _track(2, scanning=True)
    session = _mock_session(_result(track), MagicMock())

    await ActivityTrackService(session).start_scanning(2)

    assert track.scanning_active is True


@pytest.mark.asyncio
async def test_start_scanning_race_becomes_conflict():
    track = _track(2)
    session = _mock_session(_result(track), MagicMock())
    session.commit = AsyncMock(side_effect=IntegrityError(
        "UPDATE activity_tracks", {}, Exception('duplicate key value violates "uq_activity_tracks_scanning_active"')
    ))

    with pytest.raises(ConflictError):
        await ActivityTrackService(session).start_scanning(2)
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_stop_scanning_clears_flag():
    track = _track(2, scanning=True)
    session = _mock_session(_result(track))

    await ActivityTrackService(session).stop_scanning(2)

    assert track.scanning_active is False
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_stop_scanning_is_idempotent():
    track = _track(2, scanning=False)
    session = _mock_session(_result(track))

    await ActivityTrackService(session).stop_scanning(2)

    assert track.scanning_active is False
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_active_scanning_none():
    service = ActivityTrackService(_mock_session(_result(None)))
    assert await service.get_active_scanning() is None


@pytest.mark.asyncio
async def test_update_applies_only_sent_fields():
    track = _track(1)
    session = _mock_session(_result(track))

    await ActivityTrackService(session).update(1, ActivityTrackUpdate(location="Sala 9"))

    assert track.location == "Sala 9"
    assert track.name == "Taller 1"
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_away_from_active_closes_scanning():
    track = _track(1, scanning=True)
    session = _mock_session(_result(track))

    await ActivityTrackService(session).update(1, ActivityTrackUpdate(status="completed"))

    assert track.status == TrackStatus.COMPLETED
    assert track.scanning_active is False


@pytest.mark.asyncio
async def test_update_without_fields():
    session = _mock_session(_result(_track(1)))

    with pytest.raises(BadRequestError, match="No fields to update"):
        await ActivityTrackService(session).update(1, ActivityTrackUpdate())


@pytest.mark.asyncio
async def test_delete_blocked_while_attendance_exists():
    session = _mock_session(_result(_track(1)), _result(4))

    with pytest.raises(ConflictError) as exc_info:
        await ActivityTrackService(session).delete(1)
    assert "4 attendance records" in exc_info.value.details
    session.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_track_without_attendance():
    track = _track(1)
    session = _mock_session(_result(track), _result(0))

    await ActivityTrackService(session).delete(1)

    session.delete.assert_awaited_once_with(track)
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_list_upcoming_uses_scalars():
    result = MagicMock()
    result.scalars.return_value.all.return_value = [_track(1)]
    service = ActivityTrackService(_mock_session(result))

    tracks = await service.list_upcoming(limit=5, today=date(2026, 5, 1))

    assert [t.id for t in tracks] == [1]


def test_service_method_names_leave_builtin_list_intact():
    # Return annotations such as list[ActivityTrack] are evaluated at class creation
    from app.services.attendance.records import AttendanceService

    assert not hasattr(ActivityTrackService, "list")
    assert not hasattr(AttendanceService, "list")
    assert ActivityTrackService.list_upcoming.__annotations__["return"] == list[ActivityTrack]
