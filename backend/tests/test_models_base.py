from app.models import AttendanceRecord, ActivityTrack, TrackStatus, UserStatus
from app.models.base import Base, TimestampMixin, NAMING_CONVENTION


def test_base_has_metadata():
    assert Base.metadata is not None
    assert Base.metadata.naming_convention["pk"] == NAMING_CONVENTION["pk"]


def test_timestamp_mixin_has_fields():
    assert hasattr(TimestampMixin, "created_at")
    assert hasattr(TimestampMixin, "updated_at")


def test_all_tables_registered():
    assert {
        "users", "roles", "user_roles", "records", "personal_data",
        "activity_tracks", "attendance_records",
    } <= set(Base.metadata.tables)


def test_enums_stored_by_value():
    status_type = ActivityTrack.__table__.c.status.type
    assert status_type.enums == [s.value for s in TrackStatus]

    user_status = Base.metadata.tables["users"].c.status.type
    assert user_status.enums == ["active", "inactive"]
    assert UserStatus.ACTIVE.value == "active"


def test_scanning_index_is_partial_and_unique():
    index = next(i for i in ActivityTrack.__table__.indexes if i.name == "uq_activity_tracks_scanning_active")
    assert index.unique
    assert str(index.dialect_options["postgresql"]["where"]) == "scanning_active"


def test_beneficiario_index_covers_track_and_record():
    index = next(i for i in AttendanceRecord.__table__.indexes if i.name == "uq_attendance_records_beneficiario")
    assert index.unique
    assert [c.name for c in index.columns] == ["activity_track_id", "record_id"]
    assert "beneficiario" in str(index.dialect_options["postgresql"]["where"])


def test_attendance_track_fk_restricts_delete():
    fk = next(iter(AttendanceRecord.__table__.c.activity_track_id.foreign_keys))
    assert fk.ondelete == "RESTRICT"
