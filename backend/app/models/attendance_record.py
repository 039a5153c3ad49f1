import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, value_enum

BENEFICIARIO_UNIQUE_INDEX = "uq_attendance_records_beneficiario"


class AttendanceType(str, enum.Enum):
    BENEFICIARIO = "beneficiario"
    GUEST = "guest"


class AttendanceMethod(str, enum.Enum):
    QR_SCAN = "qr_scan"
    MANUAL_FORM = "manual_form"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttendanceRecord(Base, TimestampMixin):
    """One attendance of a beneficiario or guest at an activity track."""
    __tablename__ = "attendance_records"
    __table_args__ = (
        # A beneficiario attends a given activity at most once. Guests are not deduplicated.
        Index(
            BENEFICIARIO_UNIQUE_INDEX,
            "activity_track_id",
            "record_id",
            unique=True,
            postgresql_where=text("attendance_type = 'beneficiario'"),
            sqlite_where=text("attendance_type = 'beneficiario'"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    activity_track_id: Mapped[int] = mapped_column(
        ForeignKey("activity_tracks.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    record_id: Mapped[int | None] = mapped_column(ForeignKey("records.id"), index=True)
    attendance_type: Mapped[AttendanceType] = mapped_column(
        value_enum(AttendanceType, "attendance_type"), nullable=False, index=True
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    cedula: Mapped[str | None] = mapped_column(String(50))
    phone: Mapped[str | None] = mapped_column(String(20))
    attendance_method: Mapped[AttendanceMethod] = mapped_column(
        value_enum(AttendanceMethod, "attendance_method"), nullable=False
    )
    scanned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False, index=True
    )
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
