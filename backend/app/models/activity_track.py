import enum
from datetime import date, time

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, Text, Time, false, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, value_enum


class TrackStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class ActivityTrack(Base, TimestampMixin):
    """A schedulable event that can have an attendance-scanning window."""
    __tablename__ = "activity_tracks"
    __table_args__ = (
        # At most one track system-wide may accept QR scans.
        Index(
            "uq_activity_tracks_scanning_active",
            "scanning_active",
            unique=True,
            postgresql_where=text("scanning_active"),
            sqlite_where=text("scanning_active"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    event_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    event_time: Mapped[time | None] = mapped_column(Time)
    location: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[TrackStatus] = mapped_column(
        value_enum(TrackStatus, "track_status"), default=TrackStatus.ACTIVE, nullable=False, index=True
    )
    scanning_active: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False
    )
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
