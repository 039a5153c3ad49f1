"""Beneficiary files.

Owned by the records module of the platform; attendance only reads the id,
status and the authoritative full name.
"""
import enum

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, value_enum


class RecordStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    NEEDS_MODIFICATION = "needs_modification"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Record(Base, TimestampMixin):
    __tablename__ = "records"

    id: Mapped[int] = mapped_column(primary_key=True)
    record_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)  # EXP-YYYY-NNNN
    status: Mapped[RecordStatus] = mapped_column(
        value_enum(RecordStatus, "record_status"), default=RecordStatus.DRAFT, nullable=False, index=True
    )
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"))


class PersonalData(Base, TimestampMixin):
    __tablename__ = "personal_data"

    id: Mapped[int] = mapped_column(primary_key=True)
    record_id: Mapped[int] = mapped_column(
        ForeignKey("records.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    cedula: Mapped[str | None] = mapped_column(String(50))
    phone: Mapped[str | None] = mapped_column(String(20))
