"""initial_schema

Revision ID: 3b7d2e1f9a04
Revises:
Create Date: 2026-10-19 10:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b7d2e1f9a04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_status = sa.Enum("active", "inactive", name="user_status")
record_status = sa.Enum(
    "draft", "pending", "needs_modification", "approved", "rejected", "active", "inactive",
    name="record_status",
)
track_status = sa.Enum("active", "inactive", "completed", name="track_status")
attendance_type = sa.Enum("beneficiario", "guest", name="attendance_type")
attendance_method = sa.Enum("qr_scan", "manual_form", name="attendance_method")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("status", user_status, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_roles"),
        sa.UniqueConstraint("name", name="uq_roles_name"),
    )

    op.create_table(
        "user_roles",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_user_roles_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], name="fk_user_roles_role_id_roles", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "role_id", name="pk_user_roles"),
    )

    op.create_table(
        "records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("record_number", sa.String(20), nullable=False),
        sa.Column("status", record_status, nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], name="fk_records_created_by_users"),
        sa.PrimaryKeyConstraint("id", name="pk_records"),
        sa.UniqueConstraint("record_number", name="uq_records_record_number"),
    )
    op.create_index("ix_records_status", "records", ["status"])

    op.create_table(
        "personal_data",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("record_id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("cedula", sa.String(50), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["record_id"], ["records.id"], name="fk_personal_data_record_id_records", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_personal_data"),
        sa.UniqueConstraint("record_id", name="uq_personal_data_record_id"),
    )

    op.create_table(
        "activity_tracks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("event_time", sa.Time(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("status", track_status, nullable=False),
        sa.Column("scanning_active", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], name="fk_activity_tracks_created_by_users"),
        sa.PrimaryKeyConstraint("id", name="pk_activity_tracks"),
    )
    op.create_index("ix_activity_tracks_event_date", "activity_tracks", ["event_date"])
    op.create_index("ix_activity_tracks_status", "activity_tracks", ["status"])
    op.create_index("ix_activity_tracks_created_by", "activity_tracks", ["created_by"])
    # Only one track may accept QR scans at a time
    op.create_index(
        "uq_activity_tracks_scanning_active",
        "activity_tracks",
        ["scanning_active"],
        unique=True,
        postgresql_where=sa.text("scanning_active"),
    )

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("activity_track_id", sa.Integer(), nullable=False),
        sa.Column("record_id", sa.Integer(), nullable=True),
        sa.Column("attendance_type", attendance_type, nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("cedula", sa.String(50), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("attendance_method", attendance_method, nullable=False),
        sa.Column("scanned_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["activity_track_id"],
            ["activity_tracks.id"],
            name="fk_attendance_records_activity_track_id_activity_tracks",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(["record_id"], ["records.id"], name="fk_attendance_records_record_id_records"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], name="fk_attendance_records_created_by_users"),
        sa.PrimaryKeyConstraint("id", name="pk_attendance_records"),
    )
    op.create_index("ix_attendance_records_activity_track_id", "attendance_records", ["activity_track_id"])
    op.create_index("ix_attendance_records_record_id", "attendance_records", ["record_id"])
    op.create_index("ix_attendance_records_attendance_type", "attendance_records", ["attendance_type"])
    op.create_index("ix_attendance_records_scanned_at", "attendance_records", ["scanned_at"])
    op.create_index(
        "uq_attendance_records_beneficiario",
        "attendance_records",
        ["activity_track_id", "record_id"],
        unique=True,
        postgresql_where=sa.text("attendance_type = 'beneficiario'"),
    )

    op.bulk_insert(
        sa.table("roles", sa.column("name", sa.String), sa.column("description", sa.String)),
        [
            {"name": "admin", "description": "Platform administrator"},
            {"name": "user", "description": "Default role for registered users"},
        ],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("uq_attendance_records_beneficiario", table_name="attendance_records")
    op.drop_table("attendance_records")
    op.drop_index("uq_activity_tracks_scanning_active", table_name="activity_tracks")
    op.drop_table("activity_tracks")
    op.drop_table("personal_data")
    op.drop_table("records")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_table("users")
    bind = op.get_bind()
    for enum_type in (attendance_method, attendance_type, track_status, record_status, user_status):
        enum_type.drop(bind, checkfirst=True)
