"""Initial schema: users, events, applications with constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("student_id", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("gender", sa.String(20), nullable=False),
        sa.Column("phone_no", sa.String(20), nullable=False),
        sa.Column("course", sa.String(255), nullable=False),
        sa.Column("profile_photo", sa.String(1024), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_blocked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("roles", sa.String(255), nullable=False, server_default=sa.text("'student'")),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_student_id", "users", ["student_id"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(5000), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("price", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("qr_code_image_url", sa.String(1024), nullable=True),
        sa.Column("organizer_name", sa.String(255), nullable=True),
        sa.Column("organizer_email", sa.String(255), nullable=True),
        sa.Column("participant_limit", sa.Integer(), nullable=True),
        sa.Column("current_applications", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="check_event_price_non_negative"),
        sa.CheckConstraint("current_applications >= 0", name="check_current_applications_non_negative"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    # Listings filter and sort on the start date ("upcoming events")
    op.create_index("ix_events_start_date", "events", ["start_date"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("student_id", sa.String(50), nullable=False),
        sa.Column("gender", sa.String(20), nullable=False),
        sa.Column("phone_no", sa.String(20), nullable=False),
        sa.Column("course", sa.String(255), nullable=False),
        sa.Column("profile_photo", sa.String(1024), nullable=True),
        sa.Column("event_name", sa.String(255), nullable=False),
        sa.Column("event_start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("event_end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("price", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("event_image_url", sa.String(1024), nullable=True),
        sa.Column("qr_code_image_url", sa.String(1024), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'Pending'")),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default=sa.text("'Unverified'")),
        sa.Column("payment_screenshot_url", sa.String(1024), nullable=True),
        sa.Column("notes", sa.String(1000), nullable=True),
        sa.Column("refund_status", sa.String(20), nullable=True),
        sa.Column("refund_initiated_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        # Authoritative guard against duplicate applications
        sa.UniqueConstraint("event_id", "user_id", name="uq_application_event_user"),
        sa.CheckConstraint(
            "status IN ('Pending', 'Approved', 'Rejected', 'Completed', 'Cancelled')",
            name="check_application_status",
        ),
        sa.CheckConstraint(
            "payment_status IN ('Unverified', 'Verified', 'Refunded', 'Failed')",
            name="check_application_payment_status",
        ),
    )
    op.create_index("ix_applications_id", "applications", ["id"])
    op.create_index("ix_applications_event_id", "applications", ["event_id"])
    op.create_index("ix_applications_user_id", "applications", ["user_id"])
    op.create_index("ix_applications_status", "applications", ["status"])
    op.create_index("ix_applications_payment_status", "applications", ["payment_status"])


def downgrade() -> None:
    op.drop_table("applications")
    op.drop_table("events")
    op.drop_table("users")
