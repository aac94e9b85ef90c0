"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates profiles, events, event_participants and event_logs.
event_logs.event_id has no foreign key: log entries outlive their event.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("profile_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("event_timezone", sa.String(64), nullable=False),
        sa.Column("start_at_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_by",
            sa.String(36),
            sa.ForeignKey("profiles.profile_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("end_at_utc > start_at_utc", name="ck_events_end_after_start"),
    )
    op.create_index("ix_events_start_at_utc", "events", ["start_at_utc"])

    # --- event_participants ---
    op.create_table(
        "event_participants",
        sa.Column(
            "event_id",
            sa.String(36),
            sa.ForeignKey("events.event_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "profile_id",
            sa.String(36),
            sa.ForeignKey("profiles.profile_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index("ix_event_participants_profile_id", "event_participants", ["profile_id"])

    # --- event_logs ---
    op.create_table(
        "event_logs",
        sa.Column("log_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(36), nullable=False),
        sa.Column("updated_by", sa.String(36), nullable=True),
        sa.Column("changed_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("diff", sa.JSON, nullable=False),
    )
    op.create_index("ix_event_logs_event_id", "event_logs", ["event_id"])
    op.create_index("ix_event_logs_updated_by", "event_logs", ["updated_by"])
    op.create_index("ix_event_logs_event_changed", "event_logs", ["event_id", "changed_at_utc"])


def downgrade() -> None:
    op.drop_table("event_logs")
    op.drop_table("event_participants")
    op.drop_table("events")
    op.drop_table("profiles")
