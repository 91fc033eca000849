"""create watch_history

Revision ID: 004
Revises: 003
Create Date: 2026-10-18

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "watch_history",
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("video_id", sa.String(36), sa.ForeignKey("videos.id"), primary_key=True, index=True),
        sa.Column("watched_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_watch_history_user_watched_at", "watch_history", ["user_id", "watched_at"])


def downgrade() -> None:
    op.drop_index("ix_watch_history_user_watched_at", table_name="watch_history")
    op.drop_table("watch_history")
