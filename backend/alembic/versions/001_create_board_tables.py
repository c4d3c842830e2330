"""Create board tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates users, entries, replies and sessions.
How:   Row ids are 24-character hex strings generated by the application.
       Handle and email are unique on `users`; session tokens are unique.

Rollback: downgrade() drops all four tables.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="bcrypt hash, always starts with $2",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "entries",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column("message", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("username", sa.String(64), nullable=False, comment="Author handle"),
        sa.Column("likes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_entries"),
        sa.CheckConstraint("likes >= 0", name="ck_entries_likes_non_negative"),
    )
    op.create_index("idx_entries_created_at", "entries", ["created_at"])

    op.create_table(
        "replies",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column("message", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("creator_id", sa.String(24), nullable=False),
        sa.Column("entry_id", sa.String(24), nullable=False),
        sa.Column("likes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("id", name="pk_replies"),
        sa.CheckConstraint("likes >= 0", name="ck_replies_likes_non_negative"),
    )
    op.create_index("ix_replies_creator_id", "replies", ["creator_id"])
    op.create_index("ix_replies_entry_id", "replies", ["entry_id"])

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(24), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_sessions"),
        sa.UniqueConstraint("session_id", name="uq_sessions_session_id"),
    )
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_sessions_user_id", table_name="sessions")
    op.drop_table("sessions")
    op.drop_index("ix_replies_entry_id", table_name="replies")
    op.drop_index("ix_replies_creator_id", table_name="replies")
    op.drop_table("replies")
    op.drop_index("idx_entries_created_at", table_name="entries")
    op.drop_table("entries")
    op.drop_table("users")
