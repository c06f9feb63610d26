"""Create admin and user notification tables.

Revision ID: d2a8e61c4f57
Revises: b7e05f3d9a24
Create Date: 2026-10-13
"""

import sqlalchemy as sa
from alembic import op

revision = "d2a8e61c4f57"
down_revision = "b7e05f3d9a24"
branch_labels = None
depends_on = None


def _notification_columns() -> list[sa.Column]:  # type: ignore[type-arg]
    return [
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.String(length=1000), nullable=False),
        sa.Column("msg_key", sa.String(length=255), nullable=True),
        sa.Column("params", sa.JSON(), nullable=True),
        sa.Column("related_id", sa.String(length=36), nullable=True),
        sa.Column("related_model", sa.String(length=20), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("priority", sa.String(length=10), nullable=False, server_default="medium"),
        sa.Column(
            "notification_type",
            sa.String(length=10),
            nullable=False,
            server_default="info",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "admin_notifications",
        sa.Column("id", sa.String(length=36), nullable=False),
        *_notification_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_admin_notifications_type", "admin_notifications", ["type"])
    op.create_index("ix_admin_notifications_read", "admin_notifications", ["read"])

    op.create_table(
        "user_notifications",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        *_notification_columns(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_notifications_user_id", "user_notifications", ["user_id"])
    op.create_index("ix_user_notifications_type", "user_notifications", ["type"])
    op.create_index("ix_user_notifications_read", "user_notifications", ["read"])


def downgrade() -> None:
    op.drop_index("ix_user_notifications_read", table_name="user_notifications")
    op.drop_index("ix_user_notifications_type", table_name="user_notifications")
    op.drop_index("ix_user_notifications_user_id", table_name="user_notifications")
    op.drop_table("user_notifications")
    op.drop_index("ix_admin_notifications_read", table_name="admin_notifications")
    op.drop_index("ix_admin_notifications_type", table_name="admin_notifications")
    op.drop_table("admin_notifications")
