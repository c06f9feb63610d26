"""Create bookings table.

The partial unique indexes allow at most one Pending or Approved booking per
shipment, and per user and shipment; rejected, completed and cancelled rows
are history and do not count.

Revision ID: b7e05f3d9a24
Revises: 8c4d2b6a1e93
Create Date: 2026-10-12
"""

import sqlalchemy as sa
from alembic import op

revision = "b7e05f3d9a24"
down_revision = "8c4d2b6a1e93"
branch_labels = None
depends_on = None

ACTIVE_PREDICATE = "status IN ('Pending', 'Approved')"


def upgrade() -> None:
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=True),
        sa.Column("shipment_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("user_name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Pending"),
        sa.Column(
            "booked_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column("shipment_details", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(["shipment_id"], ["shipments.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_bookings_active_shipment",
        "bookings",
        ["shipment_id"],
        unique=True,
        sqlite_where=sa.text(ACTIVE_PREDICATE),
        postgresql_where=sa.text(ACTIVE_PREDICATE),
    )
    op.create_index(
        "uq_bookings_active_user_shipment",
        "bookings",
        ["user_id", "shipment_id"],
        unique=True,
        sqlite_where=sa.text(ACTIVE_PREDICATE),
        postgresql_where=sa.text(ACTIVE_PREDICATE),
    )
    op.create_index("uq_bookings_code", "bookings", ["code"], unique=True)
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])


def downgrade() -> None:
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_index("uq_bookings_code", table_name="bookings")
    op.drop_index("uq_bookings_active_user_shipment", table_name="bookings")
    op.drop_index("uq_bookings_active_shipment", table_name="bookings")
    op.drop_table("bookings")
