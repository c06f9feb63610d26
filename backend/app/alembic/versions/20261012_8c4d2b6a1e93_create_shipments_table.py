"""Create shipments table.

Revision ID: 8c4d2b6a1e93
Revises: 3f1a9c2e7b01
Create Date: 2026-10-12
"""

import sqlalchemy as sa
from alembic import op

revision = "8c4d2b6a1e93"
down_revision = "3f1a9c2e7b01"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "shipments",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=True),
        sa.Column("origin", sa.String(length=255), nullable=False),
        sa.Column("destination", sa.String(length=255), nullable=False),
        sa.Column("vehicle_type", sa.String(length=100), nullable=False),
        sa.Column("load", sa.String(length=100), nullable=False),
        sa.Column("weight", sa.Numeric(12, 2), nullable=False),
        sa.Column("pickup_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Pending"),
        sa.Column("eta", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("price", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("driver_vehicle_number", sa.String(length=50), nullable=True),
        sa.Column("image", sa.String(length=2048), nullable=False, server_default=""),
        sa.Column("created_by", sa.String(length=36), nullable=True),
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
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_shipments_code", "shipments", ["code"], unique=True)
    op.create_index("ix_shipments_status", "shipments", ["status"])


def downgrade() -> None:
    op.drop_index("ix_shipments_status", table_name="shipments")
    op.drop_index("ix_shipments_code", table_name="shipments")
    op.drop_table("shipments")
