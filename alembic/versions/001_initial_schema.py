"""Initial schema — services, workers, orders.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Services
    op.create_table(
        "services",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("duration_minutes", sa.Integer, nullable=False),
    )

    # Workers
    op.create_table(
        "workers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("employee_id", sa.String(50), unique=True, nullable=False),
        sa.Column(
            "specializations", ARRAY(sa.String(30)), nullable=False, server_default="{}"
        ),
        sa.Column(
            "availability", sa.String(20), nullable=False, server_default="offline"
        ),
        sa.Column("current_lat", sa.Float, nullable=True),
        sa.Column("current_lng", sa.Float, nullable=True),
        sa.Column("last_location_update", sa.DateTime(timezone=True), nullable=True),
        sa.Column("average_rating", sa.Float, nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_workers_availability", "workers", ["availability"])

    # Orders
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("tracking_id", sa.String(50), unique=True, nullable=False),
        sa.Column(
            "service_id", sa.Integer, sa.ForeignKey("services.id"), nullable=False
        ),
        sa.Column(
            "worker_id", sa.Integer, sa.ForeignKey("workers.id"), nullable=True
        ),
        sa.Column("customer_lat", sa.Float, nullable=True),
        sa.Column("customer_lng", sa.Float, nullable=True),
        sa.Column("customer_address", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("scheduled_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("timeline", JSONB, nullable=False, server_default="[]"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_orders_status", "orders", ["status"])
    op.create_index("idx_orders_worker", "orders", ["worker_id"])


def downgrade() -> None:
    op.drop_table("orders")
    op.drop_table("workers")
    op.drop_table("services")
