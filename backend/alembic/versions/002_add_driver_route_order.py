"""Add driver_route_order (client position per driver)

Revision ID: 002
Revises: 001
Create Date: 2026-02-10

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "driver_route_order",
        sa.Column("driver_id", sa.String(36), nullable=False),
        sa.Column("client_id", sa.String(36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("driver_id", "client_id"),
    )
    op.create_index(
        "idx_driver_route_order_driver_position", "driver_route_order", ["driver_id", "position"]
    )
    op.create_index("ix_driver_route_order_client_id", "driver_route_order", ["client_id"])


def downgrade() -> None:
    op.drop_table("driver_route_order")
