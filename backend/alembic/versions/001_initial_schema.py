"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-01-15

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
        "clients",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("apt", sa.String(50), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(2), nullable=True),
        sa.Column("zip", sa.String(10), nullable=True),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("paused", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("delivery", sa.Boolean(), nullable=True),
        sa.Column("service_type", sa.String(64), nullable=True),
        sa.Column("parent_client_id", sa.String(36), nullable=True),
        sa.Column("assigned_driver_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_parent_client_id", "clients", ["parent_client_id"])
    op.create_index("ix_clients_assigned_driver_id", "clients", ["assigned_driver_id"])

    op.create_table(
        "drivers",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("day", sa.String(20), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("color", sa.String(7), nullable=True),
        sa.Column("stop_ids", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_drivers_day", "drivers", ["day"])

    op.create_table(
        "stops",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("day", sa.String(20), nullable=False),
        sa.Column("delivery_date", sa.Date(), nullable=True),
        sa.Column("client_id", sa.String(36), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("proof_url", sa.String(500), nullable=True),
        sa.Column("assigned_driver_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_stops_day", "stops", ["day"])
    op.create_index("ix_stops_delivery_date", "stops", ["delivery_date"])
    op.create_index("ix_stops_client_id", "stops", ["client_id"])
    op.create_index("ix_stops_assigned_driver_id", "stops", ["assigned_driver_id"])

    op.create_table(
        "route_runs",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("day", sa.String(20), nullable=False),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_route_runs_day", "route_runs", ["day"])
    op.create_index("ix_route_runs_created_at", "route_runs", ["created_at"])


def downgrade() -> None:
    op.drop_table("route_runs")
    op.drop_table("stops")
    op.drop_table("drivers")
    op.drop_table("clients")
