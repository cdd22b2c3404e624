"""Add sequence_number to drivers

Revision ID: 003
Revises: 002
Create Date: 2026-03-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("drivers", sa.Column("sequence_number", sa.Integer(), nullable=True))
    # existing rows carry their number only in the "Driver N" label
    op.execute(
        "UPDATE drivers SET sequence_number = CAST(substring(name from '(?i)driver\\s+(\\d+)') AS INTEGER) "
        "WHERE name ~* 'driver\\s+\\d+'"
    )


def downgrade() -> None:
    op.drop_column("drivers", "sequence_number")
