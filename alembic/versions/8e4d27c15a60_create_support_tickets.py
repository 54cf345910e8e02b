"""create support_tickets

Revision ID: 8e4d27c15a60
Revises: 3c81f0a2d9b4
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "8e4d27c15a60"
down_revision: Union[str, Sequence[str], None] = "3c81f0a2d9b4"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "support_tickets",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("issue_type", sa.String(128), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="Open"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("support_tickets")
