"""initial schema

Revision ID: 3c81f0a2d9b4
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "3c81f0a2d9b4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("account_number", sa.String(32), nullable=False, unique=True),
        sa.Column("display_name", sa.Text, nullable=False, server_default=""),
        sa.Column("service_type", sa.String(64), nullable=False, server_default="Residential"),
        sa.Column("meter_size", sa.String(16), nullable=False, server_default='1/2"'),
        sa.Column("service_address", sa.Text, nullable=False, server_default=""),
        sa.Column("account_status", sa.String(32), nullable=False, server_default="Active"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "bills",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(26), nullable=False, unique=True),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("billing_period", sa.String(7), nullable=False),
        sa.Column("consumption", sa.Float, nullable=False, server_default="0"),
        sa.Column("bill_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("previous_unpaid_amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("senior_citizen_discount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(16), nullable=False, server_default="Unpaid"),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("amount_paid", sa.Integer, nullable=True),
        sa.Column("payment_method", sa.String(32), nullable=True),
        sa.Column("payment_reference", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_bills_customer_id_bill_date", "bills", ["customer_id", "bill_date"])


def downgrade() -> None:
    op.drop_index("ix_bills_customer_id_bill_date", table_name="bills")
    op.drop_table("bills")
    op.drop_table("customers")
