"""Ledger schema baseline

Revision ID: 20241001_01
Revises: None
Create Date: 2024-10-01
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20241001_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "customer",
        sa.Column("customer_id", sa.Text(), primary_key=True),
    )

    op.create_table(
        "nav",
        sa.Column("isin", sa.Text(), nullable=False),
        sa.Column("nav_date", sa.Date(), nullable=False),
        sa.Column("nav_value", sa.Numeric(28, 8), nullable=False),
        sa.UniqueConstraint("isin", "nav_date", name="uq_nav_isin_nav_date"),
        sa.CheckConstraint("nav_value >= 0", name="ck_nav_value_non_negative"),
    )

    op.create_table(
        "cash_transaction",
        sa.Column("cash_transaction_id", sa.BigInteger(), sa.Identity(), primary_key=True),
        sa.Column("customer_id", sa.Text(), nullable=False),
        sa.Column("value_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(28, 8), nullable=False),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["customer_id"], ["customer.customer_id"]),
    )
    op.create_index("ix_cash_transaction_customer_value_date", "cash_transaction", ["customer_id", "value_date"])

    op.create_table(
        "unit_transaction",
        sa.Column("unit_transaction_id", sa.BigInteger(), sa.Identity(), primary_key=True),
        sa.Column("customer_id", sa.Text(), nullable=False),
        sa.Column("isin", sa.Text(), nullable=False),
        sa.Column("value_date", sa.Date(), nullable=False),
        sa.Column("units", sa.Numeric(28, 8), nullable=False),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["customer_id"], ["customer.customer_id"]),
    )
    op.create_index(
        "ix_unit_transaction_customer_isin_value_date",
        "unit_transaction",
        ["customer_id", "isin", "value_date"],
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_unit_transaction_customer_isin_value_date", table_name="unit_transaction")
    op.drop_table("unit_transaction")
    op.drop_index("ix_cash_transaction_customer_value_date", table_name="cash_transaction")
    op.drop_table("cash_transaction")
    op.drop_table("nav")
    op.drop_table("customer")
