"""Ledger numeric columns keep every fractional digit

Revision ID: 20241015_02
Revises: 20241001_01
Create Date: 2024-10-15
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20241015_02"
down_revision: Union[str, Sequence[str], None] = "20241001_01"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_LEDGER_NUMERIC_COLUMNS = (
    ("nav", "nav_value"),
    ("cash_transaction", "amount"),
    ("unit_transaction", "units"),
)


def upgrade() -> None:
    """Upgrade schema."""

    for table_name, column_name in _LEDGER_NUMERIC_COLUMNS:
        op.alter_column(
            table_name,
            column_name,
            type_=sa.Numeric(),
            existing_type=sa.Numeric(28, 8),
            existing_nullable=False,
        )


def downgrade() -> None:
    """Downgrade schema; values beyond eight fractional digits are rounded."""

    for table_name, column_name in _LEDGER_NUMERIC_COLUMNS:
        op.alter_column(
            table_name,
            column_name,
            type_=sa.Numeric(28, 8),
            existing_type=sa.Numeric(),
            existing_nullable=False,
        )
