"""Stock tracker schema baseline

Revision ID: 20261019_01
Revises: None
Create Date: 2026-10-19
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _lifecycle_columns() -> list[sa.Column]:
    return [
        sa.Column("created_datetime", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column(
            "last_modified_datetime",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    currencies_table = op.create_table(
        "currencies",
        sa.Column("iso_code", sa.String(length=3), primary_key=True),
        sa.Column("decimal_places", sa.SmallInteger(), nullable=False),
        sa.CheckConstraint("decimal_places >= 0", name="ck_currencies_decimal_places"),
    )
    op.bulk_insert(
        currencies_table,
        [
            {"iso_code": "HKD", "decimal_places": 2},
            {"iso_code": "RMB", "decimal_places": 2},
            {"iso_code": "USD", "decimal_places": 2},
        ],
    )

    op.create_table(
        "stocks",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), primary_key=True),
        sa.Column("ticker_no", sa.String(length=5), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("subcategory", sa.Text(), nullable=True),
        sa.Column("board_lot", sa.BigInteger(), nullable=True),
        sa.Column("isin", sa.String(length=12), nullable=True),
        sa.Column("currency", sa.String(length=3), sa.ForeignKey("currencies.iso_code"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_tracked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_lifecycle_columns(),
    )
    op.create_index(
        "uq_stocks_active_ticker_no",
        "stocks",
        ["ticker_no"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )
    op.create_index("ix_stocks_ticker_no", "stocks", ["ticker_no"])

    op.create_table(
        "stock_transactions",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), primary_key=True),
        sa.Column(
            "stock_id",
            sa.BigInteger(),
            sa.ForeignKey("stocks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("quantity", sa.BigInteger(), nullable=True),
        sa.Column("fee", sa.BigInteger(), nullable=True),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("currency", sa.String(length=3), sa.ForeignKey("currencies.iso_code"), nullable=False),
        *_lifecycle_columns(),
        sa.CheckConstraint("type in ('buy', 'sell', 'dividend')", name="ck_stock_transactions_type"),
    )
    op.create_index(
        "ix_stock_transactions_stock_date",
        "stock_transactions",
        ["stock_id", "transaction_date"],
    )

    op.create_table(
        "short_reporting",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), primary_key=True),
        sa.Column(
            "stock_id",
            sa.BigInteger(),
            sa.ForeignKey("stocks.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("ticker_no", sa.String(length=5), nullable=False),
        sa.Column("reporting_date", sa.Date(), nullable=False),
        sa.Column("shorted_shares", sa.BigInteger(), nullable=True),
        sa.Column("shorted_amount", sa.BigInteger(), nullable=True),
        *_lifecycle_columns(),
    )
    op.create_index("ix_short_reporting_stock_date", "short_reporting", ["stock_id", "reporting_date"])
    op.create_index("ix_short_reporting_reporting_date", "short_reporting", ["reporting_date"])
    op.create_index(
        "ix_short_reporting_unresolved_ticker",
        "short_reporting",
        ["ticker_no"],
        postgresql_where=sa.text("stock_id IS NULL"),
    )

    op.create_table(
        "diary_entries",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=False), primary_key=True),
        sa.Column(
            "stock_id",
            sa.BigInteger(),
            sa.ForeignKey("stocks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("posted_date", sa.Date(), nullable=False),
        *_lifecycle_columns(),
    )
    op.create_index("ix_diary_entries_stock_posted", "diary_entries", ["stock_id", "posted_date"])

    op.execute(
        "CREATE VIEW short_reporting_w_stocks AS "
        "SELECT sr.*, s.name AS stock_name, s.is_active AS stock_is_active "
        "FROM short_reporting sr "
        "LEFT JOIN stocks s ON s.id = sr.stock_id"
    )
    op.execute(
        "CREATE VIEW stocks_w_transactions AS "
        "SELECT s.* FROM stocks s "
        "WHERE EXISTS (SELECT 1 FROM stock_transactions t WHERE t.stock_id = s.id)"
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.execute("DROP VIEW IF EXISTS stocks_w_transactions")
    op.execute("DROP VIEW IF EXISTS short_reporting_w_stocks")

    op.drop_index("ix_diary_entries_stock_posted", table_name="diary_entries")
    op.drop_table("diary_entries")

    op.drop_index("ix_short_reporting_unresolved_ticker", table_name="short_reporting")
    op.drop_index("ix_short_reporting_reporting_date", table_name="short_reporting")
    op.drop_index("ix_short_reporting_stock_date", table_name="short_reporting")
    op.drop_table("short_reporting")

    op.drop_index("ix_stock_transactions_stock_date", table_name="stock_transactions")
    op.drop_table("stock_transactions")

    op.drop_index("ix_stocks_ticker_no", table_name="stocks")
    op.drop_index("uq_stocks_active_ticker_no", table_name="stocks")
    op.drop_table("stocks")

    op.drop_table("currencies")
