# ruff: noqa: I001
"""Household tenancy, accounts, categories, budgets and transactions.

Revision ID: 0001_household_core
Revises: None
Create Date: 2026-01-18
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_household_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "hb_households",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "hb_household_users",
        sa.Column("household_id", sa.String(32), primary_key=True),
        sa.Column("user_id", sa.String(), primary_key=True),
        sa.Column("role", sa.String(), nullable=False, server_default="member"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(["household_id"], ["hb_households.id"], ondelete="CASCADE"),
        sa.CheckConstraint("role in ('owner','member')", name="ck_hb_household_users_role"),
    )
    op.create_index("ix_hb_household_users_user_id", "hb_household_users", ["user_id"])

    op.create_table(
        "hb_accounts",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("household_id", sa.String(32), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("initial_balance", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["household_id"], ["hb_households.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_hb_accounts_household_id", "hb_accounts", ["household_id"])

    op.create_table(
        "hb_categories",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("household_id", sa.String(32), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("types", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(["household_id"], ["hb_households.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_hb_categories_household_id", "hb_categories", ["household_id"])

    op.create_table(
        "hb_budgets",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("household_id", sa.String(32), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["household_id"], ["hb_households.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_hb_budgets_household_id", "hb_budgets", ["household_id"])

    op.create_table(
        "hb_budget_accounts",
        sa.Column("budget_id", sa.String(32), primary_key=True),
        sa.Column("account_id", sa.String(32), primary_key=True),
        sa.ForeignKeyConstraint(["budget_id"], ["hb_budgets.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["account_id"], ["hb_accounts.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "hb_transactions",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("account_id", sa.String(32), nullable=False),
        sa.Column("category_id", sa.String(32), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("bill_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["account_id"], ["hb_accounts.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["category_id"], ["hb_categories.id"], ondelete="RESTRICT"),
        sa.CheckConstraint("amount > 0", name="ck_hb_transactions_amount_positive"),
    )
    op.create_index(
        "ix_hb_transactions_account_date", "hb_transactions", ["account_id", "date"]
    )


def downgrade() -> None:
    op.drop_index("ix_hb_transactions_account_date", table_name="hb_transactions")
    op.drop_table("hb_transactions")
    op.drop_table("hb_budget_accounts")
    op.drop_index("ix_hb_budgets_household_id", table_name="hb_budgets")
    op.drop_table("hb_budgets")
    op.drop_index("ix_hb_categories_household_id", table_name="hb_categories")
    op.drop_table("hb_categories")
    op.drop_index("ix_hb_accounts_household_id", table_name="hb_accounts")
    op.drop_table("hb_accounts")
    op.drop_index("ix_hb_household_users_user_id", table_name="hb_household_users")
    op.drop_table("hb_household_users")
    op.drop_table("hb_households")
