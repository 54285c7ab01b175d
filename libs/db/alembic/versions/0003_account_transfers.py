# ruff: noqa: I001
"""Account-to-account transfers scoped to a budget.

Revision ID: 0003_account_transfers
Revises: 0002_budget_allocations
Create Date: 2026-01-25
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0003_account_transfers"
down_revision: str | None = "0002_budget_allocations"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "hb_transfers",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("budget_id", sa.String(32), nullable=False),
        sa.Column("from_account_id", sa.String(32), nullable=False),
        sa.Column("to_account_id", sa.String(32), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
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
        sa.ForeignKeyConstraint(["budget_id"], ["hb_budgets.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["from_account_id"], ["hb_accounts.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["to_account_id"], ["hb_accounts.id"], ondelete="RESTRICT"),
        sa.CheckConstraint("amount > 0", name="ck_hb_transfers_amount_positive"),
        sa.CheckConstraint(
            "from_account_id <> to_account_id", name="ck_hb_transfers_distinct"
        ),
    )
    op.create_index("ix_hb_transfers_budget_date", "hb_transfers", ["budget_id", "date"])
    op.create_index("ix_hb_transfers_from_account_id", "hb_transfers", ["from_account_id"])
    op.create_index("ix_hb_transfers_to_account_id", "hb_transfers", ["to_account_id"])


def downgrade() -> None:
    op.drop_index("ix_hb_transfers_to_account_id", table_name="hb_transfers")
    op.drop_index("ix_hb_transfers_from_account_id", table_name="hb_transfers")
    op.drop_index("ix_hb_transfers_budget_date", table_name="hb_transfers")
    op.drop_table("hb_transfers")
