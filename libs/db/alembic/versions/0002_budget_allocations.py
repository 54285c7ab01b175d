# ruff: noqa: I001
"""Append-only budget allocation ledger.

Revision ID: 0002_budget_allocations
Revises: 0001_household_core
Create Date: 2026-01-25
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_budget_allocations"
down_revision: str | None = "0001_household_core"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "hb_budget_allocations",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("budget_id", sa.String(32), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(["budget_id"], ["hb_budgets.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_hb_budget_allocations_budget_id", "hb_budget_allocations", ["budget_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_hb_budget_allocations_budget_id", table_name="hb_budget_allocations")
    op.drop_table("hb_budget_allocations")
