from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    false,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------
# Tenancy: hb_households / hb_household_users
# ---------------------------


class HbHousehold(Base):
    __tablename__ = "hb_households"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class HbHouseholdUser(Base):
    __tablename__ = "hb_household_users"

    household_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_households.id", ondelete="CASCADE"), primary_key=True
    )
    # Users live in the external identity provider; only the opaque id is stored.
    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    role: Mapped[str] = mapped_column(String, nullable=False, server_default="member")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("role in ('owner','member')", name="ck_hb_household_users_role"),
        Index("ix_hb_household_users_user_id", "user_id"),
    )


# ---------------------------
# Reference: hb_accounts / hb_categories / hb_budgets
# ---------------------------


class HbAccount(Base):
    __tablename__ = "hb_accounts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    household_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_households.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Baseline for every balance computation; never updated after insert.
    initial_balance: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, server_default="0"
    )
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("ix_hb_accounts_household_id", "household_id"),)


class HbCategory(Base):
    __tablename__ = "hb_categories"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    household_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_households.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Sorted list drawn from {"INCOME", "EXPENSE"}; both may be present.
    # Membership is validated in the service layer (JSON has no portable CHECK).
    types: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("ix_hb_categories_household_id", "household_id"),)


class HbBudget(Base):
    __tablename__ = "hb_budgets"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    household_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_households.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("ix_hb_budgets_household_id", "household_id"),)


class HbBudgetAccount(Base):
    __tablename__ = "hb_budget_accounts"

    budget_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_budgets.id", ondelete="CASCADE"), primary_key=True
    )
    account_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_accounts.id", ondelete="CASCADE"), primary_key=True
    )


# ---------------------------
# Ledger inputs: hb_transactions
# ---------------------------


class HbTransaction(Base):
    __tablename__ = "hb_transactions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    account_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_accounts.id", ondelete="RESTRICT"), nullable=False
    )
    category_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_categories.id", ondelete="RESTRICT"), nullable=False
    )
    # Always a positive magnitude; the sign is derived from the category types.
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Optional link to a bill owned by the (external) bill scheduler.
    bill_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_hb_transactions_amount_positive"),
        Index("ix_hb_transactions_account_date", "account_id", "date"),
    )


# ---------------------------
# Append-only ledger: hb_budget_allocations
# ---------------------------


class HbBudgetAllocation(Base):
    __tablename__ = "hb_budget_allocations"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    budget_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_budgets.id", ondelete="CASCADE"), nullable=False
    )
    # Signed: positive moves funds into the budget, negative moves them out.
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("ix_hb_budget_allocations_budget_id", "budget_id"),)


# ---------------------------
# Account-to-account movements: hb_transfers
# ---------------------------


class HbTransfer(Base):
    __tablename__ = "hb_transfers"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    budget_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_budgets.id", ondelete="CASCADE"), nullable=False
    )
    from_account_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_accounts.id", ondelete="RESTRICT"), nullable=False
    )
    to_account_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("hb_accounts.id", ondelete="RESTRICT"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_hb_transfers_amount_positive"),
        CheckConstraint("from_account_id <> to_account_id", name="ck_hb_transfers_distinct"),
        Index("ix_hb_transfers_budget_date", "budget_id", "date"),
        Index("ix_hb_transfers_from_account_id", "from_account_id"),
        Index("ix_hb_transfers_to_account_id", "to_account_id"),
    )


__all__ = [
    "Base",
    "HbHousehold",
    "HbHouseholdUser",
    "HbAccount",
    "HbCategory",
    "HbBudget",
    "HbBudgetAccount",
    "HbTransaction",
    "HbBudgetAllocation",
    "HbTransfer",
]
