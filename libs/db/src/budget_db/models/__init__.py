"""Shared SQLAlchemy models registry for the ledger database.

Currently includes the household ledger models used by ``budget_ledger``.
"""

from .ledger import (
    Base,
    HbAccount,
    HbBudget,
    HbBudgetAccount,
    HbBudgetAllocation,
    HbCategory,
    HbHousehold,
    HbHouseholdUser,
    HbTransaction,
    HbTransfer,
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
