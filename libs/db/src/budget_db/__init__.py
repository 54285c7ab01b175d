"""budget_db: shared database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``budget_db.models.ledger`` (re-exported for convenience)
- Engine/session helpers in ``budget_db.client``
"""

from __future__ import annotations

from .models.ledger import (
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

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
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
