"""Data models and value types for ``budget_ledger``.

Two families live here:

- Read-only *views* over persisted rows (``AccountSeed``, ``TransactionView``,
  ``TransferView``) that the pure balance and sampling functions consume. They
  let callers drive the computations from in-memory data without a database.
- Result records returned by service operations (``AllocationEntry``,
  ``TransferRecord``, ``UnallocatedSummary`` ...). They are detached from the
  SQLAlchemy session so they stay valid after the caller commits or closes it.

Partial-update payloads (``TransactionPatch``, ``TransferPatch``) are pydantic
models; their validation errors are translated to
:class:`~budget_ledger.errors.InvalidArgumentError` by the services.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

from .money import positive_amount

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class CategoryType(StrEnum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Granularity(StrEnum):
    """Sampling step for balance charts, chosen from the requested span."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    def label(self, boundary: datetime) -> str:
        if self is Granularity.MONTHLY:
            return f"{boundary:%b %Y}"
        return f"{boundary:%b} {boundary.day}"


class DateRangeOption(StrEnum):
    CURRENT_MONTH = "current-month"
    THREE_MONTHS = "3-months"
    CUSTOM = "custom"


# ---------------------------------------------------------------------------
# Computation inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AccountSeed:
    """Identity and baseline of an account as seen by balance computations."""

    id: str
    initial_balance: Decimal


@dataclass(frozen=True, slots=True)
class TransactionView:
    """A transaction with its category's type set; ``amount`` is a magnitude."""

    account_id: str
    amount: Decimal
    date: datetime
    category_types: frozenset[CategoryType]


@dataclass(frozen=True, slots=True)
class TransferView:
    from_account_id: str
    to_account_id: str
    amount: Decimal
    date: datetime


@dataclass(frozen=True, slots=True)
class Movement:
    """A signed change to one account's balance, effective at ``date``.

    Transactions and transfers are both reduced to movements; ``source`` keeps
    the two value sources distinguishable (``"transaction"``/``"transfer"``).
    """

    account_id: str
    date: datetime
    delta: Decimal
    source: str = "transaction"


# ---------------------------------------------------------------------------
# Computation results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BalanceSnapshot:
    date: datetime
    label: str
    balances: Mapping[str, Decimal]


@dataclass(frozen=True, slots=True)
class AccountBalance:
    """Balance of one account with the totals it was derived from."""

    account_id: str
    account_name: str
    initial_balance: Decimal
    transaction_total: Decimal
    transfer_total: Decimal
    balance: Decimal
    as_of: datetime
    transaction_count: int
    transfer_count: int


@dataclass(frozen=True, slots=True)
class UnallocatedSummary:
    total_funds: Decimal
    total_allocated: Decimal
    unallocated: Decimal


@dataclass(frozen=True, slots=True)
class AllocationEntry:
    id: str
    budget_id: str
    amount: Decimal
    created_at: datetime


@dataclass(frozen=True, slots=True)
class TransferRecord:
    id: str
    budget_id: str
    from_account_id: str
    to_account_id: str
    amount: Decimal
    date: datetime
    notes: str | None


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    id: str
    account_id: str
    category_id: str
    amount: Decimal
    date: datetime
    name: str | None
    bill_id: str | None


# ---------------------------------------------------------------------------
# Partial updates
# ---------------------------------------------------------------------------


class _Patch(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator("amount", check_fields=False)
    @classmethod
    def _amount_positive(cls, v: Decimal | None) -> Decimal | None:
        # same rounding and after-rounding check as creation
        return None if v is None else positive_amount(v)


class TransferPatch(_Patch):
    """Fields of a transfer that may change; unset fields are left as they are.

    ``notes`` distinguishes "not provided" from an explicit ``None`` (clear)
    through ``model_fields_set``.
    """

    from_account_id: str | None = None
    to_account_id: str | None = None
    amount: Decimal | None = None
    date: datetime | None = None
    notes: str | None = None


class TransactionPatch(_Patch):
    category_id: str | None = None
    amount: Decimal | None = None
    date: datetime | None = None
    name: str | None = None
    bill_id: str | None = None


__all__ = [
    "CategoryType",
    "Granularity",
    "DateRangeOption",
    "AccountSeed",
    "TransactionView",
    "TransferView",
    "Movement",
    "BalanceSnapshot",
    "AccountBalance",
    "UnallocatedSummary",
    "AllocationEntry",
    "TransferRecord",
    "TransactionRecord",
    "TransferPatch",
    "TransactionPatch",
]
