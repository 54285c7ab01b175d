"""Sign rules: the single place where the direction of a movement is decided.

Transactions store a positive magnitude and no direction. The sign is inferred
from the category's type set:

- exactly ``{INCOME}`` (INCOME and not EXPENSE) credits the account;
- anything else (EXPENSE only, or a hybrid carrying both types) debits it.

Balances already recorded depend on hybrids counting as debits.

Transfers are category-free: they debit the source account and credit the
destination account by the same amount at the same instant.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from .errors import InvalidArgumentError
from .models import CategoryType, Movement, TransactionView, TransferView


def category_types(raw: Iterable[str]) -> frozenset[CategoryType]:
    """Parse stored/requested type names into a non-empty ``CategoryType`` set."""

    values = list(raw)
    try:
        types = frozenset(CategoryType(str(v).strip().upper()) for v in values)
    except ValueError:
        raise InvalidArgumentError(
            "category types must be drawn from INCOME/EXPENSE", field="types", value=values
        ) from None
    if not types:
        raise InvalidArgumentError("category needs at least one type", field="types", value=values)
    return types


def is_income_only(types: Iterable[CategoryType | str]) -> bool:
    s = {CategoryType(t) for t in types}
    return CategoryType.INCOME in s and CategoryType.EXPENSE not in s


def transaction_delta(amount: Decimal, types: Iterable[CategoryType | str]) -> Decimal:
    return amount if is_income_only(types) else -amount


def transaction_movement(tx: TransactionView) -> Movement:
    return Movement(
        account_id=tx.account_id,
        date=tx.date,
        delta=transaction_delta(tx.amount, tx.category_types),
        source="transaction",
    )


def transfer_movements(transfer: TransferView) -> tuple[Movement, Movement]:
    """Return the ``(debit, credit)`` pair for a transfer."""

    return (
        Movement(transfer.from_account_id, transfer.date, -transfer.amount, "transfer"),
        Movement(transfer.to_account_id, transfer.date, transfer.amount, "transfer"),
    )


__all__ = [
    "category_types",
    "is_income_only",
    "transaction_delta",
    "transaction_movement",
    "transfer_movements",
]
