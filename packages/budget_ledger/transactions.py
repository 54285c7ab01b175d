"""Transaction CRUD.

Transactions are the only ledger inputs with full create/update/delete. Their
``amount`` is always a positive magnitude; the sign used in balances comes
from the category's types (see :mod:`budget_ledger.direction`). Because
balances are never stored, every change here is reflected retroactively by the
next balance read.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from budget_db.models.ledger import HbAccount, HbCategory, HbTransaction
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from .authz import MembershipChecker, require_member
from .balances import get_account
from .clock import Clock, ensure_utc, utc_now
from .errors import InvalidArgumentError, NotFoundError
from .logging_setup import get_logger
from .models import TransactionPatch, TransactionRecord
from .money import positive_amount

_logger = get_logger("budget_ledger.transactions")

_REQUIRED_FIELDS = ("category_id", "amount", "date")


def _record(row: HbTransaction) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        account_id=row.account_id,
        category_id=row.category_id,
        amount=Decimal(row.amount),
        date=ensure_utc(row.date),
        name=row.name,
        bill_id=row.bill_id,
    )


def _category_for(session: Session, *, category_id: str, account: HbAccount) -> HbCategory:
    category = session.get(HbCategory, category_id)
    if category is None:
        raise NotFoundError("category", category_id)
    if category.household_id != account.household_id:
        raise InvalidArgumentError(
            "category belongs to a different household than the account",
            field="category_id",
            value=category_id,
        )
    return category


def _get_transaction(session: Session, transaction_id: str) -> HbTransaction:
    row = session.get(HbTransaction, transaction_id)
    if row is None:
        raise NotFoundError("transaction", transaction_id)
    return row


def create_transaction(
    session: Session,
    *,
    account_id: str,
    category_id: str,
    amount: Any,
    date: datetime,
    actor_id: str,
    name: str | None = None,
    bill_id: str | None = None,
    membership: MembershipChecker | None = None,
) -> TransactionRecord:
    value = positive_amount(amount)
    account = get_account(session, account_id)
    require_member(
        session, user_id=actor_id, household_id=account.household_id, membership=membership
    )
    _category_for(session, category_id=category_id, account=account)

    row = HbTransaction(
        account_id=account.id,
        category_id=category_id,
        amount=value,
        date=ensure_utc(date),
        name=(name.strip() or None) if name is not None else None,
        bill_id=bill_id,
    )
    session.add(row)
    session.flush()
    _logger.info("Transaction %s created on account=%s amount=%s", row.id, account.id, value)
    return _record(row)


def update_transaction(
    session: Session,
    *,
    transaction_id: str,
    actor_id: str,
    membership: MembershipChecker | None = None,
    clock: Clock = utc_now,
    **changes: Any,
) -> TransactionRecord:
    """Partially update a transaction (``category_id``, ``amount``, ``date``,
    ``name``, ``bill_id``); ``name``/``bill_id`` may be cleared with ``None``.
    """

    try:
        patch = TransactionPatch(**changes)
    except ValidationError as exc:
        raise InvalidArgumentError(
            f"invalid transaction update: {exc.errors()[0]['msg']}"
        ) from exc
    provided = patch.model_dump(exclude_unset=True)
    for field in _REQUIRED_FIELDS:
        if field in provided and provided[field] is None:
            raise InvalidArgumentError(f"{field} cannot be cleared", field=field, value=None)

    row = _get_transaction(session, transaction_id)
    account = get_account(session, row.account_id)
    require_member(
        session, user_id=actor_id, household_id=account.household_id, membership=membership
    )
    if "category_id" in provided:
        _category_for(session, category_id=provided["category_id"], account=account)

    for field, value in provided.items():
        if field == "date":
            value = ensure_utc(value)
        elif field in ("name", "bill_id"):
            value = value or None
        setattr(row, field, value)
    row.updated_at = ensure_utc(clock())
    session.flush()
    _logger.info("Transaction %s updated (fields=%s)", row.id, sorted(provided))
    return _record(row)


def delete_transaction(
    session: Session,
    *,
    transaction_id: str,
    actor_id: str,
    membership: MembershipChecker | None = None,
) -> TransactionRecord:
    row = _get_transaction(session, transaction_id)
    account = get_account(session, row.account_id)
    require_member(
        session, user_id=actor_id, household_id=account.household_id, membership=membership
    )
    record = _record(row)
    session.delete(row)
    session.flush()
    _logger.info("Transaction %s deleted from account=%s", record.id, record.account_id)
    return record


def list_transactions(
    session: Session,
    *,
    account_id: str,
    actor_id: str,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    membership: MembershipChecker | None = None,
) -> list[TransactionRecord]:
    """Transactions of one account, newest first; date bounds are inclusive."""

    account = get_account(session, account_id)
    require_member(
        session, user_id=actor_id, household_id=account.household_id, membership=membership
    )
    stmt = select(HbTransaction).where(HbTransaction.account_id == account.id)
    if date_from is not None:
        stmt = stmt.where(HbTransaction.date >= ensure_utc(date_from))
    if date_to is not None:
        stmt = stmt.where(HbTransaction.date <= ensure_utc(date_to))
    rows = (
        session.execute(stmt.order_by(HbTransaction.date.desc(), HbTransaction.id))
        .scalars()
        .all()
    )
    return [_record(r) for r in rows]


__all__ = [
    "create_transaction",
    "update_transaction",
    "delete_transaction",
    "list_transactions",
]
