"""Account-to-account transfers.

A transfer moves money between two accounts linked to the same budget. It is
distinct from a budget allocation: balances of the two accounts change, while
budget allocations are untouched. Transfers feed
:mod:`budget_ledger.balances` as a value source next to transactions; since
balances are recomputed on read, creating, editing or deleting a transfer
changes every balance at or after its (old or new) date with no further work.

Validation order for writes: amounts and distinct accounts first, then the
budget's existence, then membership, then the account links.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from budget_db.models.ledger import HbBudgetAccount, HbTransfer
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from .allocations import get_budget
from .authz import MembershipChecker, require_member
from .clock import Clock, ensure_utc, utc_now
from .errors import InvalidArgumentError, NotFoundError
from .logging_setup import get_logger
from .models import TransferPatch, TransferRecord
from .money import positive_amount

_logger = get_logger("budget_ledger.transfers")

_REQUIRED_FIELDS = ("from_account_id", "to_account_id", "amount", "date")


def _record(row: HbTransfer) -> TransferRecord:
    return TransferRecord(
        id=row.id,
        budget_id=row.budget_id,
        from_account_id=row.from_account_id,
        to_account_id=row.to_account_id,
        amount=Decimal(row.amount),
        date=ensure_utc(row.date),
        notes=row.notes,
    )


def _require_distinct(from_account_id: str, to_account_id: str) -> None:
    if from_account_id == to_account_id:
        raise InvalidArgumentError(
            "source and destination accounts must be different",
            field="to_account_id",
            value=to_account_id,
        )


def _require_linked(session: Session, *, budget_id: str, account_id: str, field: str) -> None:
    link = session.get(HbBudgetAccount, (budget_id, account_id))
    if link is None:
        role = "source" if field == "from_account_id" else "destination"
        raise InvalidArgumentError(
            f"{role} account is not linked to budget {budget_id!r}",
            field=field,
            value=account_id,
        )


def _get_transfer(session: Session, transfer_id: str) -> HbTransfer:
    row = session.get(HbTransfer, transfer_id)
    if row is None:
        raise NotFoundError("transfer", transfer_id)
    return row


def create_transfer(
    session: Session,
    *,
    budget_id: str,
    from_account_id: str,
    to_account_id: str,
    amount: Any,
    date: datetime,
    actor_id: str,
    notes: str | None = None,
    membership: MembershipChecker | None = None,
) -> TransferRecord:
    """Record a transfer between two accounts linked to ``budget_id``."""

    value = positive_amount(amount)
    _require_distinct(from_account_id, to_account_id)
    budget = get_budget(session, budget_id)
    require_member(
        session, user_id=actor_id, household_id=budget.household_id, membership=membership
    )
    _require_linked(
        session, budget_id=budget.id, account_id=from_account_id, field="from_account_id"
    )
    _require_linked(
        session, budget_id=budget.id, account_id=to_account_id, field="to_account_id"
    )

    row = HbTransfer(
        budget_id=budget.id,
        from_account_id=from_account_id,
        to_account_id=to_account_id,
        amount=value,
        date=ensure_utc(date),
        notes=(notes.strip() or None) if notes is not None else None,
    )
    session.add(row)
    session.flush()
    _logger.info(
        "Transfer %s created: %s from account=%s to account=%s (budget=%s)",
        row.id,
        value,
        from_account_id,
        to_account_id,
        budget.id,
    )
    return _record(row)


def update_transfer(
    session: Session,
    *,
    transfer_id: str,
    actor_id: str,
    membership: MembershipChecker | None = None,
    clock: Clock = utc_now,
    **changes: Any,
) -> TransferRecord:
    """Apply a partial update (``from_account_id``, ``to_account_id``,
    ``amount``, ``date``, ``notes``) to an existing transfer.

    Omitted fields keep their value; ``notes=None`` clears the notes. Account
    links and distinctness are checked against the resulting values.
    """

    try:
        patch = TransferPatch(**changes)
    except ValidationError as exc:
        raise InvalidArgumentError(f"invalid transfer update: {exc.errors()[0]['msg']}") from exc
    provided = patch.model_dump(exclude_unset=True)
    for field in _REQUIRED_FIELDS:
        if field in provided and provided[field] is None:
            raise InvalidArgumentError(f"{field} cannot be cleared", field=field, value=None)

    row = _get_transfer(session, transfer_id)
    budget = get_budget(session, row.budget_id)
    require_member(
        session, user_id=actor_id, household_id=budget.household_id, membership=membership
    )

    final_from = provided.get("from_account_id", row.from_account_id)
    final_to = provided.get("to_account_id", row.to_account_id)
    if "from_account_id" in provided:
        _require_linked(
            session, budget_id=budget.id, account_id=final_from, field="from_account_id"
        )
    if "to_account_id" in provided:
        _require_linked(
            session, budget_id=budget.id, account_id=final_to, field="to_account_id"
        )
    _require_distinct(final_from, final_to)

    old_date = ensure_utc(row.date)
    row.from_account_id = final_from
    row.to_account_id = final_to
    if "amount" in provided:
        row.amount = provided["amount"]
    if "date" in provided:
        row.date = ensure_utc(provided["date"])
    if "notes" in provided:
        row.notes = provided["notes"] or None
    row.updated_at = ensure_utc(clock())
    session.flush()
    _logger.info(
        "Transfer %s updated (fields=%s); balances from %s onward are affected",
        row.id,
        sorted(provided),
        min(old_date, ensure_utc(row.date)).isoformat(),
    )
    return _record(row)


def delete_transfer(
    session: Session,
    *,
    transfer_id: str,
    actor_id: str,
    membership: MembershipChecker | None = None,
) -> TransferRecord:
    """Delete a transfer and return what it was."""

    row = _get_transfer(session, transfer_id)
    budget = get_budget(session, row.budget_id)
    require_member(
        session, user_id=actor_id, household_id=budget.household_id, membership=membership
    )
    record = _record(row)
    session.delete(row)
    session.flush()
    _logger.info("Transfer %s deleted (budget=%s)", record.id, record.budget_id)
    return record


def list_transfers(
    session: Session,
    *,
    budget_id: str,
    actor_id: str,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    membership: MembershipChecker | None = None,
) -> list[TransferRecord]:
    """Transfers of a budget, newest first; date bounds are inclusive."""

    budget = get_budget(session, budget_id)
    require_member(
        session, user_id=actor_id, household_id=budget.household_id, membership=membership
    )
    stmt = select(HbTransfer).where(HbTransfer.budget_id == budget.id)
    if date_from is not None:
        stmt = stmt.where(HbTransfer.date >= ensure_utc(date_from))
    if date_to is not None:
        stmt = stmt.where(HbTransfer.date <= ensure_utc(date_to))
    rows = session.execute(stmt.order_by(HbTransfer.date.desc(), HbTransfer.id)).scalars().all()
    return [_record(r) for r in rows]


__all__ = [
    "create_transfer",
    "update_transfer",
    "delete_transfer",
    "list_transfers",
]
