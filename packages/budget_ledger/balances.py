"""Account balances reconstructed from the transaction and transfer history.

Nothing here writes. A balance is never stored: every call folds the account's
``initial_balance`` with the signed deltas of the rows dated at or before the
requested instant, so edits and deletions of transactions or transfers are
reflected retroactively without any invalidation step.

Value sources
-------------
- ``hb_transactions`` joined to ``hb_categories`` for the type set; the sign
  comes from :mod:`budget_ledger.direction`.
- ``hb_transfers``: debit on ``from_account_id``, credit on ``to_account_id``.
  Transfers are kept as their own source rather than being turned into
  synthetic transactions, since they carry no category.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from budget_db.models.ledger import HbAccount, HbCategory, HbTransaction, HbTransfer
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from .clock import Clock, ensure_utc, utc_now
from .direction import category_types, transaction_movement, transfer_movements
from .errors import NotFoundError
from .logging_setup import get_logger
from .models import AccountBalance, AccountSeed, Movement, TransactionView, TransferView
from .money import ZERO

_logger = get_logger("budget_ledger.balances")


def get_account(session: Session, account_id: str) -> HbAccount:
    account = session.get(HbAccount, account_id)
    if account is None:
        raise NotFoundError("account", account_id)
    return account


def load_account_seeds(session: Session, account_ids: Sequence[str]) -> list[AccountSeed]:
    """Return seeds in the order requested; unknown ids raise :class:`NotFoundError`."""

    ids = list(dict.fromkeys(account_ids))
    rows = session.execute(select(HbAccount).where(HbAccount.id.in_(ids))).scalars().all()
    by_id = {r.id: r for r in rows}
    for account_id in ids:
        if account_id not in by_id:
            raise NotFoundError("account", account_id)
    return [AccountSeed(id=a, initial_balance=Decimal(by_id[a].initial_balance)) for a in ids]


def load_transaction_views(
    session: Session,
    account_ids: Iterable[str],
    *,
    until: datetime | None = None,
) -> list[TransactionView]:
    ids = list(account_ids)
    stmt = (
        select(HbTransaction.account_id, HbTransaction.amount, HbTransaction.date, HbCategory.types)
        .join(HbCategory, HbCategory.id == HbTransaction.category_id)
        .where(HbTransaction.account_id.in_(ids))
    )
    if until is not None:
        stmt = stmt.where(HbTransaction.date <= ensure_utc(until))
    return [
        TransactionView(
            account_id=account_id,
            amount=Decimal(amount),
            date=ensure_utc(date),
            category_types=category_types(types),
        )
        for account_id, amount, date, types in session.execute(stmt)
    ]


def load_transfer_views(
    session: Session,
    account_ids: Iterable[str],
    *,
    until: datetime | None = None,
) -> list[TransferView]:
    ids = list(account_ids)
    stmt = select(
        HbTransfer.from_account_id, HbTransfer.to_account_id, HbTransfer.amount, HbTransfer.date
    ).where(or_(HbTransfer.from_account_id.in_(ids), HbTransfer.to_account_id.in_(ids)))
    if until is not None:
        stmt = stmt.where(HbTransfer.date <= ensure_utc(until))
    return [
        TransferView(
            from_account_id=from_id,
            to_account_id=to_id,
            amount=Decimal(amount),
            date=ensure_utc(date),
        )
        for from_id, to_id, amount, date in session.execute(stmt)
    ]


def to_movements(
    transactions: Iterable[TransactionView],
    transfers: Iterable[TransferView] = (),
    *,
    account_ids: Iterable[str] | None = None,
) -> list[Movement]:
    """Reduce both value sources to signed movements (unsorted).

    When ``account_ids`` is given, transfer legs for other accounts are dropped
    (a transfer into an account outside the set has no effect on the set).
    """

    wanted = set(account_ids) if account_ids is not None else None
    out = [transaction_movement(tx) for tx in transactions]
    for transfer in transfers:
        for leg in transfer_movements(transfer):
            if wanted is None or leg.account_id in wanted:
                out.append(leg)
    return out


def load_movements(
    session: Session,
    account_ids: Sequence[str],
    *,
    until: datetime | None = None,
) -> list[Movement]:
    """Load every movement for ``account_ids`` dated at or before ``until``.

    ``until=None`` loads the entire history.
    """

    txs = load_transaction_views(session, account_ids, until=until)
    transfers = load_transfer_views(session, account_ids, until=until)
    return to_movements(txs, transfers, account_ids=account_ids)


def balance_breakdown(
    session: Session,
    *,
    account_id: str,
    as_of: datetime | None = None,
    clock: Clock = utc_now,
) -> AccountBalance:
    """Balance of ``account_id`` at ``as_of`` (default: now) with its components."""

    account = get_account(session, account_id)
    cutoff = ensure_utc(as_of) if as_of is not None else ensure_utc(clock())
    movements = load_movements(session, [account_id], until=cutoff)

    tx_total = ZERO
    transfer_total = ZERO
    tx_count = 0
    transfer_count = 0
    for m in movements:
        if m.source == "transfer":
            transfer_total += m.delta
            transfer_count += 1
        else:
            tx_total += m.delta
            tx_count += 1

    initial = Decimal(account.initial_balance)
    result = AccountBalance(
        account_id=account.id,
        account_name=account.name,
        initial_balance=initial,
        transaction_total=tx_total,
        transfer_total=transfer_total,
        balance=initial + tx_total + transfer_total,
        as_of=cutoff,
        transaction_count=tx_count,
        transfer_count=transfer_count,
    )
    _logger.debug(
        "Balance account=%s as_of=%s balance=%s (%d tx, %d transfers)",
        account_id,
        cutoff.isoformat(),
        result.balance,
        tx_count,
        transfer_count,
    )
    return result


def balance_at(session: Session, *, account_id: str, timestamp: datetime) -> Decimal:
    """Balance of ``account_id`` including every movement dated ``<= timestamp``."""

    return balance_breakdown(session, account_id=account_id, as_of=timestamp).balance


def current_balance(session: Session, *, account_id: str, clock: Clock = utc_now) -> Decimal:
    return balance_breakdown(session, account_id=account_id, clock=clock).balance


__all__ = [
    "get_account",
    "load_account_seeds",
    "load_transaction_views",
    "load_transfer_views",
    "to_movements",
    "load_movements",
    "balance_breakdown",
    "balance_at",
    "current_balance",
]
