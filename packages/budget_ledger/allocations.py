"""Budget allocation ledger.

Allocations are append-only signed rows in ``hb_budget_allocations``. A
budget's allocated total, and a household's unallocated funds, are folded from
those rows on every read; there is no running-total column to keep in sync.

Operations here validate everything before adding rows, then flush inside the
caller's transaction (callers own commit/rollback, e.g. via
``budget_db.client.session_scope``). A budget-to-budget transfer adds its two
rows in one flush; if that flush fails the session is rolled back, so neither
row can be committed on its own.

There is no ceiling: a household may allocate more than its total funds, and
concurrent calls are not serialized, so ``unallocated`` can go negative.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from budget_db.models.ledger import (
    HbAccount,
    HbBudget,
    HbBudgetAllocation,
    HbCategory,
    HbTransaction,
)
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .authz import MembershipChecker, require_member
from .clock import Clock, ensure_utc, utc_now
from .direction import is_income_only
from .errors import InvalidArgumentError, NotFoundError
from .logging_setup import get_logger
from .models import AllocationEntry, UnallocatedSummary
from .money import ZERO, positive_amount

_logger = get_logger("budget_ledger.allocations")


def _entry(row: HbBudgetAllocation) -> AllocationEntry:
    return AllocationEntry(
        id=row.id,
        budget_id=row.budget_id,
        amount=Decimal(row.amount),
        created_at=ensure_utc(row.created_at),
    )


def get_budget(session: Session, budget_id: str) -> HbBudget:
    budget = session.get(HbBudget, budget_id)
    if budget is None:
        raise NotFoundError("budget", budget_id)
    return budget


def allocate(
    session: Session,
    *,
    budget_id: str,
    amount: Any,
    actor_id: str,
    membership: MembershipChecker | None = None,
    clock: Clock = utc_now,
) -> AllocationEntry:
    """Move ``amount`` of the household's unallocated funds into a budget."""

    value = positive_amount(amount)
    budget = get_budget(session, budget_id)
    require_member(
        session, user_id=actor_id, household_id=budget.household_id, membership=membership
    )

    row = HbBudgetAllocation(budget_id=budget.id, amount=value, created_at=ensure_utc(clock()))
    session.add(row)
    session.flush()
    _logger.info("Allocated %s to budget=%s by user=%s", value, budget.id, actor_id)
    return _entry(row)


def transfer(
    session: Session,
    *,
    from_budget_id: str,
    to_budget_id: str,
    amount: Any,
    actor_id: str,
    membership: MembershipChecker | None = None,
    clock: Clock = utc_now,
) -> tuple[AllocationEntry, AllocationEntry]:
    """Shift ``amount`` of allocated funds between two budgets of one household.

    Returns the ``(debit, credit)`` entries. Both rows are written in a single
    flush; on failure the session is rolled back and the error re-raised.
    """

    value = positive_amount(amount)
    if from_budget_id == to_budget_id:
        raise InvalidArgumentError(
            "source and destination budgets must be different",
            field="to_budget_id",
            value=to_budget_id,
        )
    source = get_budget(session, from_budget_id)
    target = get_budget(session, to_budget_id)
    # Membership comes before the household comparison, on both sides, so a
    # cross-household pair only reads as InvalidArgument to members of both.
    require_member(
        session, user_id=actor_id, household_id=source.household_id, membership=membership
    )
    if source.household_id != target.household_id:
        require_member(
            session, user_id=actor_id, household_id=target.household_id, membership=membership
        )
        raise InvalidArgumentError(
            "budgets must belong to the same household",
            field="to_budget_id",
            value=to_budget_id,
        )

    # rollback() expires every instance; log with plain ids.
    source_id, target_id = source.id, target.id
    created_at = ensure_utc(clock())
    debit = HbBudgetAllocation(budget_id=source_id, amount=-value, created_at=created_at)
    credit = HbBudgetAllocation(budget_id=target_id, amount=value, created_at=created_at)
    try:
        session.add_all([debit, credit])
        session.flush()
    except Exception:
        session.rollback()
        _logger.error(
            "Budget transfer %s -> %s failed; rolled back", source_id, target_id, exc_info=True
        )
        raise

    _logger.info(
        "Transferred %s from budget=%s to budget=%s by user=%s",
        value,
        source_id,
        target_id,
        actor_id,
    )
    return _entry(debit), _entry(credit)


def budget_allocated(session: Session, *, budget_id: str) -> Decimal:
    """Net allocated total of one budget (sum of its signed entries)."""

    get_budget(session, budget_id)
    total = session.execute(
        select(func.coalesce(func.sum(HbBudgetAllocation.amount), 0)).where(
            HbBudgetAllocation.budget_id == budget_id
        )
    ).scalar_one()
    return Decimal(total).quantize(Decimal("0.01"))


def list_allocations(session: Session, *, budget_id: str) -> list[AllocationEntry]:
    """Entries of one budget, oldest first."""

    get_budget(session, budget_id)
    rows = (
        session.execute(
            select(HbBudgetAllocation)
            .where(HbBudgetAllocation.budget_id == budget_id)
            .order_by(HbBudgetAllocation.created_at, HbBudgetAllocation.id)
        )
        .scalars()
        .all()
    )
    return [_entry(r) for r in rows]


def unallocated(
    session: Session,
    *,
    household_id: str,
    actor_id: str,
    membership: MembershipChecker | None = None,
) -> UnallocatedSummary:
    """Household funds not yet allocated to any budget.

    ``total_funds`` is the sum of account initial balances plus every
    income-only transaction on the household's accounts (hybrid categories do
    not count as income). ``total_allocated`` sums every allocation entry of
    the household's budgets.
    """

    require_member(session, user_id=actor_id, household_id=household_id, membership=membership)

    initial_total = session.execute(
        select(func.coalesce(func.sum(HbAccount.initial_balance), 0)).where(
            HbAccount.household_id == household_id
        )
    ).scalar_one()

    # Fold income in Python so the income-only rule lives in one place.
    income_total = ZERO
    rows = session.execute(
        select(HbTransaction.amount, HbCategory.types)
        .join(HbAccount, HbAccount.id == HbTransaction.account_id)
        .join(HbCategory, HbCategory.id == HbTransaction.category_id)
        .where(HbAccount.household_id == household_id)
    )
    for amount, types in rows:
        if is_income_only(types):
            income_total += Decimal(amount)

    allocated_total = session.execute(
        select(func.coalesce(func.sum(HbBudgetAllocation.amount), 0))
        .join(HbBudget, HbBudget.id == HbBudgetAllocation.budget_id)
        .where(HbBudget.household_id == household_id)
    ).scalar_one()

    total_funds = (Decimal(initial_total) + income_total).quantize(Decimal("0.01"))
    total_allocated = Decimal(allocated_total).quantize(Decimal("0.01"))
    summary = UnallocatedSummary(
        total_funds=total_funds,
        total_allocated=total_allocated,
        unallocated=total_funds - total_allocated,
    )
    _logger.debug(
        "Unallocated household=%s funds=%s allocated=%s",
        household_id,
        summary.total_funds,
        summary.total_allocated,
    )
    return summary


__all__ = [
    "get_budget",
    "allocate",
    "transfer",
    "budget_allocated",
    "list_allocations",
    "unallocated",
]
