"""Household, account, category and budget creation.

This is the small amount of reference-data plumbing the ledger depends on.
Accounts and budgets are created once and afterwards only renamed (accounts
may also be archived); an account's ``initial_balance`` never changes after
creation because every balance is derived from it.

``create_household`` writes the household and its owner membership, and
``create_budget`` a budget with its account links, inside the caller's
transaction; on failure the session is rolled back so neither half is left
behind.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, TypedDict

from budget_db.models.ledger import (
    HbAccount,
    HbBudget,
    HbBudgetAccount,
    HbCategory,
    HbHousehold,
    HbHouseholdUser,
)
from sqlalchemy import select
from sqlalchemy.orm import Session

from .allocations import get_budget
from .authz import MembershipChecker, require_member
from .balances import get_account
from .clock import Clock, ensure_utc, utc_now
from .direction import category_types
from .errors import InvalidArgumentError, NotFoundError
from .logging_setup import get_logger
from .money import to_decimal_2

_logger = get_logger("budget_ledger.catalog")


class AccountDict(TypedDict):
    id: str
    household_id: str
    name: str
    initial_balance: str
    archived: bool


class CategoryDict(TypedDict):
    id: str
    household_id: str
    name: str
    types: list[str]


class BudgetDict(TypedDict):
    id: str
    household_id: str
    name: str
    account_ids: list[str]


def normalize_name(name: str, *, field: str = "name", max_len: int = 100) -> str:
    """Trim and collapse whitespace; reject empty or over-long names."""

    n = " ".join((name or "").strip().split())
    if not n:
        raise InvalidArgumentError(f"{field} cannot be empty", field=field, value=name)
    if len(n) > max_len:
        raise InvalidArgumentError(
            f"{field} must be at most {max_len} characters", field=field, value=name
        )
    return n


def _account_dict(row: HbAccount) -> AccountDict:
    return {
        "id": row.id,
        "household_id": row.household_id,
        "name": row.name,
        "initial_balance": f"{row.initial_balance:.2f}",
        "archived": bool(row.archived),
    }


def _get_household(session: Session, household_id: str) -> HbHousehold:
    household = session.get(HbHousehold, household_id)
    if household is None:
        raise NotFoundError("household", household_id)
    return household


def create_household(session: Session, *, name: str, owner_id: str) -> str:
    """Create a household with ``owner_id`` as its first member; return its id."""

    household = HbHousehold(name=normalize_name(name))
    try:
        session.add(household)
        session.flush()
        session.add(HbHouseholdUser(household_id=household.id, user_id=owner_id, role="owner"))
        session.flush()
    except Exception:
        session.rollback()
        raise
    _logger.info("Household %s created by user=%s", household.id, owner_id)
    return household.id


def add_member(
    session: Session,
    *,
    household_id: str,
    user_id: str,
    actor_id: str,
    membership: MembershipChecker | None = None,
) -> None:
    """Add ``user_id`` to a household on behalf of an existing member."""

    _get_household(session, household_id)
    require_member(session, user_id=actor_id, household_id=household_id, membership=membership)
    if session.get(HbHouseholdUser, (household_id, user_id)) is None:
        session.add(HbHouseholdUser(household_id=household_id, user_id=user_id, role="member"))
        session.flush()
        _logger.info("User %s joined household %s", user_id, household_id)


def create_account(
    session: Session,
    *,
    household_id: str,
    name: str,
    actor_id: str,
    initial_balance: Any = 0,
    membership: MembershipChecker | None = None,
) -> AccountDict:
    # Negative opening balances are legitimate (e.g., credit cards).
    balance = to_decimal_2(initial_balance, field="initial_balance")
    _get_household(session, household_id)
    require_member(session, user_id=actor_id, household_id=household_id, membership=membership)
    row = HbAccount(
        household_id=household_id,
        name=normalize_name(name),
        initial_balance=balance,
        archived=False,
    )
    session.add(row)
    session.flush()
    _logger.info("Account %s created in household=%s", row.id, household_id)
    return _account_dict(row)


def create_category(
    session: Session,
    *,
    household_id: str,
    name: str,
    types: Iterable[str],
    actor_id: str,
    membership: MembershipChecker | None = None,
) -> CategoryDict:
    parsed = sorted(t.value for t in category_types(types))
    _get_household(session, household_id)
    require_member(session, user_id=actor_id, household_id=household_id, membership=membership)
    row = HbCategory(household_id=household_id, name=normalize_name(name), types=parsed)
    session.add(row)
    session.flush()
    _logger.info("Category %s created in household=%s types=%s", row.id, household_id, parsed)
    return {"id": row.id, "household_id": household_id, "name": row.name, "types": parsed}


def create_budget(
    session: Session,
    *,
    household_id: str,
    name: str,
    actor_id: str,
    account_ids: Sequence[str] = (),
    membership: MembershipChecker | None = None,
) -> BudgetDict:
    """Create a budget, optionally linking household accounts in the same write."""

    budget_name = normalize_name(name)
    _get_household(session, household_id)
    require_member(session, user_id=actor_id, household_id=household_id, membership=membership)
    ids = list(dict.fromkeys(account_ids))
    if ids:
        found = set(
            session.execute(
                select(HbAccount.id).where(
                    HbAccount.id.in_(ids), HbAccount.household_id == household_id
                )
            ).scalars()
        )
        for account_id in ids:
            if account_id not in found:
                raise NotFoundError("account", account_id)

    budget = HbBudget(household_id=household_id, name=budget_name)
    try:
        session.add(budget)
        session.flush()
        session.add_all(HbBudgetAccount(budget_id=budget.id, account_id=a) for a in ids)
        session.flush()
    except Exception:
        session.rollback()
        raise
    _logger.info(
        "Budget %s created in household=%s (%d accounts)", budget.id, household_id, len(ids)
    )
    return {
        "id": budget.id,
        "household_id": household_id,
        "name": budget.name,
        "account_ids": ids,
    }


def rename_account(
    session: Session,
    *,
    account_id: str,
    name: str,
    actor_id: str,
    membership: MembershipChecker | None = None,
    clock: Clock = utc_now,
) -> AccountDict:
    new_name = normalize_name(name)
    account = get_account(session, account_id)
    require_member(
        session, user_id=actor_id, household_id=account.household_id, membership=membership
    )
    account.name = new_name
    account.updated_at = ensure_utc(clock())
    session.flush()
    return _account_dict(account)


def archive_account(
    session: Session,
    *,
    account_id: str,
    actor_id: str,
    membership: MembershipChecker | None = None,
    clock: Clock = utc_now,
) -> AccountDict:
    """Hide an account from pickers; its history still counts in every balance."""

    account = get_account(session, account_id)
    require_member(
        session, user_id=actor_id, household_id=account.household_id, membership=membership
    )
    account.archived = True
    account.updated_at = ensure_utc(clock())
    session.flush()
    _logger.info("Account %s archived", account.id)
    return _account_dict(account)


def rename_budget(
    session: Session,
    *,
    budget_id: str,
    name: str,
    actor_id: str,
    membership: MembershipChecker | None = None,
    clock: Clock = utc_now,
) -> BudgetDict:
    new_name = normalize_name(name)
    budget = get_budget(session, budget_id)
    require_member(
        session, user_id=actor_id, household_id=budget.household_id, membership=membership
    )
    budget.name = new_name
    budget.updated_at = ensure_utc(clock())
    session.flush()
    linked = session.execute(
        select(HbBudgetAccount.account_id).where(HbBudgetAccount.budget_id == budget.id)
    ).scalars()
    return {
        "id": budget.id,
        "household_id": budget.household_id,
        "name": budget.name,
        "account_ids": sorted(linked),
    }


__all__ = [
    "AccountDict",
    "CategoryDict",
    "BudgetDict",
    "normalize_name",
    "create_household",
    "add_member",
    "create_account",
    "create_category",
    "create_budget",
    "rename_account",
    "archive_account",
    "rename_budget",
]
