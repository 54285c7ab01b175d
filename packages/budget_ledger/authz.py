"""Household membership checks.

The ledger consumes a single authorization question, "is this user a member of
this household?". :class:`MembershipChecker` is the seam; the default
:class:`SqlMembershipChecker` answers it from ``hb_household_users``. Hosts
with their own identity service pass a different checker via ``membership=``.
"""

from __future__ import annotations

from typing import Protocol

from budget_db.models.ledger import HbHouseholdUser
from sqlalchemy import select
from sqlalchemy.orm import Session

from .errors import ForbiddenError
from .logging_setup import get_logger

_logger = get_logger("budget_ledger.authz")


class MembershipChecker(Protocol):
    def is_member(self, user_id: str, household_id: str) -> bool: ...


class SqlMembershipChecker:
    def __init__(self, session: Session) -> None:
        self._session = session

    def is_member(self, user_id: str, household_id: str) -> bool:
        row = self._session.execute(
            select(HbHouseholdUser.user_id).where(
                HbHouseholdUser.household_id == household_id,
                HbHouseholdUser.user_id == user_id,
            )
        ).first()
        return row is not None


def require_member(
    session: Session,
    *,
    user_id: str,
    household_id: str,
    membership: MembershipChecker | None = None,
) -> None:
    """Raise :class:`ForbiddenError` unless ``user_id`` belongs to the household."""

    checker = membership if membership is not None else SqlMembershipChecker(session)
    if not checker.is_member(user_id, household_id):
        _logger.warning("Denied user=%s household=%s", user_id, household_id)
        raise ForbiddenError(user_id, household_id)


__all__ = ["MembershipChecker", "SqlMembershipChecker", "require_member"]
