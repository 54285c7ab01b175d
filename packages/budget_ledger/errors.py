"""Error taxonomy for ledger operations.

Every error carries a machine-readable ``kind`` plus the offending identifier
so callers (transport layers, UIs) can render a specific message. The classes
also derive from the closest builtin (``LookupError``, ``PermissionError``,
``ValueError``) so generic handlers keep working.
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for all errors raised by ``budget_ledger`` operations."""

    kind: str = "ledger_error"


class NotFoundError(LedgerError, LookupError):
    kind = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found: {entity_id!r}")
        self.entity = entity
        self.entity_id = entity_id


class ForbiddenError(LedgerError, PermissionError):
    kind = "forbidden"

    def __init__(self, user_id: str, household_id: str) -> None:
        super().__init__(f"user {user_id!r} is not a member of household {household_id!r}")
        self.user_id = user_id
        self.household_id = household_id


class InvalidArgumentError(LedgerError, ValueError):
    kind = "invalid_argument"

    def __init__(self, message: str, *, field: str | None = None, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


__all__ = [
    "LedgerError",
    "NotFoundError",
    "ForbiddenError",
    "InvalidArgumentError",
]
