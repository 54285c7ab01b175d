"""Amount parsing for ledger inputs.

Amounts are ``Decimal`` quantized to cents, mirroring the ``Numeric(18, 2)``
columns. Invalid or non-positive input is rejected, never clamped.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .errors import InvalidArgumentError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal_2(raw: Any, *, field: str = "amount") -> Decimal:
    # float goes through str() so 0.1 becomes Decimal("0.1"), not its binary expansion
    if isinstance(raw, bool) or raw is None:
        raise InvalidArgumentError(f"{field} must be a number", field=field, value=raw)
    try:
        d = raw if isinstance(raw, Decimal) else Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise InvalidArgumentError(f"{field} must be a number", field=field, value=raw) from None
    if not d.is_finite():
        raise InvalidArgumentError(f"{field} must be finite", field=field, value=raw)
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def positive_amount(raw: Any, *, field: str = "amount") -> Decimal:
    """Parse ``raw`` and require it to be strictly positive after rounding."""

    d = to_decimal_2(raw, field=field)
    if d <= ZERO:
        raise InvalidArgumentError(f"{field} must be positive", field=field, value=raw)
    return d


__all__ = ["CENT", "ZERO", "to_decimal_2", "positive_amount"]
