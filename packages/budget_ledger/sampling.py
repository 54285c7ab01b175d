"""Balance time series for historical charts.

:func:`sample_balances` walks the whole movement history exactly once:

1. every movement of the requested accounts is collected, including those
   before the window (the balance at the window start depends on them);
2. movements are sorted ascending by date (stable, so same-instant rows keep
   their input order);
3. running balances start at each account's ``initial_balance`` and a single
   cursor applies every movement strictly before ``start``;
4. the granularity is chosen from the span (:func:`choose_granularity`);
5. for each boundary the *same* cursor advances through movements dated at or
   before end-of-day(boundary), then a snapshot is emitted.

Cost is O(movements + boundaries). A movement timestamped exactly on a
boundary belongs to that boundary's snapshot.

All boundaries are computed in UTC. Weeks start on Sunday.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime, timedelta
from operator import itemgetter

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from .balances import load_account_seeds, load_movements, to_movements
from .clock import end_of_day, ensure_utc, start_of_day, utc_now
from .errors import InvalidArgumentError
from .logging_setup import get_logger
from .models import (
    AccountSeed,
    BalanceSnapshot,
    DateRangeOption,
    Granularity,
    Movement,
    TransactionView,
    TransferView,
)

_logger = get_logger("budget_ledger.sampling")

# Spans of at least this many whole months are sampled monthly.
MONTHLY_MIN_MONTHS = 3
# Spans longer than this many days (and shorter than the monthly threshold)
# are sampled weekly; anything shorter is sampled daily.
WEEKLY_MIN_DAYS_EXCLUSIVE = 31


def _check_window(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    start_u, end_u = ensure_utc(start), ensure_utc(end)
    if end_u < start_u:
        raise InvalidArgumentError(
            "end must not be before start", field="end", value=end.isoformat()
        )
    return start_u, end_u


def choose_granularity(start: datetime, end: datetime) -> Granularity:
    start_u, end_u = _check_window(start, end)
    delta = relativedelta(end_u, start_u)
    whole_months = delta.years * 12 + delta.months
    if whole_months >= MONTHLY_MIN_MONTHS:
        return Granularity.MONTHLY
    if (end_u - start_u).days > WEEKLY_MIN_DAYS_EXCLUSIVE:
        return Granularity.WEEKLY
    return Granularity.DAILY


def _start_of_week(value: datetime) -> datetime:
    # Python weekday(): Monday=0 .. Sunday=6; shift so Sunday is day 0.
    days_since_sunday = (value.weekday() + 1) % 7
    return start_of_day(value) - timedelta(days=days_since_sunday)


def sample_boundaries(
    start: datetime, end: datetime, granularity: Granularity
) -> Iterator[datetime]:
    """Yield the sampling instants for ``[start, end]`` in ascending order.

    - daily: midnight of every day touched by the range;
    - weekly: midnight of every Sunday from the week containing ``start``
      through the week containing ``end``;
    - monthly: the first of every month from ``start``'s month to ``end``'s.
    """

    start_u, end_u = _check_window(start, end)
    if granularity is Granularity.MONTHLY:
        current = start_of_day(start_u).replace(day=1)
        step = relativedelta(months=1)
    elif granularity is Granularity.WEEKLY:
        current = _start_of_week(start_u)
        step = relativedelta(weeks=1)
    else:
        current = start_of_day(start_u)
        step = relativedelta(days=1)

    while current <= end_u:
        yield current
        current = current + step


def sample_balances(
    accounts: Sequence[AccountSeed],
    movements: Iterable[Movement],
    start: datetime,
    end: datetime,
    *,
    granularity: Granularity | None = None,
) -> Iterator[BalanceSnapshot]:
    """Yield one :class:`BalanceSnapshot` per sampling boundary.

    ``movements`` must be the *entire* history of ``accounts`` (not only the
    window). Movements for accounts outside ``accounts`` are ignored. The
    generator is single-pass; call again for a fresh series.
    """

    start_u, end_u = _check_window(start, end)
    gran = granularity or choose_granularity(start_u, end_u)

    # (utc date, movement) pairs; sorted() is stable so same-instant rows keep input order
    ordered = sorted(((ensure_utc(m.date), m) for m in movements), key=itemgetter(0))
    balances = {a.id: a.initial_balance for a in accounts}

    cursor = 0
    n = len(ordered)

    def _apply(m: Movement) -> None:
        if m.account_id in balances:
            balances[m.account_id] += m.delta

    # Baseline: everything strictly before the window start.
    while cursor < n and ordered[cursor][0] < start_u:
        _apply(ordered[cursor][1])
        cursor += 1

    emitted = 0
    for boundary in sample_boundaries(start_u, end_u, gran):
        cutoff = end_of_day(boundary)
        while cursor < n and ordered[cursor][0] <= cutoff:
            _apply(ordered[cursor][1])
            cursor += 1
        emitted += 1
        yield BalanceSnapshot(
            date=boundary,
            label=gran.label(boundary),
            balances={a.id: balances[a.id] for a in accounts},
        )

    _logger.debug(
        "Sampled %d %s points over %d movements (%s .. %s)",
        emitted,
        gran.value,
        n,
        start_u.date().isoformat(),
        end_u.date().isoformat(),
    )


def chart_series(
    accounts: Sequence[AccountSeed],
    transactions: Iterable[TransactionView],
    start: datetime,
    end: datetime,
    *,
    transfers: Iterable[TransferView] = (),
) -> list[BalanceSnapshot]:
    """Balance snapshots for in-memory accounts/transactions (and transfers).

    ``transactions`` should be the full history of the given accounts. Passing
    ``transfers`` keeps the series consistent with
    :func:`budget_ledger.balances.current_balance` when transfers exist.
    """

    movements = to_movements(transactions, transfers, account_ids=[a.id for a in accounts])
    return list(sample_balances(accounts, movements, start, end))


def load_chart_series(
    session: Session,
    *,
    account_ids: Sequence[str],
    start: datetime,
    end: datetime,
) -> list[BalanceSnapshot]:
    """Load seeds and the full history for ``account_ids`` and sample them."""

    _check_window(start, end)
    seeds = load_account_seeds(session, account_ids)
    movements = load_movements(session, [s.id for s in seeds])
    return list(sample_balances(seeds, movements, start, end))


def resolve_date_range(
    option: DateRangeOption | str,
    *,
    now: datetime | None = None,
    custom_start: datetime | None = None,
    custom_end: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Translate a dashboard range preset into ``(start, end)`` in UTC.

    - ``current-month``: first instant to last instant of the current month;
    - ``3-months``: start of the month two months back to end of this month;
    - ``custom``: the given bounds; falls back to the current month when either
      bound is missing.
    """

    try:
        opt = DateRangeOption(option)
    except ValueError:
        raise InvalidArgumentError(
            f"unknown date range option: {option!r}", field="option", value=option
        ) from None

    ref = ensure_utc(now) if now is not None else utc_now()
    month_start = start_of_day(ref).replace(day=1)
    month_end = end_of_day(month_start + relativedelta(months=1) - timedelta(days=1))

    if opt is DateRangeOption.THREE_MONTHS:
        return month_start - relativedelta(months=2), month_end
    if opt is DateRangeOption.CUSTOM and custom_start is not None and custom_end is not None:
        return _check_window(custom_start, custom_end)
    return month_start, month_end


__all__ = [
    "MONTHLY_MIN_MONTHS",
    "WEEKLY_MIN_DAYS_EXCLUSIVE",
    "choose_granularity",
    "sample_boundaries",
    "sample_balances",
    "chart_series",
    "load_chart_series",
    "resolve_date_range",
]
