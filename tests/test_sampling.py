from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from budget_ledger import (
    InvalidArgumentError,
    NotFoundError,
    chart_series,
    choose_granularity,
    create_transaction,
    create_transfer,
    current_balance,
    load_chart_series,
    resolve_date_range,
)
from budget_ledger.clock import end_of_day
from budget_ledger.models import (
    AccountSeed,
    CategoryType,
    Granularity,
    Movement,
    TransactionView,
)
from budget_ledger.sampling import sample_balances, sample_boundaries

from tests.helpers.db import World

INCOME = frozenset({CategoryType.INCOME})
EXPENSE = frozenset({CategoryType.EXPENSE})


def _d(y: int, m: int, d: int, h: int = 0) -> datetime:
    return datetime(y, m, d, h, tzinfo=UTC)


def _series_of(snapshots, account_id: str) -> list[Decimal]:
    return [s.balances[account_id] for s in snapshots]


# ---- Granularity -------------------------------------------------------------


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (_d(2024, 1, 1), _d(2024, 1, 1), Granularity.DAILY),
        (_d(2024, 1, 1), _d(2024, 2, 1), Granularity.DAILY),  # exactly 31 days
        (_d(2024, 1, 1), _d(2024, 2, 2), Granularity.WEEKLY),
        (_d(2024, 1, 1), _d(2024, 3, 31), Granularity.WEEKLY),
        (_d(2024, 1, 1), _d(2024, 4, 1), Granularity.MONTHLY),  # three whole months
        (_d(2023, 6, 15), _d(2024, 6, 15), Granularity.MONTHLY),
    ],
)
def test_choose_granularity_thresholds(start, end, expected) -> None:
    assert choose_granularity(start, end) is expected


def test_end_before_start_is_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        choose_granularity(_d(2024, 2, 1), _d(2024, 1, 1))
    with pytest.raises(InvalidArgumentError):
        chart_series([], [], _d(2024, 2, 1), _d(2024, 1, 1))


# ---- Boundaries and labels ---------------------------------------------------


def test_weekly_boundaries_start_on_sunday() -> None:
    # 2024-01-01 is a Monday; its week starts Sunday 2023-12-31
    points = list(sample_boundaries(_d(2024, 1, 1), _d(2024, 1, 20), Granularity.WEEKLY))

    assert points == [_d(2023, 12, 31), _d(2024, 1, 7), _d(2024, 1, 14)]
    assert all(p.weekday() == 6 for p in points)
    assert [Granularity.WEEKLY.label(p) for p in points] == ["Dec 31", "Jan 7", "Jan 14"]


def test_monthly_boundaries_and_labels() -> None:
    points = list(sample_boundaries(_d(2024, 11, 20), _d(2025, 2, 3), Granularity.MONTHLY))

    assert points == [_d(2024, 11, 1), _d(2024, 12, 1), _d(2025, 1, 1), _d(2025, 2, 1)]
    assert [Granularity.MONTHLY.label(p) for p in points] == [
        "Nov 2024",
        "Dec 2024",
        "Jan 2025",
        "Feb 2025",
    ]


def test_daily_boundaries_cover_every_day_touched() -> None:
    points = list(sample_boundaries(_d(2024, 2, 27, 15), _d(2024, 3, 1, 3), Granularity.DAILY))

    assert points == [_d(2024, 2, 27), _d(2024, 2, 28), _d(2024, 2, 29), _d(2024, 3, 1)]
    assert Granularity.DAILY.label(points[-1]) == "Mar 1"


# ---- Sampling ----------------------------------------------------------------


def test_movement_on_boundary_belongs_to_that_boundary() -> None:
    accounts = [AccountSeed("acc", Decimal("100"))]
    txs = [TransactionView("acc", Decimal("30"), _d(2024, 1, 2), INCOME)]

    snaps = chart_series(accounts, txs, _d(2024, 1, 1), _d(2024, 1, 2))

    assert [s.date for s in snaps] == [_d(2024, 1, 1), _d(2024, 1, 2)]
    assert _series_of(snaps, "acc") == [Decimal("100"), Decimal("130")]


def test_history_before_window_forms_the_baseline() -> None:
    accounts = [AccountSeed("acc", Decimal("500"))]
    txs = [
        TransactionView("acc", Decimal("200"), _d(2023, 12, 15), EXPENSE),
        TransactionView("acc", Decimal("50"), _d(2024, 1, 2, 10), INCOME),
        # after the window: never applied
        TransactionView("acc", Decimal("999"), _d(2024, 2, 1), INCOME),
    ]

    snaps = chart_series(accounts, txs, _d(2024, 1, 1), _d(2024, 1, 3))

    assert _series_of(snaps, "acc") == [Decimal("300"), Decimal("350"), Decimal("350")]


def test_no_movements_yields_flat_initial_balances() -> None:
    accounts = [AccountSeed("a", Decimal("10")), AccountSeed("b", Decimal("-5"))]

    snaps = chart_series(accounts, [], _d(2024, 1, 1), _d(2024, 1, 5))

    assert len(snaps) == 5
    assert all(s.balances == {"a": Decimal("10"), "b": Decimal("-5")} for s in snaps)


def test_unsorted_input_and_foreign_accounts() -> None:
    accounts = [AccountSeed("a", Decimal("0"))]
    movements = [
        Movement("a", _d(2024, 1, 3), Decimal("5")),
        Movement("zz", _d(2024, 1, 1), Decimal("1000")),
        Movement("a", _d(2024, 1, 1), Decimal("1")),
    ]

    snaps = list(sample_balances(accounts, movements, _d(2024, 1, 1), _d(2024, 1, 3)))

    assert _series_of(snaps, "a") == [Decimal("1"), Decimal("1"), Decimal("6")]


def test_granularity_override() -> None:
    accounts = [AccountSeed("a", Decimal("0"))]
    snaps = list(
        sample_balances(
            accounts, [], _d(2024, 1, 1), _d(2024, 6, 1), granularity=Granularity.DAILY
        )
    )
    assert len(snaps) == (_d(2024, 6, 1) - _d(2024, 1, 1)).days + 1


def test_monthly_series_over_a_year() -> None:
    accounts = [AccountSeed("a", Decimal("0"))]
    txs = [
        TransactionView("a", Decimal("100"), _d(2024, m, 15), INCOME) for m in range(1, 13)
    ]

    snaps = chart_series(accounts, txs, _d(2024, 1, 1), _d(2024, 12, 31))

    assert len(snaps) == 12
    # each month-start snapshot includes that day only, so the mid-month row lands next month
    assert _series_of(snaps, "a")[:3] == [Decimal("0"), Decimal("100"), Decimal("200")]
    assert snaps[0].label == "Jan 2024"


# ---- Loading from the database -----------------------------------------------


def test_last_point_agrees_with_current_balance(session, world: World) -> None:
    for day, category, amount in [
        (2, world.salary, "250"),
        (4, world.groceries, "80.25"),
        (6, world.reimbursable, "15"),
    ]:
        create_transaction(
            session,
            account_id=world.checking,
            category_id=category,
            amount=amount,
            date=_d(2024, 3, day, 9),
            actor_id=world.owner,
        )
    create_transfer(
        session,
        budget_id=world.budget_a,
        from_account_id=world.checking,
        to_account_id=world.savings,
        amount="100",
        date=_d(2024, 3, 5, 18),
        actor_id=world.member,
    )
    session.commit()

    end = _d(2024, 3, 10)
    snaps = load_chart_series(
        session, account_ids=[world.checking, world.savings], start=_d(2024, 3, 1), end=end
    )

    now = end_of_day(end)
    last = snaps[-1].balances
    assert last[world.checking] == current_balance(
        session, account_id=world.checking, clock=lambda: now
    )
    assert last[world.savings] == Decimal("100")
    assert last[world.checking] == Decimal("1054.75")


def test_load_chart_series_unknown_account(session, world: World) -> None:
    with pytest.raises(NotFoundError):
        load_chart_series(
            session,
            account_ids=[world.checking, "nope"],
            start=_d(2024, 1, 1),
            end=_d(2024, 1, 2),
        )


# ---- Date range presets ------------------------------------------------------

_NOW = datetime(2024, 5, 15, 13, 30, tzinfo=UTC)


def test_current_month_range() -> None:
    start, end = resolve_date_range("current-month", now=_NOW)
    assert start == _d(2024, 5, 1)
    assert end == end_of_day(_d(2024, 5, 31))


def test_three_month_range_spans_two_previous_months() -> None:
    start, end = resolve_date_range("3-months", now=_NOW)
    assert start == _d(2024, 3, 1)
    assert end == end_of_day(_d(2024, 5, 31))
    # two whole months and change: sampled weekly
    assert choose_granularity(start, end) is Granularity.WEEKLY


def test_custom_range_and_fallback() -> None:
    start, end = resolve_date_range(
        "custom", now=_NOW, custom_start=_d(2024, 1, 1), custom_end=_d(2024, 1, 9)
    )
    assert (start, end) == (_d(2024, 1, 1), _d(2024, 1, 9))

    assert resolve_date_range("custom", now=_NOW, custom_start=_d(2024, 1, 1)) == (
        resolve_date_range("current-month", now=_NOW)
    )


def test_unknown_range_option() -> None:
    with pytest.raises(InvalidArgumentError) as ei:
        resolve_date_range("last-decade", now=_NOW)
    assert ei.value.field == "option"


def test_range_end_is_inclusive_to_the_last_microsecond() -> None:
    _, end = resolve_date_range("current-month", now=_NOW)
    assert end + timedelta(microseconds=1) == _d(2024, 6, 1)
