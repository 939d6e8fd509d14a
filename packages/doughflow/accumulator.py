"""Reserve accumulation: dated occurrences -> contiguous daily balance series."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal

from .dates import iter_days, to_day
from .models import DailyReserve, EntryType, MoneyLike, Occurrence, to_money

_ZERO = Decimal("0.00")


def signed_amount(occurrence: Occurrence) -> Decimal:
    """``+amount`` for paychecks, ``-amount`` for bills and purchases.

    This is the only place where a sign is attached to a ledger amount.
    """

    if occurrence.type == EntryType.PAYCHECK:
        return occurrence.amount
    return -occurrence.amount


def accumulate(
    occurrences: Iterable[Occurrence],
    window_start: date | datetime,
    window_end: date | datetime,
    starting_balance: MoneyLike = 0,
) -> list[DailyReserve]:
    """Fold ``occurrences`` into one :class:`DailyReserve` per day of the window.

    The first day's balance is ``starting_balance + net_change(window_start)``;
    each later day adds its own net change to the previous balance. Days
    without occurrences carry the balance forward with a zero net change.
    Amounts are rounded to cents (half-up) at every step, so the result does
    not depend on the order of ``occurrences``. Occurrences outside the window
    are ignored and an inverted window yields an empty list.
    """

    start = to_day(window_start)
    end = to_day(window_end)
    if start > end:
        return []

    by_date: dict[date, list[Occurrence]] = defaultdict(list)
    for occ in occurrences:
        by_date[to_day(occ.date)].append(occ)

    series: list[DailyReserve] = []
    balance = to_money(starting_balance)
    for day in iter_days(start, end):
        day_occurrences = tuple(by_date.get(day, ()))
        net = to_money(sum((signed_amount(o) for o in day_occurrences), start=_ZERO))
        balance = to_money(balance + net)
        series.append(
            DailyReserve(
                date=day,
                net_change=net,
                running_balance=balance,
                occurrences=day_occurrences,
            )
        )
    return series


__all__ = ["accumulate", "signed_amount"]
