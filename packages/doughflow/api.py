"""Public forecasting API for the ``doughflow`` package.

Thin orchestration over :func:`doughflow.expander.expand` and
:func:`doughflow.accumulator.accumulate`, plus the anchor (reconciliation)
helpers used by the CLI. Nothing here reads the system clock; callers resolve
"today" and pass it in.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from decimal import Decimal

from .accumulator import accumulate
from .dates import add_months, to_day
from .expander import expand
from .models import AnchorSettings, DailyReserve, LedgerEntry, MoneyLike, to_money

DEFAULT_HORIZON_MONTHS: int = 24


def forecast(
    entries: Iterable[LedgerEntry],
    window_start: date | datetime,
    window_end: date | datetime,
    starting_balance: MoneyLike = 0,
) -> list[DailyReserve]:
    """Expand ``entries`` over the window and return the daily balance series."""

    occurrences = expand(entries, window_start, window_end)
    return accumulate(occurrences, window_start, window_end, starting_balance)


def resolve_window(
    anchor: AnchorSettings, *, horizon_months: int = DEFAULT_HORIZON_MONTHS
) -> tuple[date, date]:
    """Return the inclusive window ``[anchor_date, anchor_date + horizon_months]``."""

    if horizon_months <= 0:
        raise ValueError("horizon_months must be a positive integer")
    start = to_day(anchor.anchor_date)
    return start, add_months(start, horizon_months)


def forecast_from_anchor(
    entries: Iterable[LedgerEntry],
    anchor: AnchorSettings,
    *,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> list[DailyReserve]:
    """Forecast from a reconciliation checkpoint over ``horizon_months``."""

    start, end = resolve_window(anchor, horizon_months=horizon_months)
    return forecast(entries, start, end, anchor.starting_balance)


def balance_on(series: Sequence[DailyReserve], day: date | datetime) -> Decimal | None:
    """Running balance at the end of ``day``, or ``None`` when outside the series."""

    target = to_day(day)
    for row in series:
        if row.date == target:
            return row.running_balance
    return None


def sync_anchor(series: Sequence[DailyReserve], day: date | datetime) -> AnchorSettings:
    """Re-anchor projections on ``day`` ("sync to today").

    The new checkpoint carries the projected balance at the end of the previous
    day, so forecasting from it reproduces ``series`` from ``day`` onward while
    discarding everything before it. Raises ``ValueError`` when ``day`` is not
    covered by ``series``.
    """

    target = to_day(day)
    for row in series:
        if row.date == target:
            opening = to_money(row.running_balance - row.net_change)
            return AnchorSettings(anchor_date=target, starting_balance=opening)
    if series and series[-1].date == target - timedelta(days=1):
        return AnchorSettings(anchor_date=target, starting_balance=series[-1].running_balance)
    raise ValueError(f"{target.isoformat()} is outside the forecast window")

__all__ = [
    "DEFAULT_HORIZON_MONTHS",
    "balance_on",
    "forecast",
    "forecast_from_anchor",
    "resolve_window",
    "sync_anchor",
]
