"""Calendar-date helpers shared by the expander, accumulator and boundaries.

Everything here works on :class:`datetime.date` values. ``datetime`` inputs are
truncated to their calendar date first so that a time-of-day component can
never shift an inclusive bound by one day.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from .models import Frequency

# Fixed-length recurrence steps. Monthly stepping is calendar based and handled
# separately by :func:`add_month_overflow`.
_DAY_STEPS: dict[Frequency, int] = {
    Frequency.WEEKLY: 7,
    Frequency.BI_WEEKLY: 14,
    Frequency.EVERY_4_WEEKS: 28,
}

_DMY_FORMATS = ("%d/%m/%Y", "%d/%m/%y")


def to_day(value: date | datetime) -> date:
    """Normalize ``value`` to a plain calendar date (midnight semantics)."""

    if isinstance(value, datetime):
        return value.date()
    return value


def parse_iso_date(raw: str) -> date:
    """Parse ``YYYY-MM-DD`` (optionally followed by a time part) into a date.

    Accepts ``"2025-04-03"``, ``"2025-04-03T00:00:00.000Z"`` and
    ``"2025-04-03 08:15"``. Raises ``ValueError`` for anything else.
    """

    s = (raw or "").strip()
    if not s:
        raise ValueError("date is empty")
    first = s.split()[0].split("T", 1)[0]
    try:
        return date.fromisoformat(first)
    except ValueError as exc:
        raise ValueError(f"invalid ISO date: {raw!r}") from exc


def parse_flexible_date(raw: str) -> date:
    """Parse an ISO date or a day-first ``DD/MM/YYYY`` date.

    The CSV template used by the import screen writes day-first dates
    (``15/05/2025``); spreadsheet rows use ISO strings.
    """

    s = (raw or "").strip()
    if "/" not in s:
        return parse_iso_date(s)
    for fmt in _DMY_FORMATS:
        try:
            return datetime.strptime(s.split()[0], fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid DD/MM/YYYY date: {raw!r}")


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive (nothing when inverted)."""

    current = start
    one_day = timedelta(days=1)
    while current <= end:
        yield current
        current = current + one_day


def add_months(day: date, months: int) -> date:
    """Add calendar months, clamping to the last day of shorter months."""

    return day + relativedelta(months=months)


def add_month_overflow(day: date) -> date:
    """Advance one calendar month, rolling missing days into the next month.

    The day-of-month is kept when the target month has it; otherwise the
    surplus days spill over, so Jan 31 becomes Mar 3 (Mar 2 in a leap year)
    and the following step continues from there (Apr 3).
    """

    clamped = day + relativedelta(months=1)
    return clamped + timedelta(days=day.day - clamped.day)


def next_recurrence(current: date, frequency: Frequency | str) -> date | None:
    """Return the date one step after ``current``, or ``None`` for an unknown rule."""

    if frequency == Frequency.MONTHLY:
        return add_month_overflow(current)
    step = _DAY_STEPS.get(frequency)  # type: ignore[call-overload]
    if step is None:
        return None
    return current + timedelta(days=step)


def first_recurrence_on_or_after(
    anchor: date, frequency: Frequency | str, floor: date
) -> date | None:
    """Return the first date of the recurrence at ``anchor`` that is ``>= floor``.

    Fixed-length rules jump straight there; monthly rules walk forward one
    month at a time so the overflow sequence matches step-by-step expansion.
    Returns ``None`` when ``anchor`` is before ``floor`` and the rule is unknown.
    """

    if anchor >= floor:
        return anchor
    step = _DAY_STEPS.get(frequency)  # type: ignore[call-overload]
    if step is not None:
        skipped = -(-(floor - anchor).days // step)
        return anchor + timedelta(days=step * skipped)
    if frequency == Frequency.MONTHLY:
        current = anchor
        while current < floor:
            current = add_month_overflow(current)
        return current
    return None


__all__ = [
    "add_month_overflow",
    "add_months",
    "first_recurrence_on_or_after",
    "iter_days",
    "next_recurrence",
    "parse_flexible_date",
    "parse_iso_date",
    "to_day",
]
