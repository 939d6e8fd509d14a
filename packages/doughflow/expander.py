"""Occurrence expansion: ledger entries -> dated occurrences inside a window.

Each entry is expanded independently. Candidate dates come from the
recurrence rule (bounded by the window, ``stop_date`` and
``occurrence_limit``) plus any ``custom_dates`` inside the window; they are
deduplicated per entry by calendar date so an entry never occurs twice on the
same day.

The expansion is pure and never raises for malformed-but-plausible input:
unparseable custom dates are skipped (WARNING), unknown frequencies expand to
at most one occurrence and runaway recurrences are truncated after
:data:`MAX_RECURRENCE_STEPS` iterations (DEBUG).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from .dates import first_recurrence_on_or_after, next_recurrence, parse_iso_date, to_day
from .logging_setup import get_logger
from .models import Frequency, LedgerEntry, Occurrence

# Upper bound on in-window recurrence steps per entry. Weekly stepping covers ~19
# years of window before the cap is reached.
MAX_RECURRENCE_STEPS: int = 1000

_logger = get_logger("doughflow.expander")


def _recurrence_dates(entry: LedgerEntry, window_start: date, window_end: date) -> list[date]:
    limit = entry.occurrence_limit
    if limit is not None and limit <= 0:
        return []

    effective_end = window_end
    if entry.stop_date is not None:
        effective_end = min(to_day(entry.stop_date), window_end)

    anchor = to_day(entry.anchor_date)
    # Steps before the window never count toward the step cap.
    current = first_recurrence_on_or_after(anchor, entry.frequency, window_start)
    out: list[date] = []
    steps = 0
    while current is not None and current <= effective_end:
        if steps >= MAX_RECURRENCE_STEPS:
            _logger.debug(
                "recurrence truncated after %d steps: entry=%s frequency=%s",
                MAX_RECURRENCE_STEPS,
                entry.id,
                entry.frequency,
            )
            break
        out.append(current)
        if limit is not None and len(out) >= limit:
            break
        steps += 1
        current = next_recurrence(current, entry.frequency)

    if current is None:
        _logger.debug(
            "unknown frequency %r for entry %s; expanded as non-recurring",
            entry.frequency,
            entry.id,
        )
    return out


def _custom_dates(entry: LedgerEntry, window_start: date, window_end: date) -> list[date]:
    out: list[date] = []
    for raw in entry.custom_dates:
        try:
            d = parse_iso_date(raw)
        except (TypeError, ValueError):
            _logger.warning("skipping malformed custom date %r on entry %s", raw, entry.id)
            continue
        if window_start <= d <= window_end:
            out.append(d)
    return out


def candidate_dates(entry: LedgerEntry, window_start: date, window_end: date) -> list[date]:
    """Return the sorted, de-duplicated occurrence dates of ``entry`` in the window.

    Both bounds are inclusive and expected to be plain dates with
    ``window_start <= window_end``.
    """

    if entry.frequency == Frequency.ONE_TIME:
        anchor = to_day(entry.anchor_date)
        rule_dates = [anchor] if window_start <= anchor <= window_end else []
    else:
        # Unknown rules go through the same loop, which stops after the anchor.
        rule_dates = _recurrence_dates(entry, window_start, window_end)

    unique = set(rule_dates)
    unique.update(_custom_dates(entry, window_start, window_end))
    return sorted(unique)


def expand(
    entries: Iterable[LedgerEntry],
    window_start: date | datetime,
    window_end: date | datetime,
) -> list[Occurrence]:
    """Expand ``entries`` into one :class:`Occurrence` per entry per date.

    Parameters
    ----------
    entries:
        Ledger snapshot. Order is preserved in the output (entry by entry,
        dates ascending within an entry).
    window_start, window_end:
        Inclusive window. ``datetime`` values are truncated to their date. An
        inverted window yields an empty list.
    """

    start = to_day(window_start)
    end = to_day(window_end)
    if start > end:
        return []

    occurrences: list[Occurrence] = []
    for entry in entries:
        for d in candidate_dates(entry, start, end):
            occurrences.append(
                Occurrence(
                    source_entry_id=entry.id,
                    date=d,
                    name=entry.name,
                    amount=entry.amount,
                    type=entry.type,
                )
            )
    return occurrences


__all__ = ["MAX_RECURRENCE_STEPS", "candidate_dates", "expand"]
