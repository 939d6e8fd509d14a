import logging
from datetime import date, datetime

import pytest

from doughflow.expander import MAX_RECURRENCE_STEPS, expand
from doughflow.models import EntryType, Frequency, LedgerEntry


def _entry(**kw) -> LedgerEntry:
    base = {
        "id": "e1",
        "type": EntryType.BILL,
        "name": "Rent",
        "amount": "100",
        "anchor_date": date(2025, 1, 1),
    }
    base.update(kw)
    return LedgerEntry(**base)


def _dates(entries, start, end) -> list[date]:
    return [o.date for o in expand(entries, start, end)]


def test_one_time_inside_and_outside_window():
    inside = _entry(anchor_date=date(2025, 3, 10))
    assert _dates([inside], date(2025, 3, 1), date(2025, 3, 31)) == [date(2025, 3, 10)]
    assert _dates([inside], date(2025, 4, 1), date(2025, 4, 30)) == []


def test_monthly_overflows_short_months_and_keeps_the_rolled_day():
    e = _entry(anchor_date=date(2025, 1, 31), frequency=Frequency.MONTHLY)
    assert _dates([e], date(2025, 1, 1), date(2025, 5, 31)) == [
        date(2025, 1, 31),
        date(2025, 3, 3),
        date(2025, 4, 3),
        date(2025, 5, 3),
    ]


def test_monthly_overflow_in_leap_year():
    e = _entry(anchor_date=date(2024, 1, 31), frequency=Frequency.MONTHLY)
    assert _dates([e], date(2024, 1, 1), date(2024, 4, 30)) == [
        date(2024, 1, 31),
        date(2024, 3, 2),
        date(2024, 4, 2),
    ]


def test_monthly_anchor_before_window_follows_the_same_overflow_sequence():
    e = _entry(anchor_date=date(2025, 1, 31), frequency=Frequency.MONTHLY)
    assert _dates([e], date(2025, 4, 1), date(2025, 5, 31)) == [
        date(2025, 4, 3),
        date(2025, 5, 3),
    ]


def test_weekly_from_mid_week_anchor():
    e = _entry(anchor_date=date(2025, 4, 3), frequency=Frequency.WEEKLY, amount="50")
    assert _dates([e], date(2025, 4, 1), date(2025, 4, 21)) == [
        date(2025, 4, 3),
        date(2025, 4, 10),
        date(2025, 4, 17),
    ]


def test_every_four_weeks_steps_28_days():
    e = _entry(frequency=Frequency.EVERY_4_WEEKS)
    assert _dates([e], date(2025, 1, 1), date(2025, 3, 1)) == [
        date(2025, 1, 1),
        date(2025, 1, 29),
        date(2025, 2, 26),
    ]


def test_stop_date_is_inclusive():
    e = _entry(
        anchor_date=date(2025, 1, 3),
        frequency=Frequency.BI_WEEKLY,
        stop_date=date(2025, 1, 31),
    )
    assert _dates([e], date(2025, 1, 1), date(2025, 12, 31)) == [
        date(2025, 1, 3),
        date(2025, 1, 17),
        date(2025, 1, 31),
    ]


def test_stop_date_before_window_yields_nothing():
    e = _entry(frequency=Frequency.WEEKLY, stop_date=date(2025, 1, 20))
    assert _dates([e], date(2025, 2, 1), date(2025, 2, 28)) == []


def test_occurrence_limit_caps_recurring_occurrences():
    e = _entry(anchor_date=date(2025, 1, 6), frequency=Frequency.WEEKLY, occurrence_limit=3)
    assert _dates([e], date(2025, 1, 1), date(2025, 3, 31)) == [
        date(2025, 1, 6),
        date(2025, 1, 13),
        date(2025, 1, 20),
    ]


def test_occurrence_limit_counts_only_in_window_occurrences():
    e = _entry(frequency=Frequency.WEEKLY, occurrence_limit=2)
    assert _dates([e], date(2025, 1, 10), date(2025, 3, 31)) == [
        date(2025, 1, 15),
        date(2025, 1, 22),
    ]


def test_stop_date_wins_when_it_comes_before_the_limit():
    e = _entry(
        frequency=Frequency.WEEKLY,
        occurrence_limit=5,
        stop_date=date(2025, 1, 20),
    )
    assert _dates([e], date(2025, 1, 1), date(2025, 3, 31)) == [
        date(2025, 1, 1),
        date(2025, 1, 8),
        date(2025, 1, 15),
    ]


def test_limit_wins_when_it_is_reached_before_the_stop_date():
    e = _entry(
        frequency=Frequency.WEEKLY,
        occurrence_limit=2,
        stop_date=date(2025, 1, 20),
    )
    assert _dates([e], date(2025, 1, 1), date(2025, 3, 31)) == [
        date(2025, 1, 1),
        date(2025, 1, 8),
    ]


def test_zero_occurrence_limit_keeps_custom_dates_only():
    e = _entry(
        frequency=Frequency.MONTHLY,
        occurrence_limit=0,
        custom_dates=("2025-01-15",),
    )
    assert _dates([e], date(2025, 1, 1), date(2025, 3, 31)) == [date(2025, 1, 15)]


def test_custom_dates_merge_and_dedupe_with_rule_dates():
    e = _entry(
        anchor_date=date(2025, 2, 1),
        custom_dates=("2025-02-01", "2025-02-10", "2025-03-15"),
    )
    assert _dates([e], date(2025, 2, 1), date(2025, 2, 28)) == [
        date(2025, 2, 1),
        date(2025, 2, 10),
    ]


def test_malformed_custom_date_is_skipped_with_warning(caplog: pytest.LogCaptureFixture):
    e = _entry(anchor_date=date(2025, 2, 1), custom_dates=("not-a-date", "2025-02-03"))
    with caplog.at_level(logging.WARNING, logger="doughflow.expander"):
        got = _dates([e], date(2025, 2, 1), date(2025, 2, 28))
    assert got == [date(2025, 2, 1), date(2025, 2, 3)]
    assert any("not-a-date" in r.getMessage() for r in caplog.records)


def test_unknown_frequency_expands_to_anchor_only(caplog: pytest.LogCaptureFixture):
    e = _entry(frequency="yearly")
    assert e.frequency == "yearly"
    with caplog.at_level(logging.DEBUG, logger="doughflow.expander"):
        got = _dates([e], date(2025, 1, 1), date(2026, 12, 31))
    assert got == [date(2025, 1, 1)]
    assert any("unknown frequency" in r.getMessage() for r in caplog.records)


def test_runaway_recurrence_is_truncated_at_step_cap(caplog: pytest.LogCaptureFixture):
    e = _entry(anchor_date=date(2000, 1, 1), frequency=Frequency.WEEKLY)
    with caplog.at_level(logging.DEBUG, logger="doughflow.expander"):
        got = _dates([e], date(2000, 1, 1), date(2100, 1, 1))
    assert len(got) == MAX_RECURRENCE_STEPS
    assert any("truncated" in r.getMessage() for r in caplog.records)


def test_anchor_decades_before_window_still_expands():
    e = _entry(anchor_date=date(1990, 1, 1), frequency=Frequency.WEEKLY)
    assert _dates([e], date(2025, 1, 1), date(2025, 1, 31)) == [
        date(2025, 1, 6),
        date(2025, 1, 13),
        date(2025, 1, 20),
        date(2025, 1, 27),
    ]


def test_monthly_anchor_decades_before_window_still_expands():
    e = _entry(anchor_date=date(1980, 6, 15), frequency=Frequency.MONTHLY)
    assert _dates([e], date(2025, 1, 1), date(2025, 2, 28)) == [
        date(2025, 1, 15),
        date(2025, 2, 15),
    ]


def test_unknown_frequency_anchored_before_window_yields_nothing():
    e = _entry(anchor_date=date(2024, 6, 1), frequency="yearly")
    assert _dates([e], date(2025, 1, 1), date(2025, 12, 31)) == []


def test_inverted_window_is_empty():
    e = _entry(frequency=Frequency.WEEKLY)
    assert expand([e], date(2025, 2, 1), date(2025, 1, 1)) == []


def test_datetime_bounds_are_truncated_to_dates():
    e = _entry(anchor_date=date(2025, 1, 31))
    got = _dates([e], datetime(2025, 1, 31, 23, 59), datetime(2025, 1, 31, 0, 1))
    assert got == [date(2025, 1, 31)]


def test_occurrences_carry_entry_fields_and_unique_ids():
    e = _entry(id="rent", frequency=Frequency.MONTHLY, amount="1200.00")
    occs = expand([e], date(2025, 1, 1), date(2025, 2, 28))
    assert [o.occurrence_id for o in occs] == ["rent-2025-01-01", "rent-2025-02-01"]
    assert all(o.name == "Rent" and o.type == EntryType.BILL for o in occs)
    assert {str(o.amount) for o in occs} == {"1200.00"}


def test_entries_expand_independently_in_input_order():
    a = _entry(id="a", anchor_date=date(2025, 1, 2))
    b = _entry(id="b", anchor_date=date(2025, 1, 1))
    occs = expand([a, b], date(2025, 1, 1), date(2025, 1, 31))
    assert [o.source_entry_id for o in occs] == ["a", "b"]
