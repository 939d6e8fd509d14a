from datetime import date
from pathlib import Path

from doughflow.api import forecast
from doughflow.export import render_detailed_csv, render_forecast_table_csv, write_csv
from doughflow.models import EntryType, LedgerEntry

ENTRIES = [
    LedgerEntry(
        id="s", type=EntryType.PAYCHECK, name="Salary", amount="1500", anchor_date=date(2025, 1, 1)
    ),
    LedgerEntry(
        id="r", type=EntryType.BILL, name="Rent", amount="1200", anchor_date=date(2025, 1, 1)
    ),
]


def _series():
    return forecast(ENTRIES, date(2025, 1, 1), date(2025, 1, 2))


def test_detailed_csv_pads_entry_columns():
    assert render_detailed_csv(_series()) == (
        "Date,Reserve,Entry 1,Entry 2\n"
        "2025-01-01,300.00,+1500.00 Salary,-1200.00 Rent\n"
        "2025-01-02,300.00,,\n"
    )


def test_forecast_table_csv_lists_events():
    assert render_forecast_table_csv(_series()) == (
        "Date,Daily Net,Reserve Balance,Events\n"
        '2025-01-01,300.00,300.00,"Salary (+1500.00), Rent (-1200.00)"\n'
        "2025-01-02,0.00,300.00,\n"
    )


def test_empty_series_renders_header_only():
    assert render_detailed_csv([]) == "Date,Reserve\n"
    assert render_forecast_table_csv([]) == "Date,Daily Net,Reserve Balance,Events\n"


def test_write_csv_creates_parent_dirs(tmp_path: Path):
    out = write_csv(tmp_path / "out" / "forecast.csv", "a,b\n")
    assert out.read_text(encoding="utf-8") == "a,b\n"


def test_zero_amount_entries_keep_their_type_sign():
    entries = [
        LedgerEntry(
            id="f", type=EntryType.BILL, name="Fee", amount="0", anchor_date=date(2025, 1, 1)
        ),
        LedgerEntry(
            id="g", type=EntryType.PAYCHECK, name="Gift", amount="0", anchor_date=date(2025, 1, 1)
        ),
    ]
    series = forecast(entries, date(2025, 1, 1), date(2025, 1, 1))
    assert render_detailed_csv(series) == (
        "Date,Reserve,Entry 1,Entry 2\n2025-01-01,0.00,-0.00 Fee,+0.00 Gift\n"
    )
    assert render_forecast_table_csv(series) == (
        "Date,Daily Net,Reserve Balance,Events\n"
        '2025-01-01,0.00,0.00,"Fee (-0.00), Gift (+0.00)"\n'
    )
