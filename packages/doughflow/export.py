"""CSV renderers for a daily balance series."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from .accumulator import signed_amount
from .models import DailyReserve, Occurrence


def _signed_text(occ: Occurrence) -> str:
    value = signed_amount(occ)
    # is_signed() also catches -0.00 from a zero-amount bill.
    sign = "-" if value.is_signed() else "+"
    return f"{sign}{abs(value):.2f}"


def _entry_cell(occ: Occurrence) -> str:
    label = f" {occ.name}" if occ.name else ""
    return f"{_signed_text(occ)}{label}"


def _render(header: list[str], rows: list[list[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue()


def render_detailed_csv(series: Sequence[DailyReserve]) -> str:
    """Render ``Date,Reserve,Entry 1..N``, one row per day.

    ``N`` is the largest number of occurrences on any single day; shorter rows
    are padded with blank cells.
    """

    width = max((len(day.occurrences) for day in series), default=0)
    header = ["Date", "Reserve"] + [f"Entry {i}" for i in range(1, width + 1)]
    rows: list[list[str]] = []
    for day in series:
        cells = [_entry_cell(o) for o in day.occurrences]
        cells.extend([""] * (width - len(cells)))
        rows.append([day.date.isoformat(), f"{day.running_balance:.2f}", *cells])
    return _render(header, rows)


def render_forecast_table_csv(series: Sequence[DailyReserve]) -> str:
    """Render ``Date,Daily Net,Reserve Balance,Events``.

    Events read ``"<name> (<signed amount>)"`` joined by ``", "``.
    """

    rows = [
        [
            day.date.isoformat(),
            f"{day.net_change:.2f}",
            f"{day.running_balance:.2f}",
            ", ".join(f"{o.name} ({_signed_text(o)})" for o in day.occurrences),
        ]
        for day in series
    ]
    return _render(["Date", "Daily Net", "Reserve Balance", "Events"], rows)


def write_csv(path: str | PathLike[str], text: str) -> Path:
    """Write rendered CSV ``text`` to ``path`` (UTF-8) and return the path."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8", newline="")
    return p


__all__ = ["render_detailed_csv", "render_forecast_table_csv", "write_csv"]
