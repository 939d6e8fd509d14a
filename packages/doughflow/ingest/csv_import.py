"""Parser for the bulk-import CSV layout.

CSV header (exact keys expected):
type, name, amount, date, frequency, occurrence, stopDate, customDates

Dates are ``DD/MM/YYYY`` (as written by :data:`CSV_TEMPLATE`) or ISO
``YYYY-MM-DD``. ``customDates`` holds whitespace separated dates. Every valid
row receives a fresh identifier.
"""

from __future__ import annotations

import csv
import io
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import ValidationError

from ..logging_setup import get_logger
from ..models import EntryType, LedgerEntry
from ..rows import LedgerRow

CSV_HEADERS: tuple[str, ...] = (
    "type",
    "name",
    "amount",
    "date",
    "frequency",
    "occurrence",
    "stopDate",
    "customDates",
)

REQUIRED_COLUMNS: tuple[str, ...] = ("type", "name", "amount", "date", "frequency")

CSV_TEMPLATE: str = "\n".join(
    [
        ",".join(CSV_HEADERS),
        "bill,Electricity,50,01/05/2025,monthly,12,01/05/2026,",
        "paycheck,Salary,2000,05/05/2025,bi-weekly,,01/12/2025,",
        "purchase,Groceries,120,03/05/2025,one-time,,,10/05/2025 15/05/2025",
    ]
) + "\n"

_STRICT_TYPES = frozenset(t.value for t in EntryType)

_logger = get_logger("doughflow.ingest")


@dataclass(frozen=True, slots=True)
class CsvImportResult:
    """Accepted entries plus rejected ``(row_number, reason)`` pairs.

    Row numbers are physical CSV line numbers (the header is line 1).
    """

    entries: tuple[LedgerEntry, ...] = ()
    rejected: tuple[tuple[int, str], ...] = field(default=())


def _default_id() -> str:
    return str(uuid.uuid4())


def _check_header(fieldnames: list[str] | None) -> None:
    headers = {h.strip() for h in (fieldnames or []) if h}
    if not headers:
        raise csv.Error("CSV appears to have no header row")
    missing = [h for h in REQUIRED_COLUMNS if h not in headers]
    if missing:
        raise csv.Error("CSV header is missing required columns: " + ", ".join(missing))


def _row_error(row: dict[str, str]) -> str | None:
    for col in REQUIRED_COLUMNS:
        if not row.get(col):
            return f"missing {col}"
    if row["type"].lower() not in _STRICT_TYPES:
        return f"invalid type {row['type']!r}"
    return None


def parse_ledger_csv(
    csv_text: str, *, id_factory: Callable[[], str] | None = None
) -> CsvImportResult:
    """Parse CSV text into ledger entries.

    Raises ``csv.Error`` when the header row is missing or lacks a required
    column. Invalid data rows do not raise; they are reported in
    :attr:`CsvImportResult.rejected`.
    """

    make_id = id_factory or _default_id
    reader = csv.DictReader(io.StringIO(csv_text))
    _check_header(reader.fieldnames)

    entries: list[LedgerEntry] = []
    rejected: list[tuple[int, str]] = []
    for raw in reader:
        line = reader.line_num
        row = {(k or "").strip(): (v or "").strip() for k, v in raw.items() if k is not None}
        if not any(row.values()):
            continue
        reason = _row_error(row)
        if reason is None:
            try:
                entries.append(
                    LedgerRow.model_validate(
                        {
                            "id": make_id(),
                            "type": row["type"].lower(),
                            "name": row["name"],
                            "amount": row["amount"],
                            "date": row["date"],
                            "frequency": row["frequency"],
                            "occurrenceLimit": row.get("occurrence"),
                            "stopDate": row.get("stopDate"),
                            "customDates": row.get("customDates"),
                        }
                    ).to_entry()
                )
                continue
            except ValidationError as exc:
                reason = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
                )
        _logger.warning("rejected CSV row %d: %s", line, reason)
        rejected.append((line, reason))

    _logger.info("parsed ledger CSV: %d accepted, %d rejected", len(entries), len(rejected))
    return CsvImportResult(entries=tuple(entries), rejected=tuple(rejected))


__all__ = [
    "CSV_HEADERS",
    "CSV_TEMPLATE",
    "REQUIRED_COLUMNS",
    "CsvImportResult",
    "parse_ledger_csv",
]
