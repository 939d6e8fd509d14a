"""Ingest utilities shared by CLI commands."""

from __future__ import annotations

from collections.abc import Callable
from os import PathLike
from pathlib import Path

from .csv_import import CsvImportResult, parse_ledger_csv


def load_entries_from_csv(
    csv_path: str | PathLike[str], *, id_factory: Callable[[], str] | None = None
) -> CsvImportResult:
    """Read a bulk-import CSV file and return its parsed entries.

    Raises ``csv.Error`` when the header row is missing or incomplete and
    ``OSError`` when the file cannot be read. A UTF-8 BOM is tolerated.
    """

    p = Path(csv_path)
    with p.open(encoding="utf-8-sig", newline="") as f:
        text = f.read()
    return parse_ledger_csv(text, id_factory=id_factory)


__all__ = ["load_entries_from_csv"]
