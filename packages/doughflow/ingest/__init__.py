"""CSV bulk import of ledger entries."""

from .csv_import import CSV_HEADERS, CSV_TEMPLATE, CsvImportResult, parse_ledger_csv
from .utils import load_entries_from_csv

__all__ = [
    "CSV_HEADERS",
    "CSV_TEMPLATE",
    "CsvImportResult",
    "load_entries_from_csv",
    "parse_ledger_csv",
]
