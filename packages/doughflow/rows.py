"""Boundary conversion between loosely-typed ledger rows and :class:`LedgerEntry`.

Rows use the spreadsheet row-store layout (see :data:`HEADERS`): every value
may be a string, a blank or an already-typed Python value. :class:`LedgerRow`
validates and normalizes one row; :func:`entry_to_row` is the inverse used when
writing rows back out.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal
from typing import Any, TypeAlias

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .dates import parse_flexible_date, to_day
from .logging_setup import get_logger
from .models import EntryType, Frequency, LedgerEntry, to_money

HEADERS: tuple[str, ...] = (
    "id",
    "type",
    "name",
    "amount",
    "date",
    "frequency",
    "occurrenceLimit",
    "stopDate",
    "customDates",
)

# A raw row keyed by header name.
LedgerRowMapping: TypeAlias = Mapping[str, Any]

_TYPE_ALIASES: dict[str, EntryType] = {
    "bill": EntryType.BILL,
    "paycheck": EntryType.PAYCHECK,
    "purchase": EntryType.PURCHASE,
    "deposit": EntryType.PAYCHECK,
    "withdrawal": EntryType.BILL,
}

_FREQUENCY_KEYS: dict[str, Frequency] = {
    re.sub(r"[\s_-]+", "", f.value): f for f in Frequency
} | {"once": Frequency.ONE_TIME, "every4weeks": Frequency.EVERY_4_WEEKS}

_logger = get_logger("doughflow.rows")


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _parse_signed_amount(value: Any) -> Decimal:
    """Parse ``"$1,234.50"``, ``"(45.00)"`` or ``-45`` into a signed Decimal."""

    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return to_money(value)
    s = str(value).strip()
    negative = s.startswith("(") and s.endswith(")")
    if negative:
        s = s[1:-1]
    s = s.replace("$", "").replace(",", "").strip()
    if not s:
        raise ValueError("amount is empty")
    amount = to_money(s)
    return -amount if negative else amount


def _parse_date_value(value: Any) -> date:
    if isinstance(value, date):
        return to_day(value)
    return parse_flexible_date(str(value))


def _split_custom_dates(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    s = str(value).strip()
    if s.startswith("["):
        try:
            parsed = json.loads(s)
        except json.JSONDecodeError as exc:
            raise ValueError(f"customDates is not a valid JSON array: {s!r}") from exc
        if not isinstance(parsed, list):
            raise ValueError("customDates JSON must be an array")
        return parsed
    return [p for p in re.split(r"[\s,]+", s) if p]


class LedgerRow(BaseModel):
    """One validated ledger row. Field aliases match :data:`HEADERS`."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)

    id: str
    type: EntryType
    name: str
    amount: Decimal
    anchor_date: date = Field(alias="date")
    frequency: str = Frequency.ONE_TIME.value
    occurrence_limit: int | None = Field(default=None, alias="occurrenceLimit")
    stop_date: date | None = Field(default=None, alias="stopDate")
    custom_dates: tuple[str, ...] = Field(default=(), alias="customDates")

    @model_validator(mode="before")
    @classmethod
    def _infer_type(cls, data: Any) -> Any:
        # Rows written by older sheets may leave ``type`` blank and carry the
        # sign on the amount instead.
        if not isinstance(data, Mapping) or not _blank(data.get("type")):
            return data
        raw_amount = data.get("amount")
        if _blank(raw_amount):
            return data
        try:
            signed = _parse_signed_amount(raw_amount)
        except ValueError:
            return data
        out = dict(data)
        out["type"] = EntryType.BILL.value if signed < 0 else EntryType.PAYCHECK.value
        return out

    @field_validator("id", "name")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must be non-empty")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> EntryType:
        key = str(v or "").strip().lower()
        try:
            return _TYPE_ALIASES[key]
        except KeyError:
            raise ValueError(f"unknown entry type {v!r}") from None

    @field_validator("amount", mode="before")
    @classmethod
    def _magnitude(cls, v: Any) -> Decimal:
        if _blank(v):
            raise ValueError("amount is required")
        return abs(_parse_signed_amount(v))

    @field_validator("anchor_date", mode="before")
    @classmethod
    def _parse_anchor(cls, v: Any) -> date:
        if _blank(v):
            raise ValueError("date is required")
        return _parse_date_value(v)

    @field_validator("stop_date", mode="before")
    @classmethod
    def _parse_stop(cls, v: Any) -> date | None:
        if _blank(v):
            return None
        return _parse_date_value(v)

    @field_validator("frequency", mode="before")
    @classmethod
    def _normalize_frequency(cls, v: Any) -> str:
        if _blank(v):
            return Frequency.ONE_TIME.value
        raw = str(v).strip()
        known = _FREQUENCY_KEYS.get(re.sub(r"[\s_-]+", "", raw.lower()))
        if known is None:
            _logger.warning("unknown frequency %r kept verbatim", raw)
            return raw
        return known.value

    @field_validator("occurrence_limit", mode="before")
    @classmethod
    def _parse_limit(cls, v: Any) -> int | None:
        if _blank(v):
            return None
        if isinstance(v, float) and v.is_integer():
            limit = int(v)
        else:
            try:
                limit = int(str(v).strip())
            except ValueError:
                raise ValueError(f"occurrenceLimit must be an integer, got {v!r}") from None
        if limit < 0:
            raise ValueError(f"occurrenceLimit must be non-negative, got {limit}")
        return limit

    @field_validator("custom_dates", mode="before")
    @classmethod
    def _normalize_custom_dates(cls, v: Any) -> tuple[str, ...]:
        if _blank(v):
            return ()
        out: list[str] = []
        for item in _split_custom_dates(v):
            try:
                out.append(_parse_date_value(item).isoformat())
            except (TypeError, ValueError):
                _logger.warning("dropping malformed custom date %r", item)
        return tuple(out)

    def to_entry(self) -> LedgerEntry:
        return LedgerEntry(
            id=self.id,
            type=self.type,
            name=self.name,
            amount=self.amount,
            anchor_date=self.anchor_date,
            frequency=self.frequency,
            stop_date=self.stop_date,
            occurrence_limit=self.occurrence_limit,
            custom_dates=self.custom_dates,
        )


def entry_from_row(row: LedgerRowMapping) -> LedgerEntry:
    """Validate one row and return its entry.

    Raises ``pydantic.ValidationError`` (a ``ValueError``) on invalid input.
    """

    return LedgerRow.model_validate(dict(row)).to_entry()


def entries_from_rows(rows: Iterable[LedgerRowMapping]) -> list[LedgerEntry]:
    """Convert rows to entries, skipping (and logging) the invalid ones."""

    entries: list[LedgerEntry] = []
    for idx, row in enumerate(rows):
        try:
            entries.append(entry_from_row(row))
        except ValidationError as exc:
            _logger.warning(
                "skipping invalid ledger row %d (id=%r): %s",
                idx,
                row.get("id"),
                "; ".join(err["msg"] for err in exc.errors()),
            )
    return entries


def entry_to_row(entry: LedgerEntry) -> dict[str, str]:
    """Serialize ``entry`` back into the row-store layout (all values strings)."""

    return {
        "id": entry.id,
        "type": str(entry.type),
        "name": entry.name,
        "amount": f"{entry.amount:.2f}",
        "date": entry.anchor_date.isoformat(),
        "frequency": str(entry.frequency),
        "occurrenceLimit": "" if entry.occurrence_limit is None else str(entry.occurrence_limit),
        "stopDate": "" if entry.stop_date is None else entry.stop_date.isoformat(),
        "customDates": json.dumps(list(entry.custom_dates)),
    }


__all__ = [
    "HEADERS",
    "LedgerRow",
    "LedgerRowMapping",
    "entries_from_rows",
    "entry_from_row",
    "entry_to_row",
]
