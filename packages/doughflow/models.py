"""Data models for ``doughflow``.

The forecasting engine works exclusively on the strict, immutable types in this
module. Loosely-typed input (spreadsheet rows, CSV imports, database records)
is converted at the boundary by :mod:`doughflow.rows`,
:mod:`doughflow.ingest` and :mod:`doughflow.persistence` before it reaches
:func:`doughflow.expander.expand`.

Money is always :class:`decimal.Decimal` quantized to cents (see
:func:`to_money`); ledger amounts are magnitudes and never carry a sign.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import StrEnum
from typing import TypeAlias

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class EntryType(StrEnum):
    """Kind of ledger entry. ``PAYCHECK`` credits the balance; the rest debit it."""

    BILL = "bill"
    PAYCHECK = "paycheck"
    PURCHASE = "purchase"


class Frequency(StrEnum):
    """Recurrence rule of a ledger entry.

    ``EVERY_4_WEEKS`` is the legacy 28-day step used by older sheet exports.
    """

    ONE_TIME = "one-time"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    EVERY_4_WEEKS = "every-4-weeks"


# ---------------------------------------------------------------------------
# Money
# ---------------------------------------------------------------------------

CENTS = Decimal("0.01")

MoneyLike: TypeAlias = Decimal | int | float | str


def to_money(value: MoneyLike) -> Decimal:
    """Return ``value`` as a ``Decimal`` rounded half-up to cents.

    Floats are converted through ``str`` so that ``0.1`` becomes
    ``Decimal("0.10")`` rather than its binary expansion.
    """

    if isinstance(value, bool):
        raise ValueError(f"invalid money value: {value!r}")
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"invalid money value: {value!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid money value: {value!r}")
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Ledger and derived records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """A user-declared financial event template, possibly recurring.

    Attributes
    ----------
    id:
        Stable identifier assigned at creation.
    type:
        Determines the sign of every occurrence (see
        :func:`doughflow.accumulator.signed_amount`).
    name:
        Free-text label.
    amount:
        Non-negative magnitude in cents precision.
    anchor_date:
        Date of the first (or only) occurrence.
    frequency:
        A :class:`Frequency`. Any other string is tolerated and expands to at
        most one occurrence.
    stop_date:
        Inclusive upper bound on recurrence.
    occurrence_limit:
        Maximum number of recurring occurrences; ignored for one-time entries.
    custom_dates:
        Extra ISO ``YYYY-MM-DD`` dates on which the entry also occurs.
    """

    id: str
    type: EntryType
    name: str
    amount: Decimal
    anchor_date: date
    frequency: Frequency | str = Frequency.ONE_TIME
    stop_date: date | None = None
    occurrence_limit: int | None = None
    custom_dates: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        amount = to_money(self.amount)
        if amount < 0:
            raise ValueError(f"LedgerEntry.amount must be non-negative, got {self.amount!r}")
        # Frozen dataclass: normalize through object.__setattr__.
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "type", EntryType(self.type))
        try:
            object.__setattr__(self, "frequency", Frequency(self.frequency))
        except ValueError:
            pass  # unknown rules stay raw strings; the expander fails soft on them
        object.__setattr__(self, "custom_dates", tuple(self.custom_dates))


@dataclass(frozen=True, slots=True)
class Occurrence:
    """One realized instance of a :class:`LedgerEntry` on a concrete date."""

    source_entry_id: str
    date: date
    name: str
    amount: Decimal
    type: EntryType

    @property
    def occurrence_id(self) -> str:
        """Identifier unique per (entry, date), e.g. ``"rent-2025-04-02"``."""

        return f"{self.source_entry_id}-{self.date.isoformat()}"


@dataclass(frozen=True, slots=True)
class DailyReserve:
    """One row of the daily balance series."""

    date: date
    net_change: Decimal
    running_balance: Decimal
    occurrences: tuple[Occurrence, ...] = ()


@dataclass(frozen=True, slots=True)
class AnchorSettings:
    """Reconciliation checkpoint: the balance known at the start of ``anchor_date``."""

    anchor_date: date
    starting_balance: Decimal = Decimal("0.00")

    def __post_init__(self) -> None:
        object.__setattr__(self, "starting_balance", to_money(self.starting_balance))


__all__ = [
    "CENTS",
    "AnchorSettings",
    "DailyReserve",
    "EntryType",
    "Frequency",
    "LedgerEntry",
    "MoneyLike",
    "Occurrence",
    "to_money",
]
