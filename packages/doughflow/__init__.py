"""Public interface for the ``doughflow`` package.

This module exposes the forecasting API and public models as the stable import
surface. There is no runtime logic here, only symbol re-exports.
"""

from .accumulator import accumulate, signed_amount
from .api import balance_on, forecast, forecast_from_anchor, resolve_window, sync_anchor
from .expander import expand
from .models import (
    AnchorSettings,
    DailyReserve,
    EntryType,
    Frequency,
    LedgerEntry,
    Occurrence,
    to_money,
)

__all__ = [
    # API
    "accumulate",
    "balance_on",
    "expand",
    "forecast",
    "forecast_from_anchor",
    "resolve_window",
    "signed_amount",
    "sync_anchor",
    # Models
    "AnchorSettings",
    "DailyReserve",
    "EntryType",
    "Frequency",
    "LedgerEntry",
    "Occurrence",
    "to_money",
]
