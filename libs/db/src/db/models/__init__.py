"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ledger models used by ``doughflow``.
"""

from .ledger import AnchorSettingRecord, Base, LedgerEntryRecord

__all__ = [
    "AnchorSettingRecord",
    "Base",
    "LedgerEntryRecord",
]
