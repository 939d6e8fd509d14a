"""Persistence integration for doughflow.

Functions here read and write the ledger and the anchor checkpoint in the
shared database owned by ``libs/db``. They rely on SQLAlchemy ORM models
defined in ``db.models.ledger``; callers own the session and transaction
(typically ``db.client.session_scope``).
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from db.models.ledger import AnchorSettingRecord, LedgerEntryRecord

from .logging_setup import get_logger
from .models import AnchorSettings, LedgerEntry

_ANCHOR_ROW_ID = 1

_logger = get_logger("doughflow.persistence")


def _record_to_entry(rec: LedgerEntryRecord) -> LedgerEntry:
    return LedgerEntry(
        id=rec.id,
        type=rec.type,
        name=rec.name,
        amount=rec.amount,
        anchor_date=rec.anchor_date,
        frequency=rec.frequency,
        stop_date=rec.stop_date,
        occurrence_limit=rec.occurrence_limit,
        custom_dates=tuple(rec.custom_dates or ()),
    )


def _apply(rec: LedgerEntryRecord, entry: LedgerEntry) -> None:
    rec.type = str(entry.type)
    rec.name = entry.name
    rec.amount = entry.amount
    rec.anchor_date = entry.anchor_date
    rec.frequency = str(entry.frequency)
    rec.stop_date = entry.stop_date
    rec.occurrence_limit = entry.occurrence_limit
    rec.custom_dates = list(entry.custom_dates)


def list_entries(session: Session) -> list[LedgerEntry]:
    """Return every stored entry ordered by anchor date then id.

    Records that no longer convert to a valid entry are skipped with a warning.
    """

    stmt = select(LedgerEntryRecord).order_by(LedgerEntryRecord.anchor_date, LedgerEntryRecord.id)
    out: list[LedgerEntry] = []
    for rec in session.scalars(stmt):
        try:
            out.append(_record_to_entry(rec))
        except ValueError as exc:
            _logger.warning("skipping unreadable ledger record %s: %s", rec.id, exc)
    return out


def get_entry(session: Session, entry_id: str) -> LedgerEntry | None:
    rec = session.get(LedgerEntryRecord, entry_id)
    return None if rec is None else _record_to_entry(rec)


def upsert_entry(session: Session, entry: LedgerEntry) -> None:
    """Insert ``entry`` or replace the stored record with the same id."""

    rec = session.get(LedgerEntryRecord, entry.id)
    if rec is None:
        rec = LedgerEntryRecord(id=entry.id)
        session.add(rec)
    _apply(rec, entry)
    session.flush()


def upsert_entries(session: Session, entries: Iterable[LedgerEntry]) -> int:
    """Upsert many entries; returns how many were written."""

    count = 0
    for entry in entries:
        upsert_entry(session, entry)
        count += 1
    return count


def delete_entry(session: Session, entry_id: str) -> bool:
    """Delete an entry by id; returns whether a record was removed."""

    result = session.execute(delete(LedgerEntryRecord).where(LedgerEntryRecord.id == entry_id))
    return bool(result.rowcount)


def get_anchor(session: Session) -> AnchorSettings | None:
    rec = session.get(AnchorSettingRecord, _ANCHOR_ROW_ID)
    if rec is None:
        return None
    return AnchorSettings(anchor_date=rec.anchor_date, starting_balance=rec.starting_balance)


def set_anchor(session: Session, anchor: AnchorSettings) -> None:
    """Store ``anchor`` as the single reconciliation checkpoint."""

    rec = session.get(AnchorSettingRecord, _ANCHOR_ROW_ID)
    if rec is None:
        rec = AnchorSettingRecord(id=_ANCHOR_ROW_ID)
        session.add(rec)
    rec.anchor_date = anchor.anchor_date
    rec.starting_balance = anchor.starting_balance
    session.flush()
    _logger.info(
        "anchor set: date=%s starting_balance=%s",
        anchor.anchor_date.isoformat(),
        anchor.starting_balance,
    )


__all__ = [
    "delete_entry",
    "get_anchor",
    "get_entry",
    "list_entries",
    "set_anchor",
    "upsert_entries",
    "upsert_entry",
]
