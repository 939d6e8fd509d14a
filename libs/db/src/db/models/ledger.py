from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: ledger_entries
# ---------------------------


class LedgerEntryRecord(Base):
    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_ledger_entries_amount_non_negative"),
        CheckConstraint(
            "type IN ('bill', 'paycheck', 'purchase')", name="ck_ledger_entries_type"
        ),
        CheckConstraint(
            "occurrence_limit IS NULL OR occurrence_limit >= 0",
            name="ck_ledger_entries_occurrence_limit",
        ),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    type: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    anchor_date: Mapped[date] = mapped_column(Date, nullable=False)
    # Stored as free text; unknown rules are tolerated by the expander.
    frequency: Mapped[str] = mapped_column(String, nullable=False, server_default="one-time")
    stop_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    occurrence_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # List of ISO YYYY-MM-DD strings.
    custom_dates: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


# ---------------------------
# Settings: anchor_settings (single row)
# ---------------------------


class AnchorSettingRecord(Base):
    __tablename__ = "anchor_settings"
    __table_args__ = (CheckConstraint("id = 1", name="ck_anchor_settings_singleton"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    anchor_date: Mapped[date] = mapped_column(Date, nullable=False)
    starting_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
