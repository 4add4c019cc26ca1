from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    CHAR,
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: expenses
# ---------------------------


class Expense(Base):
    __tablename__ = "expenses"

    # Source transaction id when the statement carries one, else the fingerprint.
    # Rows written under the mark_duplicate policy use a generated key instead.
    id: Mapped[str] = mapped_column(String, primary_key=True)
    # Not unique: duplicate-marked rows share the fingerprint of their original.
    fingerprint: Mapped[str] = mapped_column(CHAR(64), nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False)
    source_transaction_id: Mapped[str | None] = mapped_column(String, nullable=True)
    # Normally YYYY-MM-DD. Unrecognized statement dates are kept verbatim, so
    # this stays a string column rather than a DATE.
    date: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(CHAR(3), nullable=False, server_default=text("'INR'"))
    vendor: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'completed'")
    )
    raw_text: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    source_file_checksum: Mapped[str] = mapped_column(String, nullable=False)
    duplicate_of: Mapped[str | None] = mapped_column(String, nullable=True)
    is_duplicate: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "source in ('phonepe','axis','hdfc','payzap')",
            name="ck_expenses_source",
        ),
        CheckConstraint(
            "status in ('completed','pending','failed','reversed')",
            name="ck_expenses_status",
        ),
        Index("ix_expenses_fingerprint", "fingerprint"),
        Index("ix_expenses_source_date", "source", "date"),
        Index("ix_expenses_vendor", "vendor"),
        Index("ix_expenses_checksum", "source_file_checksum"),
    )


# ---------------------------
# Audit: import_jobs
# ---------------------------


class ImportJobRow(Base):
    __tablename__ = "import_jobs"

    job_id: Mapped[str] = mapped_column(String, primary_key=True)
    status: Mapped[str] = mapped_column(String, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False)
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    source_file_checksum: Mapped[str] = mapped_column(String, nullable=False)
    created: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    skipped: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    updated: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    marked_duplicate: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    errors: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    # Prior job id when this job was satisfied by a checksum short-circuit.
    short_circuit_of: Mapped[str | None] = mapped_column(String, nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status in ('queued','processing','completed','failed')",
            name="ck_import_jobs_status",
        ),
        Index("ix_import_jobs_checksum_status", "source_file_checksum", "status"),
        Index("ix_import_jobs_started_at", "started_at"),
    )


__all__ = [
    "Base",
    "Expense",
    "ImportJobRow",
]
