# ruff: noqa: I001
"""Read-side queries over persisted expenses."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.models.expenses import Expense
from .models import CanonicalExpense, ExpenseFilter

# Upper bound for vendor prefix ranges (highest BMP private-use code point).
_PREFIX_END = "\uf8ff"


def expense_from_row(row: Expense) -> CanonicalExpense:
    return CanonicalExpense(
        id=row.id,
        fingerprint=row.fingerprint,
        source=row.source,
        source_transaction_id=row.source_transaction_id,
        date=row.date,
        amount=Decimal(str(row.amount)).quantize(Decimal("0.01")),
        currency=row.currency,
        vendor=row.vendor,
        category=row.category,
        status=row.status,
        raw_text=dict(row.raw_text or {}),
        source_file_checksum=row.source_file_checksum,
        duplicate_of=row.duplicate_of,
        is_duplicate=bool(row.is_duplicate),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def list_expenses(
    session: Session,
    filters: ExpenseFilter | None = None,
    *,
    limit: int | None = None,
) -> list[CanonicalExpense]:
    """Return expenses matching ``filters``, newest date first.

    ``source`` and ``category`` are equality filters, ``vendor`` is a prefix
    match on the normalized vendor and the date bounds are inclusive.
    """

    f = filters or ExpenseFilter()
    stmt = select(Expense)
    if f.source:
        stmt = stmt.where(Expense.source == f.source)
    if f.category:
        stmt = stmt.where(Expense.category == f.category)
    if f.vendor:
        stmt = stmt.where(Expense.vendor >= f.vendor, Expense.vendor <= f.vendor + _PREFIX_END)
    if f.date_from:
        stmt = stmt.where(Expense.date >= f.date_from.isoformat())
    if f.date_to:
        stmt = stmt.where(Expense.date <= f.date_to.isoformat())
    if not f.include_duplicates:
        stmt = stmt.where(Expense.is_duplicate.is_(False))
    stmt = stmt.order_by(Expense.date.desc(), Expense.id)
    if limit is not None:
        stmt = stmt.limit(limit)
    return [expense_from_row(r) for r in session.scalars(stmt)]


def count_expenses(session: Session) -> int:
    return int(session.scalar(select(func.count()).select_from(Expense)) or 0)


__all__ = ["expense_from_row", "list_expenses", "count_expenses"]
