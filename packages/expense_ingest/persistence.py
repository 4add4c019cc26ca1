# ruff: noqa: I001
"""Deduplicating persistence gateway for canonical expenses.

Writes go to the ``expenses`` table owned by ``libs/db`` through a session
provided by ``db.client``. The caller owns the transaction: wrap each call in
``session_scope`` so one row equals one commit.

Keying:
- ``source_transaction_id`` when the statement carries one,
- otherwise the content ``fingerprint``.

The existence check and the first write are a single
``INSERT ... ON CONFLICT (id) DO NOTHING`` statement. Its affected-row count
decides between the created branch and the collision branch, so two racing
upserts of one key never both report ``created``: the loser blocks on the
key until the winner commits and then sees the conflict.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from db.models.expenses import Expense
from .logging_setup import get_logger
from .models import CanonicalExpense, DuplicatePolicy, POLICIES, UpsertResult

_log = get_logger("expense_ingest.persistence")

# Columns rewritten by the "update" policy; id and created_at never change.
_MUTABLE_COLUMNS: tuple[str, ...] = (
    "fingerprint",
    "source",
    "source_transaction_id",
    "date",
    "amount",
    "currency",
    "vendor",
    "category",
    "status",
    "raw_text",
    "source_file_checksum",
)


def expense_key(expense: CanonicalExpense) -> str:
    """Storage key for an expense: transaction id if present, else fingerprint."""

    return expense.source_transaction_id or expense.fingerprint


def _row_values(expense: CanonicalExpense, *, key: str) -> dict[str, Any]:
    return {
        "id": key,
        "fingerprint": expense.fingerprint,
        "source": expense.source,
        "source_transaction_id": expense.source_transaction_id,
        "date": expense.date,
        "amount": expense.amount,
        "currency": expense.currency,
        "vendor": expense.vendor,
        "category": expense.category,
        "status": expense.status,
        "raw_text": dict(expense.raw_text),
        "source_file_checksum": expense.source_file_checksum,
        "duplicate_of": expense.duplicate_of,
        "is_duplicate": expense.is_duplicate,
        "created_at": expense.created_at,
        "updated_at": expense.updated_at,
    }


def _insert_if_absent(session: Session, values: dict[str, Any]) -> bool:
    """Insert ``values`` unless the id exists; return True when a row was written."""

    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(Expense.__table__).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite_insert(Expense.__table__).values(**values)
    else:
        raise NotImplementedError(f"Unsupported database dialect: {dialect}")
    result = session.execute(stmt.on_conflict_do_nothing(index_elements=["id"]))
    return result.rowcount == 1


def upsert_expense(
    session: Session,
    expense: CanonicalExpense,
    *,
    policy: DuplicatePolicy = "skip",
) -> UpsertResult:
    """Insert ``expense`` or resolve a key collision according to ``policy``.

    Parameters
    ----------
    session:
        Open session; the caller commits (``session_scope``).
    expense:
        Fully built canonical expense.
    policy:
        ``"skip"`` leaves the stored row untouched, ``"update"`` overwrites its
        mutable columns and refreshes ``updated_at``, ``"mark_duplicate"``
        stores a second row under a generated key pointing back at the first.

    Returns
    -------
    UpsertResult
        The action taken and the key of the row written (or found).
    """

    if policy not in POLICIES:
        raise ValueError(f"Unknown duplicate policy: {policy!r}. Allowed: {list(POLICIES)}")

    key = expense_key(expense)
    values = _row_values(expense, key=key)

    if _insert_if_absent(session, values):
        return UpsertResult("created", key)

    if policy == "skip":
        _log.debug("Duplicate expense %s skipped", key)
        return UpsertResult("skipped", key)

    if policy == "update":
        changes = {col: values[col] for col in _MUTABLE_COLUMNS}
        changes["updated_at"] = datetime.now(UTC)
        session.execute(update(Expense).where(Expense.id == key).values(**changes))
        return UpsertResult("updated", key)

    dup_id = uuid4().hex
    dup_values = {**values, "id": dup_id, "duplicate_of": key, "is_duplicate": True}
    session.execute(Expense.__table__.insert().values(**dup_values))
    _log.debug("Duplicate expense %s stored as %s", key, dup_id)
    return UpsertResult("marked_duplicate", dup_id)


__all__ = ["expense_key", "upsert_expense"]
