from __future__ import annotations

import threading
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal

import pytest
from sqlalchemy import select

from db.client import session_scope
from db.models.expenses import Expense
from expense_ingest.fingerprint import compute_fingerprint
from expense_ingest.models import CanonicalExpense
from expense_ingest.persistence import expense_key, upsert_expense
from tests.helpers.db import count_expense_rows

_T0 = datetime(2026, 2, 10, 12, 0, tzinfo=UTC)


def _expense(**overrides) -> CanonicalExpense:
    fp = compute_fingerprint("2026-02-10", Decimal("349.50"), "ACME GROCERIES", "PAID")
    base = CanonicalExpense(
        id="123456789012",
        fingerprint=fp,
        source="phonepe",
        source_transaction_id="123456789012",
        date="2026-02-10",
        amount=Decimal("349.50"),
        vendor="ACME GROCERIES",
        status="completed",
        raw_text={"vendor": "ACME GROCERIES", "amount": "349.50"},
        source_file_checksum="sha256:abc",
        created_at=_T0,
        updated_at=_T0,
    )
    return replace(base, **overrides)


def _upsert(url: str, expense: CanonicalExpense, policy: str = "skip"):
    with session_scope(database_url=url) as s:
        return upsert_expense(s, expense, policy=policy)


def _rows(url: str) -> list[Expense]:
    with session_scope(database_url=url) as s:
        return list(s.scalars(select(Expense).order_by(Expense.created_at, Expense.is_duplicate)))


def test_key_prefers_transaction_id():
    exp = _expense()
    assert expense_key(exp) == "123456789012"
    assert expense_key(replace(exp, source_transaction_id=None)) == exp.fingerprint


def test_create_then_skip_is_idempotent(db_url):
    exp = _expense()
    assert _upsert(db_url, exp) == ("created", "123456789012")
    assert _upsert(db_url, exp) == ("skipped", "123456789012")
    assert count_expense_rows(db_url) == 1

    (row,) = _rows(db_url)
    assert row.amount == Decimal("349.50")
    assert row.vendor == "ACME GROCERIES"
    assert row.currency == "INR"
    assert row.is_duplicate is False
    assert row.raw_text == {"vendor": "ACME GROCERIES", "amount": "349.50"}


def test_fingerprint_is_the_key_without_transaction_id(db_url):
    exp = _expense(source_transaction_id=None, id="")
    result = _upsert(db_url, exp)
    assert result.action == "created"
    assert result.id == exp.fingerprint
    assert _upsert(db_url, exp).action == "skipped"


def test_update_overwrites_mutable_fields(db_url):
    _upsert(db_url, _expense())
    changed = _expense(vendor="ACME GROCERIES LTD", category="Groceries", status="reversed")

    result = _upsert(db_url, changed, policy="update")
    assert result == ("updated", "123456789012")
    assert count_expense_rows(db_url) == 1

    (row,) = _rows(db_url)
    assert row.id == "123456789012"
    assert row.vendor == "ACME GROCERIES LTD"
    assert row.category == "Groceries"
    assert row.status == "reversed"
    assert row.updated_at > row.created_at
    assert row.created_at.replace(tzinfo=None) == _T0.replace(tzinfo=None)


def test_mark_duplicate_adds_a_back_referencing_row(db_url):
    _upsert(db_url, _expense())
    result = _upsert(db_url, _expense(), policy="mark_duplicate")

    assert result.action == "marked_duplicate"
    assert result.id != "123456789012"
    assert count_expense_rows(db_url) == 2

    original, dup = _rows(db_url)
    assert original.is_duplicate is False
    assert original.duplicate_of is None
    assert dup.id == result.id
    assert dup.is_duplicate is True
    assert dup.duplicate_of == "123456789012"
    assert dup.fingerprint == original.fingerprint


def test_first_write_is_created_under_every_policy(db_url):
    for i, policy in enumerate(("skip", "update", "mark_duplicate")):
        exp = _expense(source_transaction_id=f"tx-{i}", id=f"tx-{i}")
        assert _upsert(db_url, exp, policy=policy).action == "created"
    assert count_expense_rows(db_url) == 3


def test_unknown_policy_is_rejected(db_url):
    with pytest.raises(ValueError):
        _upsert(db_url, _expense(), policy="overwrite")
    assert count_expense_rows(db_url) == 0


def test_concurrent_upserts_create_exactly_once(db_url):
    exp = _expense()
    barrier = threading.Barrier(2)
    results: list[str] = []
    errors: list[BaseException] = []
    lock = threading.Lock()

    def worker() -> None:
        try:
            barrier.wait(timeout=10)
            result = _upsert(db_url, exp)
            with lock:
                results.append(result.action)
        except BaseException as exc:  # surfaced below
            with lock:
                errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert not errors
    assert sorted(results) == ["created", "skipped"]
    assert count_expense_rows(db_url) == 1
