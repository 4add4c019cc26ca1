# ruff: noqa: E402
"""Pytest configuration shared by the whole suite.

- Puts the workspace ``packages/`` and ``libs/db/src`` directories on
  ``sys.path`` so ``expense_ingest`` and ``db`` import without installation.
- Gives every test its own file-backed SQLite database (see
  ``tests/helpers/db.py``) and clears ``DATABASE_URL`` so nothing touches a
  developer's real database by accident.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
_PATHS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _PATHS if str(p) not in sys.path]

import pytest

from db.client import dispose_engines
from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("EXPENSE_INGEST_POLL_INTERVAL", raising=False)


@pytest.fixture
def db_url(tmp_path: Path) -> Iterator[str]:
    """URL of a fresh SQLite database with the expense schema."""

    url = bootstrap_sqlite_db(tmp_path / "expenses.db")
    yield url
    dispose_engines()
