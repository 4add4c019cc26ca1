"""DB helpers for tests: bootstrap a temporary SQLite DB and count rows."""

from __future__ import annotations

import os
from pathlib import Path

from db import Base
from db.client import get_engine, session_scope
from db.models.expenses import Expense, ImportJobRow
from sqlalchemy import func, select


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections (and
    threads) share the same state; in-memory DBs are per-connection by default.
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)
    Base.metadata.create_all(bind=engine)

    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def count_expense_rows(database_url: str) -> int:
    with session_scope(database_url=database_url) as s:
        return int(s.scalar(select(func.count()).select_from(Expense)) or 0)


def count_job_rows(database_url: str) -> int:
    with session_scope(database_url=database_url) as s:
        return int(s.scalar(select(func.count()).select_from(ImportJobRow)) or 0)
