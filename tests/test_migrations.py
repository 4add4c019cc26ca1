from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from db import Base

_ALEMBIC_INI = Path(__file__).resolve().parents[1] / "libs" / "db" / "alembic.ini"


def test_upgrade_matches_orm_and_downgrades(tmp_path, monkeypatch):
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    cfg = Config(str(_ALEMBIC_INI))

    command.upgrade(cfg, "head")
    engine = create_engine(url)
    try:
        insp = inspect(engine)
        for table in Base.metadata.sorted_tables:
            got = {c["name"] for c in insp.get_columns(table.name)}
            assert got == {c.name for c in table.columns}, table.name
            indexes = {ix["name"] for ix in insp.get_indexes(table.name)}
            assert indexes == {ix.name for ix in table.indexes}, table.name

        command.downgrade(cfg, "base")
        assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    finally:
        engine.dispose()
