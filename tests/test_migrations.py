"""Alembic migrations build the same schema as the ORM models."""

from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from budget_db import Base
from sqlalchemy import create_engine, inspect

_ALEMBIC_INI = Path(__file__).resolve().parents[1] / "libs" / "db" / "alembic.ini"


@pytest.fixture
def alembic_cfg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[Config, str]:
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    return Config(str(_ALEMBIC_INI)), url


def test_upgrade_head_matches_orm(alembic_cfg: tuple[Config, str]) -> None:
    cfg, url = alembic_cfg
    command.upgrade(cfg, "head")

    engine = create_engine(url)
    try:
        insp = inspect(engine)
        tables = set(insp.get_table_names())
        assert {t.name for t in Base.metadata.sorted_tables} <= tables
        for table in Base.metadata.sorted_tables:
            got = {c["name"] for c in insp.get_columns(table.name)}
            assert got == {c.name for c in table.columns}, table.name
        tx_indexes = {ix["name"] for ix in insp.get_indexes("hb_transactions")}
        assert "ix_hb_transactions_account_date" in tx_indexes
    finally:
        engine.dispose()


def test_downgrade_to_base_removes_ledger_tables(alembic_cfg: tuple[Config, str]) -> None:
    cfg, url = alembic_cfg
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    engine = create_engine(url)
    try:
        remaining = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert not {t for t in remaining if t.startswith("hb_")}
