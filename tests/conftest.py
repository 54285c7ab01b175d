"""Pytest configuration for test isolation.

Each test gets its own file-backed SQLite database under ``tmp_path`` and the
cached engines are disposed afterwards, so no state leaks between tests. The
ledger reads ``DATABASE_URL`` and ``BUDGET_LEDGER_LOG_LEVEL`` from the
environment; both are cleared so a developer's shell or ``.env`` cannot steer
the suite.
"""

# ruff: noqa: E402, I001
from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make the workspace packages importable without an editable install.
_ROOT = Path(__file__).resolve().parents[1]
_PATHS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _PATHS if str(p) not in sys.path]

from budget_db.client import dispose_engines, get_session
from budget_ledger.logging_setup import reset_logging
from sqlalchemy.orm import Session

from tests.helpers.db import World, bootstrap_sqlite_db, seed_world


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("BUDGET_LEDGER_LOG_LEVEL", raising=False)
    yield
    reset_logging()
    dispose_engines()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "ledger.db")


@pytest.fixture
def session(db_url: str) -> Iterator[Session]:
    s = get_session(database_url=db_url)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def world(session: Session) -> World:
    return seed_world(session)
