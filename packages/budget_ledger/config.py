"""Runtime settings for hosts embedding the ledger.

Settings come from the process environment, optionally seeded from a ``.env``
file discovered with ``python-dotenv`` (existing variables always win):

- ``DATABASE_URL``: SQLAlchemy URL of the ledger database.
- ``BUDGET_LEDGER_LOG_LEVEL``: level name or number for the package logger.
"""

from __future__ import annotations

import os

from budget_db.client import get_engine
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from .logging_setup import configure_logging, get_logger, level_number

_logger = get_logger("budget_ledger.config")


class LedgerSettings(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    database_url: str
    log_level: str = "INFO"

    @field_validator("database_url")
    @classmethod
    def _url_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("database_url must be non-empty")
        return v

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        level = v.upper() or "INFO"
        level_number(level)  # raises on unknown names
        return level


def load_settings(*, use_dotenv: bool = True) -> LedgerSettings:
    """Build :class:`LedgerSettings` from the environment.

    Raises ``RuntimeError`` when ``DATABASE_URL`` is missing so misconfigured
    hosts fail at startup rather than on the first query.
    """

    if use_dotenv:
        dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path, override=False)

    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set; cannot configure budget_ledger")
    return LedgerSettings(
        database_url=url,
        log_level=os.getenv("BUDGET_LEDGER_LOG_LEVEL") or "INFO",
    )


def configure(settings: LedgerSettings | None = None) -> LedgerSettings:
    """Apply logging configuration and initialize the engine for ``settings``."""

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    engine = get_engine(database_url=settings.database_url)
    _logger.info("Ledger configured (dialect=%s)", engine.dialect.name)
    return settings


__all__ = ["LedgerSettings", "load_settings", "configure"]
