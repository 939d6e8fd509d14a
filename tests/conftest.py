"""Pytest configuration for test isolation.

The database client keeps one shared engine per process and the package logger
is configured at most once, so both are reset around every test. Environment
variables read by the CLI settings are cleared so a developer's ``.env`` or
shell exports cannot leak into assertions.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make sure the workspace `packages/` and `libs/db/src` dirs are on sys.path so
# `doughflow` and `db` are importable without installation.
_ROOT = Path(__file__).resolve().parents[1]
_SRC_DIRS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _SRC_DIRS if str(p) not in sys.path]

from db.client import reset_engine  # noqa: E402
from doughflow.logging_setup import reset_logging  # noqa: E402

_SETTINGS_ENV = ("DATABASE_URL", "DOUGHFLOW_HORIZON_MONTHS", "DOUGHFLOW_LOG_LEVEL")


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for var in _SETTINGS_ENV:
        monkeypatch.delenv(var, raising=False)
    reset_engine()
    reset_logging()
    yield
    reset_engine()
    reset_logging()


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """URL of a fresh, schema-initialized SQLite database for one test."""

    from tests.helpers.db import bootstrap_sqlite_db

    return bootstrap_sqlite_db(tmp_path / "doughflow.db")
