from pathlib import Path

import pytest
from db.client import get_engine, reset_engine, session_scope
from sqlalchemy import text


def test_missing_database_url_raises():
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        get_engine()


def test_engine_reads_database_url_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    url = f"sqlite+pysqlite:///{tmp_path / 'env.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    assert str(get_engine().url) == url


def test_rebinding_requires_reset(tmp_path: Path):
    first = f"sqlite+pysqlite:///{tmp_path / 'a.db'}"
    second = f"sqlite+pysqlite:///{tmp_path / 'b.db'}"
    get_engine(database_url=first)
    with pytest.raises(RuntimeError, match="reset_engine"):
        get_engine(database_url=second)
    reset_engine()
    assert str(get_engine(database_url=second).url) == second


def test_session_scope_rolls_back_on_error(sqlite_url: str):
    with pytest.raises(RuntimeError, match="boom"):
        with session_scope(database_url=sqlite_url) as s:
            s.execute(
                text(
                    "INSERT INTO anchor_settings (id, anchor_date, starting_balance) "
                    "VALUES (1, '2025-01-01', 10)"
                )
            )
            raise RuntimeError("boom")
    with session_scope() as s:
        assert s.execute(text("SELECT COUNT(*) FROM anchor_settings")).scalar_one() == 0
