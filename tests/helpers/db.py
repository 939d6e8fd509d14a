"""DB helpers for tests: bootstrap a temporary SQLite DB with the ledger schema."""

from __future__ import annotations

import os
from pathlib import Path

from db import Base
from db.client import create_schema, session_scope
from sqlalchemy import text as sql_text


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    create_schema(database_url=url)
    _assert_schema_in_sync(url)

    # Make it the default for any code paths that read from the environment
    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def _assert_schema_in_sync(database_url: str) -> None:
    """Quick sanity check: ORM column sets match the SQLite table column sets."""

    with session_scope(database_url=database_url) as session:
        for table in Base.metadata.sorted_tables:
            rows = session.execute(sql_text(f"PRAGMA table_info('{table.name}')")).fetchall()
            got = {row[1] for row in rows}  # (cid, name, type, notnull, dflt_value, pk)
            expected = {c.name for c in table.columns}
            assert got == expected, f"{table.name} schema drift: {sorted(got ^ expected)}"
