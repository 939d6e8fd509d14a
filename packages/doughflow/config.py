"""Runtime settings for the ``doughflow`` CLI.

Values come from the process environment (after the CLI has loaded a ``.env``
file with ``python-dotenv``). Library code receives settings explicitly and
never reads the environment itself.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, field_validator

from .api import DEFAULT_HORIZON_MONTHS

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///doughflow.db"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    database_url: str = DEFAULT_DATABASE_URL
    horizon_months: int = DEFAULT_HORIZON_MONTHS
    log_level: str | None = None

    @field_validator("database_url")
    @classmethod
    def _url_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("database_url must be non-empty")
        return v

    @field_validator("horizon_months")
    @classmethod
    def _positive_horizon(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("horizon_months must be a positive integer")
        return v


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``).

    Blank variables count as unset. Raises ``pydantic.ValidationError`` for
    invalid values such as a non-numeric ``DOUGHFLOW_HORIZON_MONTHS``.
    """

    env = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for key, var in (
        ("database_url", "DATABASE_URL"),
        ("horizon_months", "DOUGHFLOW_HORIZON_MONTHS"),
        ("log_level", "DOUGHFLOW_LOG_LEVEL"),
    ):
        raw = (env.get(var) or "").strip()
        if raw:
            values[key] = raw
    return Settings.model_validate(values)


__all__ = ["DEFAULT_DATABASE_URL", "DEFAULT_HORIZON_MONTHS", "Settings", "load_settings"]
