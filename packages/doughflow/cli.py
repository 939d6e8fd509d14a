"""CLI for the ``doughflow`` package.

This module exposes callable command handlers (``cmd_*``) and a Typer-based
console interface. Environment variables (``DATABASE_URL`` and the
``DOUGHFLOW_*`` settings) are loaded from a local ``.env`` using
``python-dotenv`` before delegating to command logic. Business logic lives in
``doughflow.api`` and related modules; this is the only place that resolves
"today" from the system clock.
"""

from __future__ import annotations

import sys
import uuid
from datetime import date
from enum import StrEnum
from pathlib import Path

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer.models import OptionInfo

from .config import Settings, load_settings
from .logging_setup import configure_logging, get_logger

_logger = get_logger("doughflow.cli")


class OutputFormat(StrEnum):
    DETAILED = "detailed"
    TABLE = "table"


# ---- Small module-level helpers used by CLI commands -------------------------


def _err(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _validation_message(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}" for err in exc.errors()
    )


def _parse_day(raw: str, label: str) -> date:
    from .dates import parse_flexible_date

    try:
        return parse_flexible_date(raw)
    except ValueError as e:
        raise ValueError(f"invalid {label}: {raw!r}") from e


# ---- Command handlers ---------------------------------------------------------


def cmd_init_db(database_url: str) -> int:
    """Create the ledger tables (idempotent)."""

    from db.client import create_schema

    try:
        create_schema(database_url=database_url)
    except Exception as e:
        return _err(f"failed to initialize database: {e}")
    print("Database initialized.")
    return 0


def cmd_add_entry(
    database_url: str,
    *,
    entry_type: str,
    name: str,
    amount: str,
    anchor_date: str,
    frequency: str = "one-time",
    stop_date: str | None = None,
    occurrence_limit: int | None = None,
    custom_dates: list[str] | None = None,
    entry_id: str | None = None,
) -> int:
    """Validate and store one ledger entry; prints the entry id on success.

    Passing an existing ``entry_id`` replaces that entry.
    """

    from db.client import session_scope

    from .persistence import upsert_entry
    from .rows import LedgerRow

    try:
        entry = LedgerRow.model_validate(
            {
                "id": entry_id or str(uuid.uuid4()),
                "type": entry_type,
                "name": name,
                "amount": amount,
                "date": anchor_date,
                "frequency": frequency,
                "occurrenceLimit": occurrence_limit,
                "stopDate": stop_date,
                "customDates": list(custom_dates or []),
            }
        ).to_entry()
    except ValidationError as e:
        return _err(f"invalid entry: {_validation_message(e)}")

    try:
        with session_scope(database_url=database_url) as session:
            upsert_entry(session, entry)
    except Exception as e:
        return _err(f"failed to save entry: {e}")

    print(entry.id)
    return 0


def cmd_list_entries(database_url: str) -> int:
    """Print one tab-separated line per stored entry."""

    from db.client import session_scope

    from .persistence import list_entries

    try:
        with session_scope(database_url=database_url) as session:
            entries = list_entries(session)
    except Exception as e:
        return _err(f"failed to load entries: {e}")

    for e in entries:
        print(
            "\t".join(
                [
                    e.id,
                    str(e.type),
                    e.name,
                    f"{e.amount:.2f}",
                    e.anchor_date.isoformat(),
                    str(e.frequency),
                ]
            )
        )
    return 0


def cmd_delete_entry(database_url: str, entry_id: str) -> int:
    from db.client import session_scope

    from .persistence import delete_entry

    try:
        with session_scope(database_url=database_url) as session:
            removed = delete_entry(session, entry_id)
    except Exception as e:
        return _err(f"failed to delete entry: {e}")
    if not removed:
        return _err(f"no entry with id {entry_id!r}")
    print(f"Deleted {entry_id}.")
    return 0


def cmd_import_csv(database_url: str, csv_path: str | Path) -> int:
    """Bulk-import entries from a CSV file.

    Rejected rows are reported on stderr; the command still succeeds when at
    least one row was imported.
    """

    import csv

    from db.client import session_scope

    from .ingest import load_entries_from_csv
    from .persistence import upsert_entries

    try:
        result = load_entries_from_csv(csv_path)
    except FileNotFoundError:
        return _err(f"File not found: {csv_path}")
    except PermissionError:
        return _err(f"Permission denied: {csv_path}")
    except csv.Error as e:
        return _err(f"Failed to parse CSV: {e}")

    for line, reason in result.rejected:
        print(f"Skipped row {line}: {reason}", file=sys.stderr)
    if not result.entries:
        return _err("No valid entries found in the CSV file.")

    try:
        with session_scope(database_url=database_url) as session:
            written = upsert_entries(session, result.entries)
    except Exception as e:
        return _err(f"failed to save entries: {e}")

    print(f"Imported {written} entries successfully!")
    return 0


def cmd_set_anchor(database_url: str, anchor_date: str, starting_balance: str) -> int:
    """Record a reconciliation checkpoint (known balance at the start of a day)."""

    from db.client import session_scope

    from .models import AnchorSettings
    from .persistence import set_anchor

    try:
        anchor = AnchorSettings(
            anchor_date=_parse_day(anchor_date, "anchor date"),
            starting_balance=starting_balance,
        )
    except ValueError as e:
        return _err(str(e))

    try:
        with session_scope(database_url=database_url) as session:
            set_anchor(session, anchor)
    except Exception as e:
        return _err(f"failed to save anchor: {e}")

    print(
        f"Anchor set to {anchor.anchor_date.isoformat()} "
        f"with balance {anchor.starting_balance:.2f}."
    )
    return 0


def cmd_sync_anchor(database_url: str, today: date, *, horizon_months: int) -> int:
    """Move the stored anchor to ``today`` carrying the projected balance."""

    from db.client import session_scope

    from .api import forecast_from_anchor, sync_anchor
    from .persistence import get_anchor, list_entries, set_anchor

    try:
        with session_scope(database_url=database_url) as session:
            anchor = get_anchor(session)
            if anchor is None:
                return _err("no anchor set; run 'set-anchor' first")
            series = forecast_from_anchor(
                list_entries(session), anchor, horizon_months=horizon_months
            )
            try:
                new_anchor = sync_anchor(series, today)
            except ValueError as e:
                return _err(f"cannot sync anchor: {e}")
            set_anchor(session, new_anchor)
    except Exception as e:
        return _err(f"failed to sync anchor: {e}")

    print(
        f"Anchor synced to {new_anchor.anchor_date.isoformat()} "
        f"with balance {new_anchor.starting_balance:.2f}."
    )
    return 0


def cmd_forecast(
    database_url: str,
    *,
    today: date,
    horizon_months: int,
    start: str | None = None,
    end: str | None = None,
    starting_balance: str | None = None,
    output_format: OutputFormat = OutputFormat.DETAILED,
    output: str | Path | None = None,
) -> int:
    """Render the daily balance forecast as CSV to stdout or ``output``.

    Window and starting balance default to the stored anchor (or ``today`` with
    a zero balance when none is stored) and the configured horizon.
    """

    from db.client import session_scope

    from .api import forecast, resolve_window
    from .export import render_detailed_csv, render_forecast_table_csv, write_csv
    from .models import AnchorSettings
    from .persistence import get_anchor, list_entries

    try:
        with session_scope(database_url=database_url) as session:
            entries = list_entries(session)
            stored = get_anchor(session)
    except Exception as e:
        return _err(f"failed to load ledger: {e}")

    try:
        anchor = stored or AnchorSettings(anchor_date=today)
        if start is not None:
            anchor = AnchorSettings(
                anchor_date=_parse_day(start, "start date"),
                starting_balance=anchor.starting_balance,
            )
        if starting_balance is not None:
            anchor = AnchorSettings(
                anchor_date=anchor.anchor_date, starting_balance=starting_balance
            )
        window_start, window_end = resolve_window(anchor, horizon_months=horizon_months)
        if end is not None:
            window_end = _parse_day(end, "end date")
    except ValueError as e:
        return _err(str(e))

    if window_start > window_end:
        return _err("end date is before start date")

    series = forecast(entries, window_start, window_end, anchor.starting_balance)
    _logger.info(
        "forecast %s..%s: %d entries, %d days",
        window_start.isoformat(),
        window_end.isoformat(),
        len(entries),
        len(series),
    )
    if output_format == OutputFormat.TABLE:
        text = render_forecast_table_csv(series)
    else:
        text = render_detailed_csv(series)

    if output is None:
        sys.stdout.write(text)
        return 0
    try:
        path = write_csv(output, text)
    except OSError as e:
        return _err(f"failed to write {output}: {e}")
    print(f"Wrote {len(series)} days to {path}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Project a daily cash reserve from a ledger of bills, paychecks and purchases. "
        "Loads DATABASE_URL and DOUGHFLOW_* settings from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--csv-path",
    help="Path to a bulk-import CSV (type,name,amount,date,frequency,...)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files
)
CUSTOM_DATE_OPTION: OptionInfo = typer.Option(
    None, "--custom-date", help="Extra occurrence date (repeatable)."
)


def _settings(ctx: typer.Context) -> Settings:
    settings = ctx.obj
    assert isinstance(settings, Settings)  # set by _root
    return settings


def _today() -> date:
    return date.today()


@app.command("init-db")
def init_db_cmd(ctx: typer.Context) -> None:
    """Create the ledger tables in the configured database."""

    raise typer.Exit(cmd_init_db(_settings(ctx).database_url))


@app.command("add-entry")
def add_entry_cmd(
    ctx: typer.Context,
    entry_type: str = typer.Option(..., "--type", help="bill, paycheck or purchase"),
    name: str = typer.Option(..., help="Label shown in exports."),
    amount: str = typer.Option(..., help="Magnitude, e.g. 1200.00"),
    anchor_date: str = typer.Option(..., "--date", help="First occurrence (YYYY-MM-DD)."),
    frequency: str = typer.Option(
        "one-time", help="one-time, weekly, bi-weekly, monthly or every-4-weeks"
    ),
    stop_date: str | None = typer.Option(None, help="Inclusive last recurrence date."),
    occurrence_limit: int | None = typer.Option(None, help="Maximum recurring occurrences."),
    custom_dates: list[str] | None = CUSTOM_DATE_OPTION,
    entry_id: str | None = typer.Option(None, "--id", help="Replace the entry with this id."),
) -> None:
    """Add (or replace) a ledger entry."""

    raise typer.Exit(
        cmd_add_entry(
            _settings(ctx).database_url,
            entry_type=entry_type,
            name=name,
            amount=amount,
            anchor_date=anchor_date,
            frequency=frequency,
            stop_date=stop_date,
            occurrence_limit=occurrence_limit,
            custom_dates=custom_dates,
            entry_id=entry_id,
        )
    )


@app.command("list-entries")
def list_entries_cmd(ctx: typer.Context) -> None:
    """List stored ledger entries."""

    raise typer.Exit(cmd_list_entries(_settings(ctx).database_url))


@app.command("delete-entry")
def delete_entry_cmd(
    ctx: typer.Context,
    entry_id: str = typer.Argument(..., help="Id of the entry to delete."),
) -> None:
    """Delete a ledger entry by id."""

    raise typer.Exit(cmd_delete_entry(_settings(ctx).database_url, entry_id))


@app.command("import-csv")
def import_csv_cmd(ctx: typer.Context, csv_path: Path = CSV_PATH_OPTION) -> None:
    """Bulk-import entries from a CSV file."""

    raise typer.Exit(cmd_import_csv(_settings(ctx).database_url, csv_path))


@app.command("set-anchor")
def set_anchor_cmd(
    ctx: typer.Context,
    anchor_date: str = typer.Option(..., "--date", help="Checkpoint date (YYYY-MM-DD)."),
    balance: str = typer.Option(..., help="Known balance at the start of that day."),
) -> None:
    """Record a reconciliation checkpoint."""

    raise typer.Exit(cmd_set_anchor(_settings(ctx).database_url, anchor_date, balance))


@app.command("sync-anchor")
def sync_anchor_cmd(
    ctx: typer.Context,
    today: str | None = typer.Option(None, help="Override today's date (YYYY-MM-DD)."),
) -> None:
    """Move the anchor to today, carrying the projected balance forward."""

    settings = _settings(ctx)
    try:
        day = _parse_day(today, "date") if today else _today()
    except ValueError as e:
        raise typer.Exit(_err(str(e))) from e
    raise typer.Exit(
        cmd_sync_anchor(settings.database_url, day, horizon_months=settings.horizon_months)
    )


@app.command("forecast")
def forecast_cmd(
    ctx: typer.Context,
    start: str | None = typer.Option(None, help="Window start (defaults to the anchor)."),
    end: str | None = typer.Option(None, help="Window end (defaults to start + horizon)."),
    starting_balance: str | None = typer.Option(
        None, help="Balance at the start of the window (defaults to the anchor's)."
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.DETAILED, "--format", help="detailed or table"
    ),
    output: Path | None = typer.Option(None, help="Write CSV here instead of stdout."),
) -> None:
    """Print the daily reserve forecast as CSV."""

    settings = _settings(ctx)
    raise typer.Exit(
        cmd_forecast(
            settings.database_url,
            today=_today(),
            horizon_months=settings.horizon_months,
            start=start,
            end=end,
            starting_balance=starting_balance,
            output_format=output_format,
            output=output,
        )
    )


@app.callback()
def _root(
    ctx: typer.Context,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var, then ./doughflow.db)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables), reads settings and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    try:
        settings = load_settings()
    except ValidationError as e:
        raise typer.Exit(_err(f"invalid configuration: {_validation_message(e)}")) from e
    if database_url:
        settings = settings.model_copy(update={"database_url": database_url})

    configure_logging(settings.log_level)
    ctx.obj = settings


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m doughflow.cli`
    app()
