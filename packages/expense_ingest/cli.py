# ruff: noqa: I001
"""Typer console interface for ``expense_ingest``.

Every command loads a local ``.env`` (without overriding variables already set)
and configures package logging before running. Business logic lives in
``expense_ingest.importer``, ``expense_ingest.jobs``, ``expense_ingest.queries``
and ``expense_ingest.export``.
"""

from __future__ import annotations

import json
import os
from datetime import date
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .errors import ExpenseIngestError
from .logging_setup import configure_logging
from .models import ImportJob

_POLL_INTERVAL_ENV = "EXPENSE_INGEST_POLL_INTERVAL"


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank and wallet statement PDFs (PhonePe, Axis, HDFC, PayZapp) into a "
        "deduplicated expense store. Reads DATABASE_URL from the environment or a local .env."
    ),
)


# Module-level option objects (ruff B008: no calls in parameter defaults).
SOURCE_OPTION: OptionInfo = typer.Option(
    ..., "--source", "-s", help="Statement source: phonepe, axis, hdfc or payzap."
)


def _database_url_option() -> OptionInfo:
    # One OptionInfo per command; Typer fills in defaults on the instance it is given.
    return typer.Option(..., "--database-url", help="Override DATABASE_URL (falls back to env var).")


def _echo_job(job: ImportJob) -> None:
    typer.echo(json.dumps(job.to_dict(), indent=2, default=str))


def _poll_interval_default() -> float:
    raw = os.getenv(_POLL_INTERVAL_ENV)
    try:
        return float(raw) if raw else 2.0
    except ValueError:
        return 2.0


@app.callback()
def _root() -> None:
    """Root command: load ``.env`` and configure logging once."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


@app.command("import")
def import_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True)],
    source: Annotated[str, SOURCE_OPTION],
    *,
    password: str | None = typer.Option(None, help="Password for encrypted statements."),
    policy: str = typer.Option(
        "skip", help="Duplicate policy: skip, update or mark_duplicate."
    ),
    database_url: Annotated[str | None, _database_url_option()] = None,
) -> None:
    """Import one statement file and print the resulting job."""

    from .importer import import_statement_file

    def _progress(percent: int, message: str) -> None:
        typer.echo(f"[{percent:3d}%] {message}", err=True)

    try:
        job = import_statement_file(
            path,
            source=source,
            password=password,
            policy=policy,  # type: ignore[arg-type]
            database_url=database_url,
            on_progress=_progress,
        )
    except (ExpenseIngestError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    _echo_job(job)


@app.command("expenses")
def expenses_cmd(
    *,
    source: str | None = typer.Option(None, help="Filter by source."),
    category: str | None = typer.Option(None, help="Filter by category."),
    vendor: str | None = typer.Option(None, help="Vendor prefix (case-insensitive)."),
    date_from: str | None = typer.Option(None, help="Earliest date, YYYY-MM-DD."),
    date_to: str | None = typer.Option(None, help="Latest date, YYYY-MM-DD."),
    sort: str = typer.Option("date", help="Field to sort by."),
    asc: bool = typer.Option(False, "--asc", help="Sort ascending."),
    csv_out: Path | None = typer.Option(None, "--csv", help="Write CSV here instead of stdout."),
    database_url: Annotated[str | None, _database_url_option()] = None,
) -> None:
    """List stored expenses as CSV, followed by a summary on stderr."""

    from pydantic import ValidationError

    from db.client import session_scope
    from .export import sort_expenses, summarize, to_csv
    from .models import ExpenseFilter
    from .queries import list_expenses

    try:
        filters = ExpenseFilter(
            source=source,
            category=category,
            vendor=vendor,
            date_from=date.fromisoformat(date_from) if date_from else None,
            date_to=date.fromisoformat(date_to) if date_to else None,
        )
        with session_scope(database_url=database_url) as s:
            rows = list_expenses(s, filters)
        rows = sort_expenses(rows, sort, ascending=asc)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc

    text = to_csv(rows)
    if csv_out is not None:
        csv_out.write_text(text, encoding="utf-8")
        typer.echo(f"Wrote {len(rows)} expenses to {csv_out}", err=True)
    else:
        typer.echo(text, nl=False)

    summary = summarize(rows)
    typer.echo(f"Total: {summary.total_amount} across {summary.count} expenses", err=True)


@app.command("jobs")
def jobs_cmd(
    *,
    limit: int = typer.Option(20, help="Maximum number of jobs to show."),
    database_url: Annotated[str | None, _database_url_option()] = None,
) -> None:
    """List recent import jobs, newest first."""

    from db.client import session_scope
    from .jobs import list_jobs

    with session_scope(database_url=database_url) as s:
        jobs = list_jobs(s, limit=limit)
    for job in jobs:
        typer.echo(
            f"{job.job_id}  {job.status:<10}  {job.source:<8}  "
            f"created={job.created} skipped={job.skipped} updated={job.updated} "
            f"dup={job.marked_duplicate} errors={len(job.errors)}  {job.file_name}"
        )


@app.command("job")
def job_cmd(
    job_id: str,
    *,
    database_url: Annotated[str | None, _database_url_option()] = None,
) -> None:
    """Show one import job."""

    from db.client import session_scope
    from .jobs import get_job

    with session_scope(database_url=database_url) as s:
        job = get_job(s, job_id)
    if job is None:
        typer.echo(f"Error: import job {job_id} not found", err=True)
        raise typer.Exit(1)
    _echo_job(job)


@app.command("wait")
def wait_cmd(
    job_id: str,
    *,
    interval: float | None = typer.Option(
        None, help=f"Seconds between polls (default ${_POLL_INTERVAL_ENV} or 2)."
    ),
    max_attempts: int = typer.Option(30, help="Give up after this many polls."),
    database_url: Annotated[str | None, _database_url_option()] = None,
) -> None:
    """Poll a job until it completes or fails."""

    from .jobs import wait_for_job

    try:
        job = wait_for_job(
            job_id,
            database_url=database_url,
            interval=interval if interval is not None else _poll_interval_default(),
            max_attempts=max_attempts,
        )
    except ExpenseIngestError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    _echo_job(job)
    if not job.is_terminal:
        raise typer.Exit(3)


@app.command("init-db")
def init_db_cmd(
    *,
    database_url: Annotated[str | None, _database_url_option()] = None,
) -> None:
    """Create the expense tables directly (local SQLite use; prefer Alembic elsewhere)."""

    from db import Base
    from db.client import get_engine

    Base.metadata.create_all(get_engine(database_url=database_url))
    typer.echo("Database initialized")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
