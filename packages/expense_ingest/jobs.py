# ruff: noqa: I001
"""Import job repository and status polling.

Job rows live in ``import_jobs``; ``ImportJob`` is the in-memory handle.
``progress`` is not persisted: jobs loaded from the database report 100 when
terminal and 0 otherwise.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.client import session_scope
from db.models.expenses import ImportJobRow
from .errors import JobNotFoundError
from .logging_setup import get_logger
from .models import ImportJob

_log = get_logger("expense_ingest.jobs")

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_MAX_ATTEMPTS = 30


# ---------------------------------------------------------------------------
# Row <-> handle
# ---------------------------------------------------------------------------


def _row_values(job: ImportJob) -> dict[str, object]:
    return {
        "job_id": job.job_id,
        "status": job.status,
        "source": job.source,
        "file_name": job.file_name,
        "source_file_checksum": job.source_file_checksum,
        "created": job.created,
        "skipped": job.skipped,
        "updated": job.updated,
        "marked_duplicate": job.marked_duplicate,
        "errors": list(job.errors),
        "short_circuit_of": job.short_circuit_of,
        "started_at": job.started_at,
        "finished_at": job.finished_at,
    }


def job_from_row(row: ImportJobRow) -> ImportJob:
    job = ImportJob(
        job_id=row.job_id,
        source=row.source,
        file_name=row.file_name,
        started_at=row.started_at,
        status=row.status,  # type: ignore[arg-type]
        source_file_checksum=row.source_file_checksum,
        created=row.created,
        skipped=row.skipped,
        updated=row.updated,
        marked_duplicate=row.marked_duplicate,
        errors=list(row.errors or []),
        finished_at=row.finished_at,
        short_circuit_of=row.short_circuit_of,
    )
    job.progress = 100 if job.is_terminal else 0
    return job


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


def create_job(session: Session, job: ImportJob) -> None:
    """Insert a new job row. Fails if ``job.job_id`` already exists."""

    session.add(ImportJobRow(**_row_values(job)))
    session.flush()


def insert_job_if_absent(session: Session, job: ImportJob) -> bool:
    """Insert ``job`` unless a row with its id exists; never touches that row."""

    if session.get(ImportJobRow, job.job_id) is not None:
        return False
    create_job(session, job)
    return True


def save_job(session: Session, job: ImportJob) -> None:
    """Write the current state of ``job``, inserting the row if missing."""

    row = session.get(ImportJobRow, job.job_id)
    if row is None:
        create_job(session, job)
        return
    for key, value in _row_values(job).items():
        if key != "job_id":
            setattr(row, key, value)
    session.flush()


def get_job(session: Session, job_id: str) -> ImportJob | None:
    row = session.get(ImportJobRow, job_id)
    return job_from_row(row) if row is not None else None


def list_jobs(session: Session, *, limit: int | None = 20) -> list[ImportJob]:
    """Return jobs newest first by ``started_at``."""

    stmt = select(ImportJobRow).order_by(ImportJobRow.started_at.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    return [job_from_row(r) for r in session.scalars(stmt)]


def find_completed_job_by_checksum(session: Session, checksum: str) -> ImportJob | None:
    """Newest completed job for a file checksum, if any."""

    stmt = (
        select(ImportJobRow)
        .where(
            ImportJobRow.source_file_checksum == checksum,
            ImportJobRow.status == "completed",
        )
        .order_by(ImportJobRow.started_at.desc())
        .limit(1)
    )
    row = session.scalars(stmt).first()
    return job_from_row(row) if row is not None else None


# ---------------------------------------------------------------------------
# Polling
# ---------------------------------------------------------------------------


def wait_for_job(
    job_id: str,
    *,
    database_url: str | None = None,
    interval: float = DEFAULT_POLL_INTERVAL,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
    on_poll: Callable[[ImportJob], None] | None = None,
) -> ImportJob:
    """Re-fetch a job every ``interval`` seconds until it reaches a terminal status.

    Gives up after ``max_attempts`` reads and returns the last job seen, which
    may still be non-terminal. Raises ``JobNotFoundError`` if the job never
    appeared. Stopping early is the caller's business; the loop holds no
    resources between polls.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last: ImportJob | None = None
    for attempt in range(1, max_attempts + 1):
        with session_scope(database_url=database_url) as s:
            last = get_job(s, job_id) or last
        if last is not None:
            if on_poll is not None:
                on_poll(last)
            if last.is_terminal:
                return last
        if attempt < max_attempts:
            sleep(interval)

    if last is None:
        raise JobNotFoundError(f"Import job {job_id} not found")
    _log.info("Stopped polling job %s after %d attempts (status=%s)", job_id, max_attempts, last.status)
    return last


__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_MAX_ATTEMPTS",
    "job_from_row",
    "create_job",
    "insert_job_if_absent",
    "save_job",
    "get_job",
    "list_jobs",
    "find_completed_job_by_checksum",
    "wait_for_job",
]
