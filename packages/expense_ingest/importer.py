# ruff: noqa: I001
"""Import job orchestrator: one uploaded statement in, one terminal job out.

Pipeline per call (progress checkpoints in brackets):

1. checksum the raw bytes [5]
2. look for a completed job with the same checksum [10]; if found, record a
   short-circuit job copying its counts and stop without parsing
3. persist the new job as ``processing`` [15]
4. extract text, select the parser, parse [30]
5. per candidate: normalize, fingerprint, build, upsert, count [30-90]
6. mark the job ``completed`` [100]

Failures in steps 1-4 fail the job, persist it best-effort and re-raise. Row
failures in step 5 are recorded as ``"Row <n>: <message>"`` and the loop
moves on. Each row commits in its own transaction, so the job counters only
count committed writes.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from os import PathLike
from pathlib import Path
from uuid import uuid4

from db.client import session_scope
from .errors import NoTransactionsFoundError
from .extract import PdfPlumberExtractor, TextExtractor
from .fingerprint import compute_file_checksum, fingerprint_fields
from .jobs import create_job, find_completed_job_by_checksum, insert_job_if_absent, save_job
from .logging_setup import job_logger
from .models import (
    POLICIES,
    STATUSES,
    CanonicalExpense,
    DuplicatePolicy,
    ImportJob,
    RawTransactionCandidate,
)
from .normalizers import normalize_record
from .parsers import get_parser
from .persistence import upsert_expense

type ProgressCallback = Callable[[int, str], None]

NO_TRANSACTIONS_MESSAGE = "No transactions found in the PDF. Please verify the source and file format."

# Share of the progress bar spent on per-row work (30 -> 90).
_ROWS_START = 30
_ROWS_SPAN = 60


def _now() -> datetime:
    return datetime.now(UTC)


def _canonical_status(raw: str | None) -> str:
    s = (raw or "").strip().lower()
    return s if s in STATUSES else "completed"


def build_expense(
    candidate: RawTransactionCandidate,
    *,
    source: str,
    source_file_checksum: str,
    now: datetime | None = None,
) -> CanonicalExpense:
    """Normalize and fingerprint a parser candidate into a storable expense."""

    fields = normalize_record(candidate)
    fingerprint = fingerprint_fields(fields)
    txn_id = (candidate.source_transaction_id or "").strip() or None
    ts = now or _now()
    return CanonicalExpense(
        id=txn_id or fingerprint,
        fingerprint=fingerprint,
        source=source,
        source_transaction_id=txn_id,
        date=fields.date,
        amount=fields.amount,
        vendor=fields.vendor,
        category=candidate.category or None,
        status=_canonical_status(candidate.status),
        raw_text=dict(candidate.raw_fields),
        source_file_checksum=source_file_checksum,
        created_at=ts,
        updated_at=ts,
    )


def _fail(
    job: ImportJob, exc: BaseException, database_url: str | None, *, persisted: bool
) -> None:
    """Mark ``job`` failed and store it.

    Until this call has written the row, an existing row under the same id
    belongs to someone else and is left alone.
    """

    job.add_error(str(exc) or exc.__class__.__name__)
    job.transition("failed")
    job.finished_at = _now()
    log = job_logger(job.job_id)
    log.error("Import failed: %s", exc)
    try:
        with session_scope(database_url=database_url) as s:
            if persisted:
                save_job(s, job)
            elif not insert_job_if_absent(s, job):
                log.warning("Job id already taken; failed state not stored")
    except Exception:
        # The original failure is what the caller needs to see.
        log.warning("Could not persist failed state", exc_info=True)


def _short_circuit(job: ImportJob, prior: ImportJob, database_url: str | None) -> None:
    job.created = prior.created
    job.skipped = prior.skipped
    job.updated = prior.updated
    job.marked_duplicate = prior.marked_duplicate
    job.short_circuit_of = prior.job_id
    job.add_error(f"File already processed in job {prior.job_id}. All records skipped.")
    job.transition("completed")
    job.finished_at = _now()
    with session_scope(database_url=database_url) as s:
        create_job(s, job)
    job_logger(job.job_id).info("Short-circuited: checksum matches job %s", prior.job_id)


def import_statement(
    data: bytes,
    *,
    source: str,
    file_name: str,
    password: str | None = None,
    policy: DuplicatePolicy = "skip",
    database_url: str | None = None,
    extractor: TextExtractor | None = None,
    job_id: str | None = None,
    on_progress: ProgressCallback | None = None,
) -> ImportJob:
    """Import one statement file and return its terminal job.

    Parameters
    ----------
    data:
        Raw uploaded bytes.
    source:
        One of ``SOURCES``; an unknown value raises ``UnknownSourceError``
        before any job is created.
    file_name:
        Display name stored on the job.
    password:
        Optional document password, passed to the extractor.
    policy:
        Duplicate policy for every row of this upload.
    database_url:
        Overrides ``DATABASE_URL``.
    extractor:
        Text extractor; defaults to ``PdfPlumberExtractor``.
    job_id:
        Use a caller-chosen id (e.g. to poll it from elsewhere); random otherwise.
    on_progress:
        Called with ``(percent, message)`` at each checkpoint; percent never
        decreases within one call.

    Raises
    ------
    ExtractionError
        Wrong password or unreadable document; the job is stored as failed.
    NoTransactionsFoundError
        The parser found nothing; the job is stored as failed.
    """

    if policy not in POLICIES:
        raise ValueError(f"Unknown duplicate policy: {policy!r}. Allowed: {list(POLICIES)}")
    parser = get_parser(source)
    extract = extractor or PdfPlumberExtractor()

    job = ImportJob(
        job_id=job_id or uuid4().hex,
        source=source,
        file_name=file_name,
        started_at=_now(),
    )

    def report(percent: int, message: str) -> None:
        if job.advance(percent) and on_progress is not None:
            on_progress(job.progress, message)

    log = job_logger(job.job_id)
    log.info("Import started (source=%s, file=%s)", source, file_name)

    try:
        job.source_file_checksum = compute_file_checksum(data)
        report(5, "Computed file checksum")

        with session_scope(database_url=database_url) as s:
            prior = find_completed_job_by_checksum(s, job.source_file_checksum)
        report(10, "Checked for previous imports")
    except Exception as exc:
        _fail(job, exc, database_url, persisted=False)
        raise

    if prior is not None:
        _short_circuit(job, prior, database_url)
        report(100, job.errors[-1])
        return job

    persisted = False
    try:
        job.transition("processing")
        with session_scope(database_url=database_url) as s:
            create_job(s, job)
        persisted = True
        report(15, "Extracting text")

        lines = extract(data, password)
        candidates = parser("\n".join(lines))
        if not candidates:
            raise NoTransactionsFoundError(NO_TRANSACTIONS_MESSAGE)
        report(_ROWS_START, f"Parsed {len(candidates)} transactions")
    except Exception as exc:
        _fail(job, exc, database_url, persisted=persisted)
        raise

    total = len(candidates)
    for i, candidate in enumerate(candidates):
        try:
            expense = build_expense(
                candidate, source=source, source_file_checksum=job.source_file_checksum
            )
            with session_scope(database_url=database_url) as s:
                result = upsert_expense(s, expense, policy=policy)
            job.record(result.action)
        except Exception as exc:
            log.warning("Row %d failed: %s", i + 1, exc)
            job.add_error(f"Row {i + 1}: {exc}")
        report(_ROWS_START + round((i + 1) / total * _ROWS_SPAN), f"Processed {i + 1}/{total}")

    job.transition("completed")
    job.finished_at = _now()
    with session_scope(database_url=database_url) as s:
        save_job(s, job)
    report(100, "Import complete")
    log.info(
        "Completed: created=%d skipped=%d updated=%d marked_duplicate=%d errors=%d",
        job.created,
        job.skipped,
        job.updated,
        job.marked_duplicate,
        len(job.errors),
    )
    return job


def import_statement_file(
    path: str | PathLike[str],
    *,
    source: str,
    file_name: str | None = None,
    **kwargs,
) -> ImportJob:
    """Read ``path`` and pass its bytes to :func:`import_statement`."""

    p = Path(path)
    return import_statement(p.read_bytes(), source=source, file_name=file_name or p.name, **kwargs)


__all__ = [
    "NO_TRANSACTIONS_MESSAGE",
    "ProgressCallback",
    "build_expense",
    "import_statement",
    "import_statement_file",
]
