"""expense_ingest package.

Imports bank and wallet statement PDFs into a deduplicated expense store:
text extraction, per-source parsing, normalization, fingerprinting and a
policy-driven upsert, tracked by an import job.

Public API
----------
- ``import_statement`` / ``import_statement_file``: run one import, return the job
- ``get_parser``: source id -> parser function
- ``upsert_expense``: deduplicating write of one canonical expense
- ``list_expenses``, ``sort_expenses``, ``summarize``, ``to_csv``: read side
- ``wait_for_job``: poll a job until it is terminal
"""

from __future__ import annotations

from .errors import (
    CorruptDocumentError,
    ExpenseIngestError,
    ExtractionError,
    InvalidJobTransition,
    JobNotFoundError,
    NoTransactionsFoundError,
    UnknownSourceError,
    WrongPasswordError,
)
from .export import ExpenseSummary, sort_expenses, summarize, to_csv
from .fingerprint import compute_file_checksum, compute_fingerprint
from .importer import import_statement, import_statement_file
from .jobs import get_job, list_jobs, wait_for_job
from .models import (
    CanonicalExpense,
    ExpenseFilter,
    ImportJob,
    NormalizedFields,
    RawTransactionCandidate,
    UpsertResult,
)
from .parsers import get_parser
from .persistence import upsert_expense
from .queries import list_expenses

__all__ = [
    # Errors
    "ExpenseIngestError",
    "UnknownSourceError",
    "ExtractionError",
    "WrongPasswordError",
    "CorruptDocumentError",
    "NoTransactionsFoundError",
    "InvalidJobTransition",
    "JobNotFoundError",
    # Models
    "RawTransactionCandidate",
    "NormalizedFields",
    "CanonicalExpense",
    "UpsertResult",
    "ImportJob",
    "ExpenseFilter",
    "ExpenseSummary",
    # Operations
    "compute_fingerprint",
    "compute_file_checksum",
    "get_parser",
    "upsert_expense",
    "import_statement",
    "import_statement_file",
    "get_job",
    "list_jobs",
    "wait_for_job",
    "list_expenses",
    "sort_expenses",
    "summarize",
    "to_csv",
]
