"""Exception types raised by the ingest pipeline.

Job-aborting errors (extraction failures, empty parse results) and fatal
programming errors (unknown source, illegal job transitions) derive from
``ExpenseIngestError``. Row-level failures are ordinary exceptions that the
orchestrator records on the job instead of raising.
"""

from __future__ import annotations


class ExpenseIngestError(RuntimeError):
    """Base class for ingest pipeline errors."""


class UnknownSourceError(ExpenseIngestError, LookupError):
    """A source id with no registered parser was requested."""


class ExtractionError(ExpenseIngestError):
    """The text extractor could not read the uploaded document."""


class WrongPasswordError(ExtractionError):
    """The document is encrypted and the password is missing or wrong."""


class CorruptDocumentError(ExtractionError):
    """The document is corrupt or not a supported PDF."""


class NoTransactionsFoundError(ExpenseIngestError):
    """Text was extracted but the parser produced no transactions."""


class InvalidJobTransition(ExpenseIngestError):
    """An import job was moved against its forward-only state machine."""


class JobNotFoundError(ExpenseIngestError, LookupError):
    """No import job exists with the requested id."""


__all__ = [
    "ExpenseIngestError",
    "UnknownSourceError",
    "ExtractionError",
    "WrongPasswordError",
    "CorruptDocumentError",
    "NoTransactionsFoundError",
    "InvalidJobTransition",
    "JobNotFoundError",
]
