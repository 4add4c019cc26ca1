"""Data models and type aliases for ``expense_ingest``.

Records flow strictly forward through the pipeline:

``RawTransactionCandidate`` (parser output, never persisted)
-> ``NormalizedFields`` (canonical values used for fingerprinting)
-> ``CanonicalExpense`` (the persisted unit, one row in ``expenses``).

``ImportJob`` is the mutable job-state handle owned by the import
orchestrator; callers observe it (and its ``progress``) but never mutate it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, NamedTuple, get_args

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .errors import InvalidJobTransition

# ---------------------------------------------------------------------------
# Closed value sets
# ---------------------------------------------------------------------------

type ExpenseSource = Literal["phonepe", "axis", "hdfc", "payzap"]
type TransactionStatus = Literal["completed", "pending", "failed", "reversed"]
type DuplicatePolicy = Literal["skip", "update", "mark_duplicate"]
type JobStatus = Literal["queued", "processing", "completed", "failed"]
type UpsertAction = Literal["created", "skipped", "updated", "marked_duplicate"]

SOURCES: tuple[str, ...] = get_args(ExpenseSource.__value__)
STATUSES: tuple[str, ...] = get_args(TransactionStatus.__value__)
POLICIES: tuple[str, ...] = get_args(DuplicatePolicy.__value__)
UPSERT_ACTIONS: tuple[str, ...] = get_args(UpsertAction.__value__)

DEFAULT_CURRENCY = "INR"

# ---------------------------------------------------------------------------
# Pipeline records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawTransactionCandidate:
    """A transaction as printed in the statement, before normalization.

    ``raw_fields`` keeps the strings the parser saw (for audit); it is copied
    verbatim into ``CanonicalExpense.raw_text``.
    """

    date: str
    amount: str
    vendor: str
    source_transaction_id: str | None = None
    transaction_type: str | None = None
    category: str | None = None
    status: str | None = None
    raw_fields: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class NormalizedFields:
    """Canonical comparison form of a candidate.

    ``transaction_type`` uses ``""`` for "no type"; it fingerprints the same
    as an absent type.
    """

    date: str
    amount: Decimal
    vendor: str
    transaction_type: str = ""


@dataclass(frozen=True, slots=True)
class CanonicalExpense:
    """The persisted unit of storage (one ``expenses`` row)."""

    id: str
    fingerprint: str
    source: str
    source_transaction_id: str | None
    date: str
    amount: Decimal
    vendor: str
    status: str
    raw_text: Mapping[str, str]
    source_file_checksum: str
    created_at: datetime
    updated_at: datetime
    currency: str = DEFAULT_CURRENCY
    category: str | None = None
    duplicate_of: str | None = None
    is_duplicate: bool = False

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["raw_text"] = dict(self.raw_text)
        return out


class UpsertResult(NamedTuple):
    """Outcome of one gateway call: what happened and under which key."""

    action: UpsertAction
    id: str


# ---------------------------------------------------------------------------
# Import job state
# ---------------------------------------------------------------------------

_TRANSITIONS: dict[str, frozenset[str]] = {
    # queued -> completed is the checksum short-circuit; queued -> failed covers
    # failures before the job row was first persisted.
    "queued": frozenset({"processing", "completed", "failed"}),
    "processing": frozenset({"completed", "failed"}),
    "completed": frozenset(),
    "failed": frozenset(),
}

@dataclass(slots=True)
class ImportJob:
    """Progress and outcome of one upload attempt.

    Status only moves forward (see ``transition``), ``errors`` is
    append-only and ``progress`` never decreases.
    """

    job_id: str
    source: str
    file_name: str
    started_at: datetime
    status: JobStatus = "queued"
    source_file_checksum: str = ""
    created: int = 0
    skipped: int = 0
    updated: int = 0
    marked_duplicate: int = 0
    errors: list[str] = field(default_factory=list)
    finished_at: datetime | None = None
    short_circuit_of: str | None = None
    progress: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in ("completed", "failed")

    def transition(self, new_status: JobStatus) -> None:
        if new_status not in _TRANSITIONS[self.status]:
            raise InvalidJobTransition(
                f"job {self.job_id}: cannot move from {self.status!r} to {new_status!r}"
            )
        self.status = new_status

    def record(self, action: UpsertAction) -> None:
        if action not in UPSERT_ACTIONS:
            raise ValueError(f"Unknown upsert action: {action!r}")
        setattr(self, action, getattr(self, action) + 1)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def advance(self, percent: int) -> bool:
        """Raise ``progress`` to ``percent``; return False when it would go back."""

        percent = max(0, min(100, int(percent)))
        if percent < self.progress:
            return False
        self.progress = percent
        return True

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["errors"] = list(self.errors)
        return out


# ---------------------------------------------------------------------------
# Query filters
# ---------------------------------------------------------------------------


class ExpenseFilter(BaseModel):
    """Filters for ``queries.list_expenses``.

    ``vendor`` is a prefix match against the normalized (uppercase) vendor;
    ``date_from``/``date_to`` are inclusive bounds.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)

    source: Literal["phonepe", "axis", "hdfc", "payzap"] | None = None
    category: str | None = None
    vendor: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    include_duplicates: bool = True

    @field_validator("category")
    @classmethod
    def _empty_category(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("vendor")
    @classmethod
    def _normalized_vendor(cls, v: str | None) -> str | None:
        # Stored vendors went through the same normalizer.
        from .normalizers import normalize_vendor

        if not v:
            return None
        return normalize_vendor(v) or None

    @model_validator(mode="after")
    def _ordered_range(self) -> ExpenseFilter:
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self


__all__ = [
    "ExpenseSource",
    "TransactionStatus",
    "DuplicatePolicy",
    "JobStatus",
    "UpsertAction",
    "SOURCES",
    "STATUSES",
    "POLICIES",
    "UPSERT_ACTIONS",
    "DEFAULT_CURRENCY",
    "RawTransactionCandidate",
    "NormalizedFields",
    "CanonicalExpense",
    "UpsertResult",
    "ImportJob",
    "ExpenseFilter",
]
