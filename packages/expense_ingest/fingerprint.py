"""Content fingerprints for transactions and checksums for uploaded files.

The transaction fingerprint is SHA-256 over
``"<date>|<amount 2dp>|<vendor>|<TYPE>"`` (UTF-8), rendered as 64 lowercase
hex characters. Amounts are formatted from ``Decimal`` so the payload never
depends on locale or binary float representation.
"""

from __future__ import annotations

import hashlib
from decimal import ROUND_HALF_UP, Decimal
from os import PathLike
from pathlib import Path

from .models import NormalizedFields

_CHECKSUM_PREFIX = "sha256:"


def _fmt_amount(amount: Decimal | int | float | str) -> str:
    # str() first so floats like 349.5 format from their shortest repr.
    d = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return f"{d.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


def compute_fingerprint(
    date: str,
    amount: Decimal | int | float | str,
    vendor: str,
    transaction_type: str = "",
) -> str:
    """Return the SHA-256 hex digest identifying a logical transaction."""

    payload = f"{date}|{_fmt_amount(amount)}|{vendor}|{(transaction_type or '').upper().strip()}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def fingerprint_fields(fields: NormalizedFields) -> str:
    return compute_fingerprint(fields.date, fields.amount, fields.vendor, fields.transaction_type)


def compute_file_checksum(data: bytes) -> str:
    """Return ``"sha256:<hex>"`` over the raw uploaded bytes."""

    return _CHECKSUM_PREFIX + hashlib.sha256(data).hexdigest()


def compute_path_checksum(path: str | PathLike[str]) -> str:
    """Streaming variant of :func:`compute_file_checksum` for files on disk."""

    sha256_hash = hashlib.sha256()
    with Path(path).open("rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha256_hash.update(byte_block)
    return _CHECKSUM_PREFIX + sha256_hash.hexdigest()


__all__ = [
    "compute_fingerprint",
    "fingerprint_fields",
    "compute_file_checksum",
    "compute_path_checksum",
]
