"""Canonicalize raw statement strings into comparable values.

Every function here is total: unrecognized input degrades to a best-effort
value (the trimmed date string, a zero amount) and a WARNING is logged on the
``expense_ingest.normalizers`` logger. Fingerprinting still works on degraded
values, it is just no longer canonical across statement layouts.

Recognized date layouts (day first, as Indian statements print them):

- ``YYYY-MM-DD`` (already canonical)
- ``DD MMM YYYY`` / ``DD-MMM-YYYY`` / ``DD/MMM/YYYY`` with a 3+ letter month name
- ``DD/MM/YYYY`` / ``DD-MM-YYYY``
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .logging_setup import get_logger
from .models import NormalizedFields, RawTransactionCandidate

_log = get_logger("expense_ingest.normalizers")

_MONTHS: dict[str, str] = {
    "jan": "01",
    "feb": "02",
    "mar": "03",
    "apr": "04",
    "may": "05",
    "jun": "06",
    "jul": "07",
    "aug": "08",
    "sep": "09",
    "oct": "10",
    "nov": "11",
    "dec": "12",
}

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NAMED_MONTH_DATE = re.compile(r"^(\d{1,2})[\s\-/]([A-Za-z]{3,})[\s\-/](\d{4})$")
_NUMERIC_DATE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$")

_CURRENCY_NOISE = re.compile(r"[₹$€£,\s]")
# Leading decimal literal; trailing text such as "Dr" is ignored.
_DECIMAL_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

_CENT = Decimal("0.01")
ZERO = Decimal("0.00")

_NON_VENDOR_CHARS = re.compile(r"[^A-Z0-9 ]")
_WHITESPACE = re.compile(r"\s+")


def normalize_date(raw: str) -> str:
    """Return ``YYYY-MM-DD`` for a recognized layout, else the trimmed input."""

    s = (raw or "").strip()
    if _ISO_DATE.match(s):
        return s

    m = _NAMED_MONTH_DATE.match(s)
    if m:
        month = _MONTHS.get(m.group(2)[:3].lower())
        if month:
            return f"{m.group(3)}-{month}-{m.group(1).zfill(2)}"

    m = _NUMERIC_DATE.match(s)
    if m:
        return f"{m.group(3)}-{m.group(2).zfill(2)}-{m.group(1).zfill(2)}"

    _log.warning("Could not normalize date: %r", raw)
    return s


def normalize_amount(raw: str) -> Decimal:
    """Parse an amount string into a ``Decimal`` with exactly two places.

    Currency symbols (₹ $ € £), thousands separators and whitespace are
    removed first. Rounding is half away from zero at the cent. Returns
    ``Decimal("0.00")`` when nothing numeric can be read.
    """

    cleaned = _CURRENCY_NOISE.sub("", raw or "")
    m = _DECIMAL_PREFIX.match(cleaned)
    if not m:
        _log.warning("Could not parse amount: %r", raw)
        return ZERO
    try:
        value = Decimal(m.group(0))
    except InvalidOperation:
        _log.warning("Could not parse amount: %r", raw)
        return ZERO
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def normalize_vendor(raw: str) -> str:
    """Uppercase, drop punctuation, collapse whitespace to single spaces."""

    s = _WHITESPACE.sub(" ", (raw or "").upper())
    s = _NON_VENDOR_CHARS.sub("", s)
    return _WHITESPACE.sub(" ", s).strip()


def normalize_type(raw: str | None) -> str:
    # Empty string is the canonical "no type".
    return (raw or "").upper().strip()


def normalize_record(candidate: RawTransactionCandidate) -> NormalizedFields:
    """Apply all field normalizers to a parser candidate."""

    return NormalizedFields(
        date=normalize_date(candidate.date),
        amount=normalize_amount(candidate.amount),
        vendor=normalize_vendor(candidate.vendor),
        transaction_type=normalize_type(candidate.transaction_type),
    )


__all__ = [
    "normalize_date",
    "normalize_amount",
    "normalize_vendor",
    "normalize_type",
    "normalize_record",
]
