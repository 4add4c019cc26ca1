"""Line-level helpers shared by the statement parsers."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

# "#,##0.00"-shaped amount token as printed in bank statement tables.
AMOUNT_TOKEN = re.compile(r"[\d,]+\.\d{2}")

_SEPARATOR = re.compile(r"^[-=*\s]+$")
_CREDIT_HINT = re.compile(r"credit|deposit|received|salary|inward", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def split_lines(text: str) -> list[str]:
    """Split extracted text into trimmed, non-empty lines (order preserved)."""

    return [ln.strip() for ln in (text or "").splitlines() if ln.strip()]


def is_separator(line: str) -> bool:
    return bool(_SEPARATOR.match(line))


def squash(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def infer_debit_credit(narration: str) -> str:
    return "CREDIT" if _CREDIT_HINT.search(narration) else "DEBIT"


def is_nonzero_amount(raw: str | None) -> bool:
    if not raw:
        return False
    try:
        return Decimal(raw.replace(",", "")) != 0
    except InvalidOperation:
        return False


__all__ = [
    "AMOUNT_TOKEN",
    "split_lines",
    "is_separator",
    "squash",
    "infer_debit_credit",
    "is_nonzero_amount",
]
