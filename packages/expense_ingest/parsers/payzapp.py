"""Parser for HDFC PayZapp transaction statements.

Rows carry a ``DD MMM YYYY`` / ``DD-MMM-YYYY`` date, a description, an amount
prefixed by ``INR`` or ``₹`` (sometimes wrapped onto the following line) and a
``Dr``/``Cr`` marker::

    05 Mar 2026  SWIGGY BANGALORE 88812345678  INR 450.00  Dr
"""

from __future__ import annotations

import re

from ..models import RawTransactionCandidate
from ._lines import is_nonzero_amount, is_separator, split_lines, squash

_DATE = re.compile(r"(\d{1,2}[\s\-][A-Za-z]{3,}[\s\-]\d{4})")
_AMOUNT = re.compile(r"(?:INR|₹)\s*([\d,]+(?:\.\d{1,2})?)", re.IGNORECASE)
_DR_CR = re.compile(r"\b(Dr|Cr)\b", re.IGNORECASE)
_REFERENCE = re.compile(r"\d{8,}")

_HEADER_PREFIXES = ("date", "description", "amount", "transaction", "type", "balance")


def _is_header(line: str) -> bool:
    lower = line.lower()
    return any(lower.startswith(p) for p in _HEADER_PREFIXES)


def parse(text: str) -> list[RawTransactionCandidate]:
    lines = split_lines(text)
    out: list[RawTransactionCandidate] = []

    for i, line in enumerate(lines):
        if _is_header(line) or is_separator(line):
            continue
        date_match = _DATE.search(line)
        if not date_match:
            continue
        date = date_match.group(1)

        amount_match = _AMOUNT.search(line)
        if not amount_match and i + 1 < len(lines):
            amount_match = _AMOUNT.search(lines[i + 1])
        amount = amount_match.group(1) if amount_match else "0"
        if not is_nonzero_amount(amount):
            continue

        marker = _DR_CR.search(line)
        tx_type = "CREDIT" if marker and marker.group(1).upper() == "CR" else "DEBIT"

        vendor = _DATE.sub("", line, count=1)
        vendor = _AMOUNT.sub("", vendor)
        vendor = _DR_CR.sub("", vendor)
        vendor = squash(_REFERENCE.sub("", vendor)) or "UNKNOWN"

        out.append(
            RawTransactionCandidate(
                date=date,
                amount=amount,
                vendor=vendor,
                transaction_type=tx_type,
                status="completed",
                raw_fields={"date": date, "amount": amount, "vendor": vendor},
            )
        )

    return out


__all__ = ["parse"]
