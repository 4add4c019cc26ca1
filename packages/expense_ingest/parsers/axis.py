"""Parser for Axis Bank account statement PDFs.

Table layout (one row per line once extracted)::

    Tran Date   Chq./Ref.No.  Transaction Remarks        Withdrawal  Deposit  Balance
    01-01-2026  12345         NEFT ACME VENDORS PVT LTD  1,000.00             49,000.00

Rows are anchored by a leading ``DD-MM-YYYY`` or ``DD/MM/YYYY`` date. The
first amount token is the transaction amount; the narration is what remains
after removing the date, every amount token and 6+ digit reference numbers.
"""

from __future__ import annotations

import re

from ..models import RawTransactionCandidate
from ._lines import (
    AMOUNT_TOKEN,
    infer_debit_credit,
    is_nonzero_amount,
    is_separator,
    split_lines,
    squash,
)

_DATE = re.compile(r"^(\d{2}[-/]\d{2}[-/]\d{4})")
_REFERENCE = re.compile(r"\d{6,}")

# Column titles that also occur in real narrations ("CASH DEPOSIT").
_NARRATION_KEYWORDS = ("withdrawal", "deposit")

# Never part of a transaction; dated OPENING/CLOSING BALANCE rows included.
_STRUCTURAL_KEYWORDS = (
    "tran date",
    "balance",
    "chq",
    "ref.no",
    "particulars",
)


def _is_header(line: str) -> bool:
    lower = line.lower()
    if any(kw in lower for kw in _STRUCTURAL_KEYWORDS):
        return True
    if _DATE.match(line):
        return False
    return any(kw in lower for kw in _NARRATION_KEYWORDS)


def parse(text: str) -> list[RawTransactionCandidate]:
    out: list[RawTransactionCandidate] = []

    for line in split_lines(text):
        if is_separator(line) or _is_header(line):
            continue
        date_match = _DATE.match(line)
        if not date_match:
            continue
        date = date_match.group(1)

        amounts = AMOUNT_TOKEN.findall(line)
        amount = amounts[0] if amounts else "0"

        narration = _DATE.sub("", line, count=1)
        narration = AMOUNT_TOKEN.sub("", narration)
        narration = squash(_REFERENCE.sub("", narration))
        vendor = narration or "UNKNOWN"

        if not is_nonzero_amount(amount):
            continue

        out.append(
            RawTransactionCandidate(
                date=date,
                amount=amount,
                vendor=vendor,
                transaction_type=infer_debit_credit(narration),
                status="completed",
                raw_fields={"date": date, "amount": amount, "vendor": vendor, "line": line},
            )
        )

    return out


__all__ = ["parse"]
