"""Parser for HDFC Bank account statement PDFs.

Table layout::

    Date      Narration                          Chq./Ref.No.      Value Dt  Withdrawal Amt.  Deposit Amt.  Closing Balance
    01/01/26  UPI/ACME STORE/412345678901/Paymt  0000412345678901  01/01/26  500.00                         10,000.00

Rows start with ``DD/MM/YY`` or ``DD/MM/YYYY``; two-digit years up to 50 are
read as 20xx, the rest as 19xx. The narration is the text between the date and
the first amount. ``UPI/<vendor>/<UTR>/<remarks>`` narrations give a cleaner
vendor and use the UTR as the source transaction id.
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

_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4}|\d{2})\b")
_VALUE_DATE = re.compile(r"\b\d{2}/\d{2}/\d{2,4}\b")
_REFERENCE = re.compile(r"\d{6,}")
_UPI_NARRATION = re.compile(r"UPI[/\-]([^/]+)/([^/\s]+)/?(.*)", re.IGNORECASE)

_HEADER_PREFIXES = (
    "date",
    "narration",
    "chq",
    "withdrawal",
    "deposit",
    "closing",
    "balance",
    "value date",
)


def _expand_year(year: str) -> str:
    if len(year) == 4:
        return year
    return f"20{year}" if int(year) <= 50 else f"19{year}"


def _is_header(line: str) -> bool:
    lower = line.lower()
    return any(lower.startswith(p) for p in _HEADER_PREFIXES)


def parse(text: str) -> list[RawTransactionCandidate]:
    out: list[RawTransactionCandidate] = []

    for line in split_lines(text):
        if _is_header(line) or is_separator(line):
            continue
        date_match = _DATE.match(line)
        if not date_match:
            continue
        day, month, year = date_match.groups()
        date = f"{day}/{month}/{_expand_year(year)}"

        amount_match = AMOUNT_TOKEN.search(line, date_match.end())
        if not amount_match or not is_nonzero_amount(amount_match.group(0)):
            continue
        amount = amount_match.group(0)

        segment = _VALUE_DATE.sub("", line[date_match.end() : amount_match.start()])
        narration = squash(_REFERENCE.sub("", segment))

        vendor = narration
        txn_id: str | None = None
        # Matched before reference stripping so the UTR survives.
        upi = _UPI_NARRATION.search(segment)
        if upi:
            vendor = upi.group(1).strip() or narration
            txn_id = upi.group(2).strip() or None

        if not vendor:
            continue

        out.append(
            RawTransactionCandidate(
                date=date,
                amount=amount,
                vendor=vendor,
                source_transaction_id=txn_id,
                transaction_type=infer_debit_credit(narration),
                status="completed",
                raw_fields={"date": date, "amount": amount, "vendor": narration, "line": line},
            )
        )

    return out


__all__ = ["parse"]
