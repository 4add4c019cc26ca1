"""Parser for PhonePe transaction history PDFs.

Each transaction renders as a small block of lines::

    ACME GROCERIES                  <- vendor / recipient
    10 Feb 2026, 10:30 AM           <- date (time ignored)
    ₹349.50                         <- amount (row anchor)
    Paid                            <- type
    Status: Completed
    UPI transaction ID: 123456789012

The ``₹`` amount line anchors a row. The date is searched for in up to five
preceding lines and the vendor is the line right above the date. Type, status
and UPI id are searched for in up to four following lines.
"""

from __future__ import annotations

import re

from ..models import RawTransactionCandidate
from ._lines import is_nonzero_amount, is_separator, split_lines

_DATE = re.compile(r"(\d{1,2}\s+[A-Za-z]{3,}\s+\d{4})")
_AMOUNT = re.compile(r"₹\s*([\d,]+(?:\.\d{1,2})?)")
_STATUS = re.compile(r"(?:Status\s*[:\-]?\s*)?(Completed|Failed|Pending|Reversed)", re.IGNORECASE)
_TXN_ID = re.compile(r"UPI\s+transaction\s+ID\s*[:\-]?\s*([A-Za-z0-9]+)", re.IGNORECASE)
_TYPE = re.compile(r"^(Paid|Received|Refund|Sent|Transferred)", re.IGNORECASE)

_HEADER_PREFIXES = (
    "date transaction details",
    "transaction statement",
    "page ",
    "this is a system generated",
)

_LOOKBACK = 5
_LOOKAHEAD = 4


def _is_header(line: str) -> bool:
    lower = line.lower()
    return any(lower.startswith(p) for p in _HEADER_PREFIXES)


def parse(text: str) -> list[RawTransactionCandidate]:
    lines = [ln for ln in split_lines(text) if not _is_header(ln) and not is_separator(ln)]
    out: list[RawTransactionCandidate] = []

    for i, line in enumerate(lines):
        amount_match = _AMOUNT.search(line)
        if not amount_match:
            continue
        amount = amount_match.group(1)

        date = ""
        vendor = ""
        for back in range(i - 1, max(-1, i - 1 - _LOOKBACK), -1):
            date_match = _DATE.search(lines[back])
            if date_match:
                date = date_match.group(1)
                if back > 0:
                    vendor = lines[back - 1]
                break

        status = "Completed"
        txn_id: str | None = None
        tx_type = ""
        for fwd in range(i + 1, min(len(lines), i + 1 + _LOOKAHEAD)):
            nxt = lines[fwd]
            if m := _STATUS.search(nxt):
                status = m.group(1)
            if m := _TXN_ID.search(nxt):
                txn_id = m.group(1)
            if m := _TYPE.search(nxt):
                tx_type = m.group(1)

        if not (vendor and date and is_nonzero_amount(amount)):
            continue

        out.append(
            RawTransactionCandidate(
                date=date,
                amount=amount,
                vendor=vendor,
                source_transaction_id=txn_id,
                transaction_type=tx_type,
                status=status.lower(),
                raw_fields={
                    "date": date,
                    "amount": amount,
                    "vendor": vendor,
                    "status": status,
                    "transactionType": tx_type,
                },
            )
        )

    return out


__all__ = ["parse"]
