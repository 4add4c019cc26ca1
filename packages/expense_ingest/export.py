"""Presentation helpers over loaded expenses: sorting, totals and CSV."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any

from .models import CanonicalExpense

UNCATEGORIZED = "Uncategorized"

CSV_HEADER: tuple[str, ...] = (
    "Date",
    "Vendor",
    "Amount",
    "Currency",
    "Category",
    "Source",
    "Status",
    "Transaction ID",
)

# raw_text is a mapping and has no ordering.
_SORTABLE = frozenset(f.name for f in fields(CanonicalExpense)) - {"raw_text"}


def sort_expenses(
    rows: Iterable[CanonicalExpense],
    field_name: str = "date",
    *,
    ascending: bool = False,
) -> list[CanonicalExpense]:
    """Sort by any ``CanonicalExpense`` attribute; missing values sort as ``""``.

    The sort is stable, so rows with equal keys keep their query order.
    """

    if field_name not in _SORTABLE:
        raise ValueError(f"Cannot sort by {field_name!r}. Allowed: {sorted(_SORTABLE)}")

    def key(e: CanonicalExpense) -> tuple[int, Any]:
        value = getattr(e, field_name)
        # Keep None comparable with strings and numbers alike.
        return (0, "") if value is None else (1, value)

    return sorted(rows, key=key, reverse=not ascending)


@dataclass(frozen=True, slots=True)
class ExpenseSummary:
    total_amount: Decimal
    count: int
    by_category: dict[str, Decimal] = field(default_factory=dict)
    by_source: dict[str, Decimal] = field(default_factory=dict)


def summarize(rows: Iterable[CanonicalExpense]) -> ExpenseSummary:
    total = Decimal("0.00")
    count = 0
    by_category: dict[str, Decimal] = {}
    by_source: dict[str, Decimal] = {}
    for e in rows:
        total += e.amount
        count += 1
        cat = e.category or UNCATEGORIZED
        by_category[cat] = by_category.get(cat, Decimal("0.00")) + e.amount
        by_source[e.source] = by_source.get(e.source, Decimal("0.00")) + e.amount
    return ExpenseSummary(
        total_amount=total.quantize(Decimal("0.01")),
        count=count,
        by_category=by_category,
        by_source=by_source,
    )


def to_csv(rows: Sequence[CanonicalExpense]) -> str:
    """Flatten expenses into CSV text (header row first, ``\\n`` line endings)."""

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for e in rows:
        writer.writerow(
            [
                e.date,
                e.vendor,
                f"{e.amount:.2f}",
                e.currency,
                e.category or "",
                e.source,
                e.status,
                e.source_transaction_id or "",
            ]
        )
    return buf.getvalue()


__all__ = [
    "UNCATEGORIZED",
    "CSV_HEADER",
    "ExpenseSummary",
    "sort_expenses",
    "summarize",
    "to_csv",
]
