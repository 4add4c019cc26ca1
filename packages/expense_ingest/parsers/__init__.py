"""Statement parsers, one pure function per supported source.

``get_parser(source)`` maps the closed set of source ids to
``parse(text) -> list[RawTransactionCandidate]``. Parsers never raise on
empty or unrecognized text; they return ``[]``.
"""

from __future__ import annotations

from collections.abc import Callable

from ..errors import UnknownSourceError
from ..models import SOURCES, RawTransactionCandidate
from . import axis, hdfc, payzapp, phonepe

type Parser = Callable[[str], list[RawTransactionCandidate]]

_PARSERS: dict[str, Parser] = {
    "phonepe": phonepe.parse,
    "axis": axis.parse,
    "hdfc": hdfc.parse,
    "payzap": payzapp.parse,
}

# Every declared source must have a parser wired in.
assert set(_PARSERS) == set(SOURCES), "parser registry out of sync with SOURCES"


def get_parser(source: str) -> Parser:
    """Return the parser for ``source``.

    Raises ``UnknownSourceError`` for anything outside the supported set; that
    indicates a source was wired into a caller without a parser and is not a
    recoverable condition.
    """

    try:
        return _PARSERS[source]
    except KeyError:
        raise UnknownSourceError(
            f"Unsupported report source: {source!r}. Allowed: {sorted(_PARSERS)}"
        ) from None


__all__ = ["Parser", "get_parser"]
