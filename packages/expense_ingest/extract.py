"""Text extraction from uploaded statement documents.

The import orchestrator only depends on the ``TextExtractor`` protocol: a
callable taking the raw bytes and an optional password and returning the
document's lines in reading order, pages concatenated. Failures surface as
``WrongPasswordError`` or ``CorruptDocumentError``.

``PdfPlumberExtractor`` is the default implementation.
"""

from __future__ import annotations

import io
from typing import Protocol

import pdfplumber
from pdfminer.pdfdocument import PDFPasswordIncorrect
from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from .errors import CorruptDocumentError, WrongPasswordError
from .logging_setup import get_logger

_log = get_logger("expense_ingest.extract")


class TextExtractor(Protocol):
    def __call__(self, data: bytes, password: str | None = None) -> list[str]: ...


class PdfPlumberExtractor:
    """Extract text lines from a (possibly encrypted) PDF with pdfplumber."""

    def __init__(self, *, x_tolerance: float = 2, y_tolerance: float = 3) -> None:
        self.x_tolerance = x_tolerance
        self.y_tolerance = y_tolerance

    def __call__(self, data: bytes, password: str | None = None) -> list[str]:
        try:
            with pdfplumber.open(io.BytesIO(data), password=password or "") as pdf:
                lines: list[str] = []
                for page_num, page in enumerate(pdf.pages, start=1):
                    text = (
                        page.extract_text(x_tolerance=self.x_tolerance, y_tolerance=self.y_tolerance)
                        or ""
                    )
                    _log.debug("Extracted %d chars from page %d", len(text), page_num)
                    lines.extend(text.splitlines())
                return lines
        except PdfminerException as exc:
            # pdfplumber wraps the underlying pdfminer error as the first arg.
            cause = exc.args[0] if exc.args else exc
            raise _translate(cause) from exc
        except (PDFPasswordIncorrect, PDFSyntaxError) as exc:
            raise _translate(exc) from exc


def _translate(exc: BaseException) -> Exception:
    if isinstance(exc, PDFPasswordIncorrect):
        _log.warning("PDF password missing or incorrect")
        return WrongPasswordError("The PDF is password protected and the password is missing or incorrect.")
    _log.warning("Could not read PDF: %s", exc)
    return CorruptDocumentError(f"The file is corrupt or not a supported PDF: {exc}")


def extract_lines(data: bytes, password: str | None = None) -> list[str]:
    """Module-level convenience wrapper around ``PdfPlumberExtractor``."""

    return PdfPlumberExtractor()(data, password)


__all__ = ["TextExtractor", "PdfPlumberExtractor", "extract_lines"]
