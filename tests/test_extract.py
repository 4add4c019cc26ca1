import pytest
from pdfminer.pdfdocument import PDFPasswordIncorrect
from pdfplumber.utils.exceptions import PdfminerException

import expense_ingest.extract as extract_mod
from expense_ingest.errors import CorruptDocumentError, ExtractionError, WrongPasswordError
from expense_ingest.extract import PdfPlumberExtractor, extract_lines


def _one_page_pdf(*lines: str) -> bytes:
    """Smallest PDF that pdfminer reads without falling back: one page, Helvetica text."""

    ops = [b"BT /F1 12 Tf 72 720 Td"]
    for i, line in enumerate(lines):
        if i:
            ops.append(b"0 -20 Td")
        ops.append(b"(" + line.encode("latin-1") + b") Tj")
    ops.append(b"ET")
    content = b" ".join(ops)

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R "
        b"/Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % num + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for off in offsets:
        out += b"%010d 00000 n \n" % off
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_at,
    )
    return bytes(out)


def test_text_pdf_yields_lines_in_reading_order():
    data = _one_page_pdf("01/01/26 ACME STORE 500.00", "05/01/26 SALARY 50,000.00")
    assert extract_lines(data) == ["01/01/26 ACME STORE 500.00", "05/01/26 SALARY 50,000.00"]


def test_non_pdf_bytes_are_reported_as_corrupt():
    with pytest.raises(CorruptDocumentError) as info:
        PdfPlumberExtractor()(b"this is not a pdf at all", None)
    assert isinstance(info.value, ExtractionError)


@pytest.mark.parametrize("password", [None, "wrong"])
def test_encrypted_pdf_with_missing_or_wrong_password(monkeypatch, password):
    seen: list[str] = []

    def locked_open(stream, password=""):
        seen.append(password)
        raise PdfminerException(PDFPasswordIncorrect())

    monkeypatch.setattr(extract_mod.pdfplumber, "open", locked_open)

    with pytest.raises(WrongPasswordError) as info:
        PdfPlumberExtractor()(b"%PDF-1.7 encrypted", password)
    assert isinstance(info.value, ExtractionError)
    assert seen == [password or ""]
