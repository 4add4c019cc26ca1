import pytest

from expense_ingest.errors import UnknownSourceError
from expense_ingest.models import SOURCES
from expense_ingest.parsers import axis, get_parser, hdfc, payzapp, phonepe
from tests.helpers.samples import (
    AXIS_SAMPLE_TEXT,
    HDFC_SAMPLE_TEXT,
    PAYZAPP_SAMPLE_TEXT,
    PHONEPE_SAMPLE_TEXT,
)


# ---- PhonePe -----------------------------------------------------------------


def test_phonepe_extracts_blocks():
    rows = phonepe.parse(PHONEPE_SAMPLE_TEXT)
    assert len(rows) == 2

    first = rows[0]
    assert first.amount == "349.50"
    assert first.vendor == "ACME GROCERIES"
    assert first.date == "10 Feb 2026"
    assert first.source_transaction_id == "123456789012"
    assert first.transaction_type == "Paid"
    assert first.status == "completed"
    assert first.raw_fields["vendor"] == "ACME GROCERIES"

    assert rows[1].vendor == "NETFLIX INDIA"
    assert rows[1].source_transaction_id == "987654321098"


def test_phonepe_requires_a_date_before_the_amount():
    text = "SOME HEADING\n₹50.00\nPaid"
    assert phonepe.parse(text) == []


def test_phonepe_status_is_read_and_lowercased():
    text = "CAB RIDE\n3 Jan 2026, 09:00 AM\n₹120.00\nPaid\nStatus: Failed"
    (row,) = phonepe.parse(text)
    assert row.status == "failed"
    assert row.source_transaction_id is None


# ---- Axis --------------------------------------------------------------------


def test_axis_row_with_reference_and_balance():
    rows = axis.parse(AXIS_SAMPLE_TEXT)
    assert len(rows) == 4

    first = rows[0]
    assert first.date == "01-01-2026"
    assert first.amount == "1000.00"
    assert "NEFT ACME VENDORS PVT LTD" in first.vendor
    assert first.transaction_type == "DEBIT"


def test_axis_skips_headers_but_keeps_deposit_narrations():
    rows = axis.parse(AXIS_SAMPLE_TEXT)
    assert not any("tran date" in r.vendor.lower() for r in rows)

    salary = rows[1]
    assert salary.transaction_type == "CREDIT"

    cash = rows[3]
    assert cash.vendor == "CASH DEPOSIT BRANCH"
    assert cash.amount == "5,000.00"
    assert cash.transaction_type == "CREDIT"


def test_axis_strips_long_reference_numbers():
    (row,) = axis.parse("02/02/2026 IMPS 123456789 FOODMART 250.00 1000.00")
    assert row.vendor == "IMPS FOODMART"
    assert row.date == "02/02/2026"


def test_axis_skips_dated_opening_and_closing_balance_rows():
    text = "01-01-2026 OPENING BALANCE 50,000.00\n31-01-2026 CLOSING BALANCE 48,000.00"
    assert axis.parse(text) == []


# ---- HDFC --------------------------------------------------------------------


def test_hdfc_upi_narration_gives_vendor_and_utr():
    rows = hdfc.parse(HDFC_SAMPLE_TEXT)
    assert len(rows) == 2

    upi = rows[0]
    assert upi.date == "01/01/2026"
    assert upi.amount == "500.00"
    assert upi.vendor == "ACME STORE"
    assert upi.source_transaction_id == "412345678901"
    assert upi.transaction_type == "DEBIT"


def test_hdfc_upi_narration_without_remarks_keeps_utr_only():
    (row,) = hdfc.parse(
        "01/01/26  UPI/ACME STORE/412345678901  0000412345678901  01/01/26  500.00  10,000.00"
    )
    assert row.vendor == "ACME STORE"
    assert row.source_transaction_id == "412345678901"
    assert row.amount == "500.00"


def test_hdfc_plain_narration_and_four_digit_year():
    row = hdfc.parse(HDFC_SAMPLE_TEXT)[1]
    assert row.date == "05/01/2026"
    assert row.amount == "50,000.00"
    assert row.vendor == "NEFT CR-SALARY ACME CORP"
    assert row.source_transaction_id is None
    assert row.transaction_type == "CREDIT"


def test_hdfc_two_digit_year_pivot():
    (row,) = hdfc.parse("31/12/99  OLD CHEQUE  100.00  900.00")
    assert row.date == "31/12/1999"


# ---- PayZapp -----------------------------------------------------------------


def test_payzapp_rows():
    rows = payzapp.parse(PAYZAPP_SAMPLE_TEXT)
    assert len(rows) == 2

    swiggy, topup = rows
    assert swiggy.date == "05 Mar 2026"
    assert swiggy.amount == "450.00"
    assert swiggy.vendor == "SWIGGY BANGALORE"
    assert swiggy.transaction_type == "DEBIT"

    # Amount wrapped onto the following line.
    assert topup.date == "07-Mar-2026"
    assert topup.amount == "1,000.00"
    assert topup.vendor == "Wallet Top-up"
    assert topup.transaction_type == "CREDIT"


def test_payzapp_unknown_vendor():
    (row,) = payzapp.parse("09 Mar 2026 INR 99.00 Dr")
    assert row.vendor == "UNKNOWN"


# ---- Shared behavior ---------------------------------------------------------


@pytest.mark.parametrize("source", SOURCES)
def test_every_parser_returns_empty_for_empty_input(source):
    parse = get_parser(source)
    assert parse("") == []
    assert parse("   \n\n  ") == []
    assert parse("nothing that looks like a statement") == []


def test_get_parser_maps_sources_to_modules():
    assert get_parser("phonepe") is phonepe.parse
    assert get_parser("axis") is axis.parse
    assert get_parser("hdfc") is hdfc.parse
    assert get_parser("payzap") is payzapp.parse


def test_get_parser_rejects_unknown_source():
    with pytest.raises(UnknownSourceError):
        get_parser("sbi")
    with pytest.raises(LookupError):
        get_parser("")
