# ruff: noqa: E501
"""Statement text fixtures, shaped like pdfplumber output for each source."""

import textwrap


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


PHONEPE_SAMPLE_TEXT = _dedent(
    """
    PhonePe Transaction History

    ACME GROCERIES
    10 Feb 2026, 10:30 AM
    ₹349.50
    Paid
    Status: Completed
    UPI transaction ID: 123456789012

    NETFLIX INDIA
    15 Feb 2026, 08:00 PM
    ₹199.00
    Paid
    Status: Completed
    UPI transaction ID: 987654321098
    """
)

AXIS_SAMPLE_TEXT = _dedent(
    """
    Account Statement - Axis Bank

    Tran Date  Chq./Ref.No.  Transaction Remarks          Withdrawal  Deposit  Balance
    01-01-2026 12345          NEFT ACME VENDORS PVT LTD    1000.00              49000.00
    15-01-2026 67890          UPI/SALARY COMPANY           25000.00             74000.00
    20-01-2026 11223          IMPS AMAZON SHOPPING         2499.00              71501.00
    22-01-2026 CASH DEPOSIT BRANCH 5,000.00 76,501.00
    """
)

HDFC_SAMPLE_TEXT = _dedent(
    """
    HDFC BANK Ltd.  Statement of account
    Date      Narration                          Chq./Ref.No.      Value Dt  Withdrawal Amt.  Deposit Amt.  Closing Balance
    01/01/26  UPI/ACME STORE/412345678901/Paymt  0000412345678901  01/01/26  500.00                         10,000.00
    05/01/2026  NEFT CR-SALARY ACME CORP  0000123456789  05/01/2026  50,000.00  60,000.00
    --------------------------------------------------------------------------------
    """
)

PAYZAPP_SAMPLE_TEXT = _dedent(
    """
    PayZapp Transaction Statement
    Date Description Amount Type
    05 Mar 2026  SWIGGY BANGALORE 88812345678  INR 450.00  Dr
    07-Mar-2026 Wallet Top-up Cr
    ₹1,000.00
    08 Mar 2026 Reversal INR 0.00 Cr
    """
)
