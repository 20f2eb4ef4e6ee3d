"""Sample OTA and GL sheets for a January 2024 owner statement.

Rows are shaped like ``read_spreadsheet`` output: header → cell, with empty
cells as "". Expected outcomes for the default period:

- HM001 and HM002 reconcile to GL income rows, HM003 is outside the period
  (check-in in December), HM004 has no matching deposit.
- Cleaning is auto-reimbursable, Repairs/Office/Management go to review, the
  negative Cleaning debit is folded into income, February rows are dropped.
"""

import pytest

from str_invoicer.mapping import infer_mapping_from_rows
from str_invoicer.models import Category, ProcessingConfig


def _ota(ref, guest, start, end, amount, fee, net, payout):
    return {
        "Reference": ref,
        "Guest": guest,
        "Start date": start,
        "End date": end,
        "Nights": 3,
        "Amount": amount,
        "Host Fee": fee,
        "Net Payout": net,
        "Payout date": payout,
    }


def _gl(date, account, source, description, contact, debit, credit):
    return {
        "Date": date,
        "Account": account,
        "Source": source,
        "Description": description,
        "Contact": contact,
        "Debit": debit,
        "Credit": credit,
    }


@pytest.fixture
def ota_rows():
    return [
        _ota("HM001", "Alice Smith", "2024-01-15", "2024-01-18", "$590.00", "(90.00)", "500.00", "2024-01-18"),
        _ota("HM002", "Bob Jones", "01/20/2024", "01/25/2024", 400, "60", "340", "01/22/2024"),
        _ota("HM003", "Carol White", "2023-12-30", "2024-01-02", 250, 35, 215, "2024-01-02"),
        _ota("HM004", "Dan Brown", "2024-01-28", "2024-01-31", 300, 45, 255, ""),
    ]


@pytest.fixture
def gl_rows():
    return [
        _gl("2024-01-18", "Airbnb Income", "Bank", "Airbnb booking payout", "Airbnb", "", "500.00"),
        _gl("2024-01-23", "Airbnb Income", "Bank", "Deposit", "Bob Jones", "", "341.50"),
        _gl("2024-01-05", "Cleaning", "Bill", "Turnover clean", "Sparkle Co", "120.00", ""),
        _gl("2024-01-10", "Repairs", "Bill", "Fix sink", "Plumber Joe", "80", ""),
        _gl("2024-01-12", "Office", "Bill", "Printer paper", "Staples", "25", ""),
        _gl("2024-01-14", "Cleaning", "Bill", "Refund from cleaner", "Sparkle Co", "-20", ""),
        _gl("2024-02-02", "Cleaning", "Bill", "Turnover clean", "Sparkle Co", "50", ""),
        _gl("2024-01-31", "Management", "Bill", "Software", "PMS", "40", ""),
    ]


@pytest.fixture
def classification_table():
    return {
        "cleaning": Category.REIMBURSABLE,
        "Repairs": Category.SHARED,
        "management": Category.MANAGER_ONLY,
    }


@pytest.fixture
def config():
    return ProcessingConfig(
        period_start="2024-01-01",
        period_end="2024-01-31",
        owner_name="Jane Owner",
        mgmt_fee_percent=20,
        fee_base_mode="gross_revenue",
    )


@pytest.fixture
def mapping(ota_rows, gl_rows):
    return infer_mapping_from_rows(ota_rows, gl_rows)
