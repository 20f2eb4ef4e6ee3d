import pandas as pd
import pytest

from str_invoicer.loaders import load_classification_table, read_spreadsheet
from str_invoicer.models import Category
from str_invoicer.normalizer import ledger_row_from_row


def test_read_csv_fills_empty_cells(tmp_path):
    path = tmp_path / "gl.csv"
    pd.DataFrame(
        {
            "Date": ["2024-01-05", "2024-01-06"],
            "Account": ["Cleaning", None],
            "Debit": [120.0, None],
        }
    ).to_csv(path, index=False)

    rows = read_spreadsheet(path)

    assert rows == [
        {"Date": "2024-01-05", "Account": "Cleaning", "Debit": 120.0},
        {"Date": "2024-01-06", "Account": "", "Debit": ""},
    ]


def test_read_excel_uses_first_sheet_only(tmp_path):
    path = tmp_path / "ota.xlsx"
    with pd.ExcelWriter(path) as writer:
        pd.DataFrame({"Reference": ["HM001"], "Net Payout": [500]}).to_excel(writer, sheet_name="Payouts", index=False)
        pd.DataFrame({"Other": ["ignored"]}).to_excel(writer, sheet_name="Notes", index=False)

    rows = read_spreadsheet(path)

    assert rows == [{"Reference": "HM001", "Net Payout": 500}]


def test_read_spreadsheet_accepts_dataframe():
    df = pd.DataFrame({"A": [1, None]})
    rows = read_spreadsheet(df)
    assert rows[1]["A"] == ""
    # caller's frame untouched
    assert df["A"].isna().sum() == 1


def test_read_spreadsheet_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_spreadsheet(tmp_path / "missing.csv")
    text = tmp_path / "notes.txt"
    text.write_text("hello")
    with pytest.raises(ValueError):
        read_spreadsheet(text)


def test_load_classification_table(tmp_path):
    path = tmp_path / "classification.csv"
    pd.DataFrame(
        {
            "Account Name": ["Cleaning", "Repairs", "Mystery"],
            "Default Category": ["reimbursable", "Shared", "whatever"],
        }
    ).to_csv(path, index=False)

    table, warnings = load_classification_table(path)

    assert table == {"Cleaning": Category.REIMBURSABLE, "Repairs": Category.SHARED}
    assert len(warnings) == 1 and "Mystery" in warnings[0]


def test_load_classification_table_requires_columns():
    with pytest.raises(ValueError):
        load_classification_table(pd.DataFrame({"Name": ["Cleaning"], "Type": ["SHARED"]}))


def test_numeric_account_codes_match_ledger_accounts(tmp_path):
    # a blank cell makes pandas read the code column as float (4000.0)
    path = tmp_path / "classification.csv"
    pd.DataFrame({"Account": [4000, None], "Category": ["REIMBURSABLE", "SHARED"]}).to_csv(path, index=False)

    table, warnings = load_classification_table(path)

    assert table == {"4000": Category.REIMBURSABLE}
    assert warnings == []
    row = ledger_row_from_row(
        {"Date": "2024-01-05", "Account": 4000, "Debit": "120"},
        {"date": "Date", "account_name": "Account", "debit_amount": "Debit"},
        table,
    )
    assert row.account_name == "4000"
    assert row.default_category is Category.REIMBURSABLE
