import pytest

from str_invoicer.mapping import (
    find_header,
    headers_from_rows,
    infer_mapping,
    missing_required_fields,
    validate_mapping,
)
from str_invoicer.models import FieldMapping


def test_infer_mapping_for_typical_exports(mapping):
    assert mapping.ota == {
        "reservation_id": "Reference",
        "check_in_date": "Start date",
        "check_out_date": "End date",
        "net_payout": "Net Payout",
        "payout_date": "Payout date",
        "guest_name": "Guest",
        "gross_amount": "Amount",
        "ota_fees": "Host Fee",
    }
    assert mapping.gl == {
        "date": "Date",
        "account_name": "Account",
        "description": "Description",
        "contact": "Contact",
        "debit_amount": "Debit",
        "credit_amount": "Credit",
        "source_type": "Source",
    }


def test_first_header_in_header_order_wins():
    # "Booking ID" comes first even though "reference" is the first keyword
    assert find_header(["Booking ID", "Reference"], ["reference", "booking", "id"]) == "Booking ID"
    assert find_header(["Guest Name", "Listing name"], ["guest", "name"]) == "Guest Name"


def test_unmatched_fields_map_to_empty_string():
    mapping = infer_mapping(["Foo", "Bar"], [])
    assert set(mapping.ota.values()) == {""}
    assert set(mapping.gl.values()) == {""}


def test_single_amount_column_maps_to_both_sides():
    mapping = infer_mapping([], ["Date", "Account", "Amount"])
    assert mapping.gl["debit_amount"] == "Amount"
    assert mapping.gl["credit_amount"] == "Amount"


def test_headers_from_rows_uses_first_row():
    assert headers_from_rows([]) == []
    assert headers_from_rows([{"A": 1, "B": 2}, {"C": 3}]) == ["A", "B"]


def test_missing_required_fields_and_validation(mapping):
    assert missing_required_fields(mapping) == {"ota": [], "gl": []}
    validate_mapping(mapping)

    partial = FieldMapping(ota={**mapping.ota, "payout_date": ""}, gl={"date": "Date"})
    missing = missing_required_fields(partial)
    assert missing["ota"] == ["payout_date"]
    assert "debit_amount" in missing["gl"] and "date" not in missing["gl"]

    with pytest.raises(ValueError, match="payout_date"):
        validate_mapping(partial)
