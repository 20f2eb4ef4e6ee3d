from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .classification import lookup_default_category
from .models import (
    CanonicalBooking,
    CanonicalLedgerRow,
    Category,
    FieldMapping,
    RawRow,
    ReportingPeriod,
)
from .parsers import parse_date, parse_number, to_text


def _cell(row: RawRow, header: Optional[str]) -> Any:
    if not header:
        return ""
    return row.get(header, "")


def is_single_column_gl(mapping: FieldMapping) -> bool:
    """Debit and credit both mapped to one signed "Amount" column."""
    debit_header = mapping.gl.get("debit_amount", "")
    return bool(debit_header) and debit_header == mapping.gl.get("credit_amount", "")


def fold_amounts(debit: float, credit: float, single_column: bool = False) -> Tuple[float, float]:
    """
    Normalize debit/credit signs so at most one side is positive.

    Single column: positive → credit, otherwise debit = abs(value).
    Two columns: a negative debit is a credit (reversal) and vice versa;
    rows with both sides positive are netted.
    """
    if single_column:
        if debit > 0:
            return 0.0, debit
        return abs(debit), 0.0

    if debit < 0:
        credit += abs(debit)
        debit = 0.0
    if credit < 0:
        debit += abs(credit)
        credit = 0.0
    if debit > 0 and credit > 0:
        net = credit - debit
        return (0.0, net) if net > 0 else (abs(net), 0.0)
    return debit, credit


def booking_from_row(row: RawRow, ota_mapping: Mapping[str, str]) -> CanonicalBooking:
    check_out = parse_date(_cell(row, ota_mapping.get("check_out_date")))
    return CanonicalBooking(
        reservation_id=to_text(_cell(row, ota_mapping.get("reservation_id"))),
        check_in_date=parse_date(_cell(row, ota_mapping.get("check_in_date"))) or "",
        check_out_date=check_out,
        guest_name=to_text(_cell(row, ota_mapping.get("guest_name"))),
        gross_amount=parse_number(_cell(row, ota_mapping.get("gross_amount"))),
        ota_fees=parse_number(_cell(row, ota_mapping.get("ota_fees"))),
        net_payout=parse_number(_cell(row, ota_mapping.get("net_payout"))),
        payout_date=parse_date(_cell(row, ota_mapping.get("payout_date"))) or "",
        original_data=row,
    )


def ledger_row_from_row(
    row: RawRow,
    gl_mapping: Mapping[str, str],
    classification_table: Optional[Mapping[str, Category]] = None,
    single_column: bool = False,
) -> CanonicalLedgerRow:
    account = to_text(_cell(row, gl_mapping.get("account_name"))).strip()
    debit, credit = fold_amounts(
        parse_number(_cell(row, gl_mapping.get("debit_amount"))),
        parse_number(_cell(row, gl_mapping.get("credit_amount"))),
        single_column=single_column,
    )
    return CanonicalLedgerRow(
        date=parse_date(_cell(row, gl_mapping.get("date"))) or "",
        account_name=account,
        source_type=to_text(_cell(row, gl_mapping.get("source_type"))),
        description=to_text(_cell(row, gl_mapping.get("description"))),
        contact=to_text(_cell(row, gl_mapping.get("contact"))),
        debit_amount=debit,
        credit_amount=credit,
        default_category=lookup_default_category(classification_table, account),
        original_data=row,
    )


def normalize_bookings(
    raw_rows: Sequence[RawRow],
    mapping: FieldMapping,
    period: ReportingPeriod,
) -> List[CanonicalBooking]:
    """
    Map OTA rows to canonical bookings, keeping those whose check-in
    (or payout date when check-in is missing) falls inside the period.
    Rows without any parseable date are dropped.
    """
    if raw_rows is None:
        raise ValueError("OTA rows are None")
    bookings = [booking_from_row(row, mapping.ota) for row in raw_rows]
    return [b for b in bookings if period.contains(b.reference_date)]


def normalize_ledger(
    raw_rows: Sequence[RawRow],
    mapping: FieldMapping,
    period: ReportingPeriod,
    classification_table: Optional[Mapping[str, Category]] = None,
) -> List[CanonicalLedgerRow]:
    if raw_rows is None:
        raise ValueError("GL rows are None")
    single_column = is_single_column_gl(mapping)
    rows = [
        ledger_row_from_row(row, mapping.gl, classification_table, single_column=single_column)
        for row in raw_rows
    ]
    return [r for r in rows if period.contains(r.date)]


def normalize(
    raw_ota_rows: Sequence[RawRow],
    raw_gl_rows: Sequence[RawRow],
    mapping: FieldMapping,
    period: ReportingPeriod,
    classification_table: Optional[Dict[str, Category]] = None,
) -> Tuple[List[CanonicalBooking], List[CanonicalLedgerRow]]:
    bookings = normalize_bookings(raw_ota_rows, mapping, period)
    ledger_rows = normalize_ledger(raw_gl_rows, mapping, period, classification_table)
    return bookings, ledger_rows
