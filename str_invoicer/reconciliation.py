from datetime import date
from typing import Iterable, List, Optional

from .models import CanonicalBooking, CanonicalLedgerRow

DATE_WINDOW_DAYS = 3
AMOUNT_TOLERANCE = 2.0
AMOUNT_EPSILON = 1e-9
PAYOUT_KEYWORDS = ("booking", "payout")


def reconciliation_note(booking: CanonicalBooking) -> str:
    return f"Reconciled to OTA Booking {booking.reservation_id}"


def _within_window(row_date: str, reference: date, window_days: int) -> bool:
    if not row_date:
        return False
    return abs((date.fromisoformat(row_date) - reference).days) <= window_days


def _amount_matches(credit: float, net_payout: float, tolerance: float) -> bool:
    # epsilon keeps exactly 2.00 apart inside the tolerance despite float noise
    return abs(credit - net_payout) <= tolerance + AMOUNT_EPSILON


def _text_matches(row: CanonicalLedgerRow, booking: CanonicalBooking) -> bool:
    text = f"{row.description} {row.contact}".lower()
    if any(k in text for k in PAYOUT_KEYWORDS):
        return True
    guest = booking.guest_name.lower()
    ref = booking.reservation_id.lower()
    return bool(guest and guest in text) or bool(ref and ref in text)


def find_payout_match(
    booking: CanonicalBooking,
    income_rows: Iterable[CanonicalLedgerRow],
    window_days: int = DATE_WINDOW_DAYS,
    amount_tolerance: float = AMOUNT_TOLERANCE,
) -> Optional[CanonicalLedgerRow]:
    """First unreconciled income row (in ledger order) that looks like this booking's payout."""
    reference = booking.payout_reference_date
    if not reference:
        return None
    ref_date = date.fromisoformat(reference)

    for row in income_rows:
        if row.is_reconciled_ota:
            continue
        if not _within_window(row.date, ref_date, window_days):
            continue
        if not _amount_matches(row.credit_amount, booking.net_payout, amount_tolerance):
            continue
        if _text_matches(row, booking):
            return row
    return None


def claim(row: CanonicalLedgerRow, booking: CanonicalBooking) -> None:
    """Mark a ledger row as the deposit of ``booking``; flag and note are written together."""
    if row.is_reconciled_ota:
        raise ValueError(f"Ledger row {row.id} is already reconciled")
    row.note = reconciliation_note(booking)
    row.is_reconciled_ota = True


def reconcile(
    bookings: Iterable[CanonicalBooking],
    income_rows: List[CanonicalLedgerRow],
    window_days: int = DATE_WINDOW_DAYS,
    amount_tolerance: float = AMOUNT_TOLERANCE,
) -> int:
    """
    Match each booking's net payout to at most one GL income row.

    Bookings are processed in input order; the first qualifying income row
    is claimed in place (is_reconciled_ota + note) and can't be matched again.
    Returns the number of matched bookings.
    """
    if bookings is None or income_rows is None:
        raise ValueError("Bookings and income rows are required")

    matched = 0
    for booking in bookings:
        row = find_payout_match(booking, income_rows, window_days, amount_tolerance)
        if row is None:
            continue
        claim(row, booking)
        matched += 1
    return matched
