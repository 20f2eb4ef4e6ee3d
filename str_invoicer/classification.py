from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .models import CanonicalLedgerRow, Category
from .parsers import to_text

# Categories that put an expense on the owner's invoice
INCLUDED_CATEGORIES = {Category.REIMBURSABLE, Category.SHARED}
DEFAULT_SHARED_SPLIT = 50.0


def to_category(value: Union[str, Category]) -> Category:
    """Coerce a table/session/review value to Category; unknown values raise ValueError."""
    if isinstance(value, Category):
        return value
    text = str(value).strip().upper()
    try:
        return Category(text)
    except ValueError:
        raise ValueError(f"Unknown category: {value!r}") from None


def build_classification_table(entries: Mapping[Any, Any]) -> Tuple[Dict[str, Category], List[str]]:
    """
    Validate a raw account → category mapping.
    Blank accounts and unknown categories are skipped and reported as warnings.
    """
    table: Dict[str, Category] = {}
    warnings: List[str] = []
    for raw_account, raw_category in entries.items():
        account = to_text(raw_account).strip()
        category_text = to_text(raw_category).strip().upper()
        if not account or not category_text:
            continue
        try:
            table[account] = to_category(category_text)
        except ValueError:
            warnings.append(f"Ignoring account {account!r}: unknown category {category_text!r}")
    return table, warnings


def lookup_default_category(
    table: Optional[Mapping[str, Category]], account_name: str
) -> Optional[Category]:
    if not table or not account_name:
        return None
    key = account_name.lower()
    for account, category in table.items():
        if account.lower() == key:
            return category
    return None


def assign_category(
    row: CanonicalLedgerRow,
    category: Union[str, Category],
    split_percent: Optional[float] = None,
) -> CanonicalLedgerRow:
    """
    Set a row's category and derive include_flag/split_percent from it.
    Used both by automatic classification and by manual review.
    """
    category = to_category(category)
    if split_percent is not None:
        if not 0 <= split_percent <= 100:
            raise ValueError("split_percent must be within [0, 100]")
        row.split_percent = float(split_percent)

    row.assigned_category = category
    row.include_flag = category in INCLUDED_CATEGORIES
    if category == Category.SHARED and row.split_percent is None:
        row.split_percent = DEFAULT_SHARED_SPLIT
    return row


def classify(
    ledger_rows: Iterable[CanonicalLedgerRow],
) -> Tuple[List[CanonicalLedgerRow], List[CanonicalLedgerRow]]:
    """
    Partition expense rows (debit > 0) into (auto_approved, needs_review).

    Only REIMBURSABLE defaults are trusted; every other expense, including
    MANAGER_ONLY/OWNER_ONLY defaults, is surfaced for review with
    include_flag off.
    """
    if ledger_rows is None:
        raise ValueError("Ledger rows are None")

    auto_approved: List[CanonicalLedgerRow] = []
    needs_review: List[CanonicalLedgerRow] = []
    for row in ledger_rows:
        if row.debit_amount <= 0:
            continue
        if row.default_category == Category.REIMBURSABLE:
            assign_category(row, Category.REIMBURSABLE)
            auto_approved.append(row)
        else:
            row.assigned_category = row.default_category or Category.REVIEW_ALWAYS
            row.include_flag = False
            needs_review.append(row)
    return auto_approved, needs_review
