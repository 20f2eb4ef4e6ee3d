from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .classification import assign_category, classify, to_category
from .mapping import validate_mapping
from .models import (
    CanonicalBooking,
    Category,
    FieldMapping,
    ProcessingConfig,
    ProcessingResult,
    ProcessingStats,
    RawRow,
)
from .normalizer import is_single_column_gl, normalize
from .reconciliation import reconcile

REVIEW_FIELDS = {"assigned_category", "split_percent", "note"}


def _log(debug: bool, logs: List[str], msg: str) -> None:
    """Collect debug logs and optionally print for local debugging."""
    logs.append(msg)
    if debug:
        print(f"[pipeline] {msg}")


def compute_stats(bookings: Sequence[CanonicalBooking], reconciled_count: int) -> ProcessingStats:
    return ProcessingStats(
        total_ota_revenue=sum(b.gross_amount for b in bookings),
        total_ota_net=sum(b.net_payout for b in bookings),
        reconciled_count=reconciled_count,
        unreconciled_count=len(bookings) - reconciled_count,
    )


def process_data(
    ota_rows: Sequence[RawRow],
    gl_rows: Sequence[RawRow],
    mapping: FieldMapping,
    config: ProcessingConfig,
    classification_table: Optional[Dict[str, Category]] = None,
    debug: bool = False,
) -> ProcessingResult:
    """
    Unified entrypoint: normalize → split income/expenses → reconcile → classify → stats.

    Income rows are annotated in place by reconciliation; expense rows get
    their assigned category and include flag from classification.
    """
    if config is None:
        raise ValueError("Config is None")
    validate_mapping(mapping)

    logs: List[str] = []
    period = config.period
    _log(debug, logs, f"Reporting period {period.start} to {period.end}")
    if is_single_column_gl(mapping):
        _log(debug, logs, f"GL debit/credit share column {mapping.gl['debit_amount']!r}: single-column mode")

    bookings, ledger_rows = normalize(ota_rows, gl_rows, mapping, period, classification_table)
    _log(
        debug,
        logs,
        f"Kept {len(bookings)}/{len(ota_rows)} OTA rows and {len(ledger_rows)}/{len(gl_rows)} GL rows in period",
    )

    gl_income = [r for r in ledger_rows if r.credit_amount > 0]
    gl_expenses = [r for r in ledger_rows if r.debit_amount > 0]
    _log(debug, logs, f"GL split: {len(gl_income)} income, {len(gl_expenses)} expenses")

    reconciled_count = reconcile(bookings, gl_income)
    _log(debug, logs, f"Reconciled {reconciled_count}/{len(bookings)} OTA payouts to GL income")

    auto_reimbursables, review_rows = classify(gl_expenses)
    _log(
        debug,
        logs,
        f"Classification: {len(auto_reimbursables)} auto-reimbursable, {len(review_rows)} need review",
    )

    stats = compute_stats(bookings, reconciled_count)
    _log(debug, logs, f"Stats: {stats.model_dump()}")

    return ProcessingResult(
        ota_bookings=bookings,
        gl_income=gl_income,
        gl_expenses=gl_expenses,
        review_rows=review_rows,
        auto_reimbursables=auto_reimbursables,
        stats=stats,
        logs=logs,
    )


def apply_review(result: ProcessingResult, updates: Mapping[str, Mapping[str, Any]]) -> ProcessingResult:
    """
    Apply human review decisions keyed by ledger row id.

    Each update may set assigned_category, split_percent and note. Category
    changes go through the same include/split rules as classification.
    The whole batch is checked first; a bad update leaves every row untouched.
    """
    if result is None:
        raise ValueError("Result is None")

    staged = []
    for row_id, update in updates.items():
        unknown = set(update) - REVIEW_FIELDS
        if unknown:
            raise ValueError(f"Unsupported review fields for {row_id}: {sorted(unknown)}")
        row = result.find_expense(row_id)
        if "assigned_category" in update:
            to_category(update["assigned_category"])
        split = update.get("split_percent")
        if split is not None and not 0 <= split <= 100:
            raise ValueError(f"split_percent for {row_id} must be within [0, 100]")
        staged.append((row, update))

    for row, update in staged:
        if "note" in update:
            row.note = update["note"]
        split = update.get("split_percent")
        if "assigned_category" in update:
            assign_category(row, update["assigned_category"], split_percent=split)
        elif split is not None:
            assign_category(row, row.assigned_category or Category.REVIEW_ALWAYS, split_percent=split)
    return result
