from typing import List

import pandas as pd
from pydantic import BaseModel, Field

from .models import (
    CATEGORY_LABELS,
    CanonicalLedgerRow,
    Category,
    FeeBaseMode,
    ProcessingConfig,
    ProcessingResult,
)

UNASSIGNED = "Unassigned"


class InvoiceTotals(BaseModel):
    gross_revenue: float
    net_payouts: float
    fee_base: float
    fee_base_label: str
    mgmt_fee_amount: float
    total_reimbursables: float
    total_deductions: float
    net_to_owner: float
    reimbursable_items: List[CanonicalLedgerRow] = Field(default_factory=list)


def chargeable_amount(row: CanonicalLedgerRow) -> float:
    """Debit charged to the owner; SHARED rows only carry their split share."""
    amount = row.debit_amount
    if row.assigned_category == Category.SHARED and row.split_percent is not None:
        amount = amount * (row.split_percent / 100)
    return amount


def _processed_expenses(result: ProcessingResult) -> List[CanonicalLedgerRow]:
    return [*result.auto_reimbursables, *result.review_rows]


def compute_invoice_totals(result: ProcessingResult, config: ProcessingConfig) -> InvoiceTotals:
    """
    Owner statement figures:
    management fee on gross revenue or net payouts, included expenses as
    deductions, and what is left for the owner out of the net payouts.
    """
    if result is None:
        raise ValueError("Result is None")

    gross_revenue = result.stats.total_ota_revenue
    net_payouts = result.stats.total_ota_net
    if config.fee_base_mode == FeeBaseMode.GROSS_REVENUE:
        fee_base, fee_base_label = gross_revenue, "Gross OTA Revenue"
    else:
        fee_base, fee_base_label = net_payouts, "Net OTA Payouts"
    mgmt_fee_amount = fee_base * (config.mgmt_fee_percent / 100)

    items = [r for r in _processed_expenses(result) if r.include_flag]
    total_reimbursables = sum(chargeable_amount(r) for r in items)
    total_deductions = mgmt_fee_amount + total_reimbursables

    return InvoiceTotals(
        gross_revenue=gross_revenue,
        net_payouts=net_payouts,
        fee_base=fee_base,
        fee_base_label=fee_base_label,
        mgmt_fee_amount=mgmt_fee_amount,
        total_reimbursables=total_reimbursables,
        total_deductions=total_deductions,
        net_to_owner=net_payouts - total_deductions,
        reimbursable_items=items,
    )


def expense_breakdown(result: ProcessingResult) -> pd.DataFrame:
    """
    Debit totals per assigned category for reviewed expenses.
    EXCLUDE rows are skipped; unassigned / REVIEW_ALWAYS rows are bucketed together.
    """
    records = []
    for row in _processed_expenses(result):
        category = row.assigned_category
        if category == Category.EXCLUDE:
            continue
        if category is None or category == Category.REVIEW_ALWAYS:
            bucket = UNASSIGNED
        else:
            bucket = category.value
        records.append({"category": bucket, "total": row.debit_amount})

    if not records:
        return pd.DataFrame(columns=["category", "label", "total"])

    data = pd.DataFrame(records)
    by_category = data.groupby("category", sort=False)["total"].sum().reset_index()
    by_category = by_category[by_category["total"] > 0].copy()
    by_category.insert(
        1,
        "label",
        by_category["category"].map(lambda c: CATEGORY_LABELS[Category(c)] if c != UNASSIGNED else UNASSIGNED),
    )
    return by_category.reset_index(drop=True)


def build_statement_table(totals: InvoiceTotals) -> pd.DataFrame:
    """
    Minimal owner statement table from compute_invoice_totals output.
    """
    rows = [
        {"item": "Net OTA Payouts", "amount": totals.net_payouts},
        {"item": f"Management Fee ({totals.fee_base_label})", "amount": -totals.mgmt_fee_amount},
    ]
    for item in totals.reimbursable_items:
        label = item.description or item.account_name
        rows.append({"item": f"Reimbursable: {label}", "amount": -chargeable_amount(item)})
    rows.append({"item": "Total Deductions", "amount": -totals.total_deductions})
    rows.append({"item": "Net to Owner", "amount": totals.net_to_owner})
    return pd.DataFrame(rows, columns=["item", "amount"])
