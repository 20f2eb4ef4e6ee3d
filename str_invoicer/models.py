from __future__ import annotations

import uuid
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

RawRow = Dict[str, Any]


class Category(str, Enum):
    OWNER_ONLY = "OWNER_ONLY"
    MANAGER_ONLY = "MANAGER_ONLY"
    REIMBURSABLE = "REIMBURSABLE"
    SHARED = "SHARED"
    EXCLUDE = "EXCLUDE"
    REVIEW_ALWAYS = "REVIEW_ALWAYS"


CATEGORY_LABELS: Dict[Category, str] = {
    Category.OWNER_ONLY: "Owner Expense (Not Reimbursed)",
    Category.MANAGER_ONLY: "Manager Expense",
    Category.REIMBURSABLE: "Reimbursable (Charge Owner)",
    Category.SHARED: "Shared Expense",
    Category.EXCLUDE: "Exclude / Ignore",
    Category.REVIEW_ALWAYS: "Needs Review",
}


class FeeBaseMode(str, Enum):
    GROSS_REVENUE = "gross_revenue"
    NET_PAYOUTS = "net_payouts"


def new_id() -> str:
    return str(uuid.uuid4())


class FieldMapping(BaseModel):
    """Canonical field → raw header, per source. An empty header means unmapped."""

    ota: Dict[str, str] = Field(default_factory=dict)
    gl: Dict[str, str] = Field(default_factory=dict)


class ReportingPeriod(BaseModel):
    start: date
    end: date

    @model_validator(mode="after")
    def _start_before_end(self) -> "ReportingPeriod":
        if self.start > self.end:
            raise ValueError(f"period start {self.start} is after period end {self.end}")
        return self

    def contains(self, iso_date: str) -> bool:
        if not iso_date:
            return False
        return self.start <= date.fromisoformat(iso_date) <= self.end


class ProcessingConfig(BaseModel):
    period_start: date
    period_end: date
    manager_name: str = ""
    manager_contact: str = ""
    manager_bank: str = ""
    owner_name: str = ""
    mgmt_fee_percent: float = Field(default=20.0, ge=0, le=100)
    fee_base_mode: FeeBaseMode = FeeBaseMode.GROSS_REVENUE

    @property
    def period(self) -> ReportingPeriod:
        return ReportingPeriod(start=self.period_start, end=self.period_end)


class CanonicalBooking(BaseModel):
    id: str = Field(default_factory=new_id)
    reservation_id: str = ""
    check_in_date: str = ""           # YYYY-MM-DD or "" when unparseable
    check_out_date: Optional[str] = None
    guest_name: str = ""
    gross_amount: float = 0.0
    ota_fees: float = 0.0
    net_payout: float = 0.0
    payout_date: str = ""
    original_data: RawRow = Field(default_factory=dict)

    @property
    def reference_date(self) -> str:
        """Date used for period filtering: check-in, else payout."""
        return self.check_in_date or self.payout_date

    @property
    def payout_reference_date(self) -> str:
        """Date a payout should land in the ledger: payout, else check-in."""
        return self.payout_date or self.check_in_date


class CanonicalLedgerRow(BaseModel):
    id: str = Field(default_factory=new_id)
    date: str = ""
    account_name: str = ""
    source_type: str = ""
    description: str = ""
    contact: str = ""
    debit_amount: float = 0.0
    credit_amount: float = 0.0

    default_category: Optional[Category] = None
    assigned_category: Optional[Category] = None
    split_percent: Optional[float] = None   # 0-100, SHARED only
    include_flag: bool = False

    # true when this income is an OTA payout already counted via the bookings
    is_reconciled_ota: bool = False
    note: Optional[str] = None

    original_data: RawRow = Field(default_factory=dict)

    @field_validator("split_percent")
    @classmethod
    def _split_in_range(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return None
        if not 0 <= v <= 100:
            raise ValueError("split_percent must be within [0, 100]")
        return v

    @model_validator(mode="after")
    def _reconciled_rows_have_note(self) -> "CanonicalLedgerRow":
        if self.is_reconciled_ota and not self.note:
            raise ValueError("reconciled ledger rows must carry a note")
        return self


class ProcessingStats(BaseModel):
    total_ota_revenue: float = 0.0
    total_ota_net: float = 0.0
    reconciled_count: int = 0
    unreconciled_count: int = 0


class ProcessingResult(BaseModel):
    ota_bookings: List[CanonicalBooking] = Field(default_factory=list)
    gl_income: List[CanonicalLedgerRow] = Field(default_factory=list)
    gl_expenses: List[CanonicalLedgerRow] = Field(default_factory=list)
    review_rows: List[CanonicalLedgerRow] = Field(default_factory=list)
    auto_reimbursables: List[CanonicalLedgerRow] = Field(default_factory=list)
    stats: ProcessingStats = Field(default_factory=ProcessingStats)
    logs: List[str] = Field(default_factory=list)

    def find_expense(self, row_id: str) -> CanonicalLedgerRow:
        for row in self.gl_expenses:
            if row.id == row_id:
                return row
        raise KeyError(row_id)
