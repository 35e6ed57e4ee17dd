"""Derived finance aggregates.

None of these are persisted. They are recomputed from the current invoice
and payment records on every query and exist only as typed return values
for the analytics functions and the API.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field


class AgingBucket(BaseModel):
    amount_cents: int = 0
    count: int = 0


class AgingReport(BaseModel):
    """Outstanding receivables grouped by days past due."""

    as_of: date
    current: AgingBucket = Field(default_factory=AgingBucket)  # 0-30 days
    days31_60: AgingBucket = Field(default_factory=AgingBucket)
    days61_90: AgingBucket = Field(default_factory=AgingBucket)
    days90plus: AgingBucket = Field(default_factory=AgingBucket)
    total_cents: int = 0

    def buckets(self) -> dict[str, AgingBucket]:
        return {
            "current": self.current,
            "days31_60": self.days31_60,
            "days61_90": self.days61_90,
            "days90plus": self.days90plus,
        }


class ReconciliationCategory(BaseModel):
    count: int = 0
    amount_cents: int = 0
    percent: int = 0


class ReconciliationReport(BaseModel):
    """How fully payments account for each non-draft, non-cancelled invoice."""

    matched: ReconciliationCategory = Field(default_factory=ReconciliationCategory)
    partial: ReconciliationCategory = Field(default_factory=ReconciliationCategory)
    unmatched: ReconciliationCategory = Field(default_factory=ReconciliationCategory)

    def categories(self) -> dict[str, ReconciliationCategory]:
        return {
            "matched": self.matched,
            "partial": self.partial,
            "unmatched": self.unmatched,
        }


class RevenuePoint(BaseModel):
    month: int = Field(..., ge=1, le=12)
    label: str
    amount_cents: int


class TaxSummary(BaseModel):
    year: int
    month: int = Field(..., ge=1, le=12)
    tax_rate_bps: int
    gross_revenue_cents: int = 0
    tax_collected_cents: int = 0
    net_revenue_cents: int = 0


class ExpenseItem(BaseModel):
    category: str
    amount_cents: int
    percentage: int


class FinanceStats(BaseModel):
    """Headline KPIs for the finance dashboard."""

    current_month_revenue_cents: int = 0
    prev_month_revenue_cents: int = 0
    ytd_revenue_cents: int = 0
    outstanding_cents: int = 0
    overdue_count: int = 0
    average_value_cents: int = 0
    month_change_percent: float = 0.0
    total_invoices: int = 0
    paid_count: int = 0
    pending_count: int = 0


class StatusBreakdown(BaseModel):
    paid_cents: int = 0
    pending_cents: int = 0
    overdue_cents: int = 0
    cancelled_cents: int = 0
    paid_percent: int = 0
    pending_percent: int = 0
    overdue_percent: int = 0


class FilterCounts(BaseModel):
    all: int = 0
    draft: int = 0
    sent: int = 0
    paid: int = 0
    overdue: int = 0
    cancelled: int = 0


class ReminderStats(BaseModel):
    overdue_count: int = 0
    total_overdue_cents: int = 0
    last_reminder_at: datetime | None = None


class LedgerCheck(BaseModel):
    """Result of comparing an invoice's paid amount with its payment history."""

    invoice_id: UUID
    paid_amount_cents: int
    payments_total_cents: int
    payment_count: int

    @property
    def discrepancy_cents(self) -> int:
        return self.paid_amount_cents - self.payments_total_cents

    @property
    def balanced(self) -> bool:
        return self.discrepancy_cents == 0


class FinanceDashboard(BaseModel):
    """Everything the finance page renders, computed in one pass."""

    as_of: date
    stats: FinanceStats
    status_breakdown: StatusBreakdown
    filter_counts: FilterCounts
    aging: AgingReport
    reconciliation: ReconciliationReport
    monthly_revenue: list[RevenuePoint]
    tax: TaxSummary
    reminders: ReminderStats
