"""Core domain models."""

from core.models.invoice import (
    Invoice, InvoiceCreate, InvoiceUpdate, InvoiceStatus, LineItemInput,
    compute_tax_cents, compute_total_cents,
)
from core.models.payment import Payment, PaymentCreate, PaymentMethod
from core.models.reports import (
    AgingBucket, AgingReport,
    ReconciliationCategory, ReconciliationReport,
    RevenuePoint, TaxSummary, ExpenseItem,
    FinanceStats, StatusBreakdown, FilterCounts, ReminderStats,
    LedgerCheck, FinanceDashboard,
)

__all__ = [
    # Invoice
    "Invoice", "InvoiceCreate", "InvoiceUpdate", "InvoiceStatus", "LineItemInput",
    "compute_tax_cents", "compute_total_cents",
    # Payment
    "Payment", "PaymentCreate", "PaymentMethod",
    # Aggregates
    "AgingBucket", "AgingReport",
    "ReconciliationCategory", "ReconciliationReport",
    "RevenuePoint", "TaxSummary", "ExpenseItem",
    "FinanceStats", "StatusBreakdown", "FilterCounts", "ReminderStats",
    "LedgerCheck", "FinanceDashboard",
]
