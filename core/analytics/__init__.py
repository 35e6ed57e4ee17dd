"""Pure read-side aggregators over invoice records."""

from core.analytics.aging import aging_report, classify_age, days_overdue
from core.analytics.currency import convert, convert_cents, convert_for_display
from core.analytics.overview import (
    filter_counts, filter_invoices, finance_stats, reminder_stats, status_breakdown,
)
from core.analytics.reconciliation import classify_invoice, reconciliation_report
from core.analytics.revenue import (
    MONTH_LABELS, expense_breakdown, monthly_revenue, tax_summary, total_revenue,
)

__all__ = [
    # Aging
    "aging_report", "classify_age", "days_overdue",
    # Reconciliation
    "classify_invoice", "reconciliation_report",
    # Revenue
    "MONTH_LABELS", "expense_breakdown", "monthly_revenue", "tax_summary", "total_revenue",
    # Overview
    "filter_counts", "filter_invoices", "finance_stats", "reminder_stats", "status_breakdown",
    # Currency
    "convert", "convert_cents", "convert_for_display",
]
