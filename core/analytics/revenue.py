"""Revenue and tax aggregation over paid invoices.

Revenue is recognized on paid invoices by issue date. Totals are summed
as integer cents; nothing here touches floats except percentage shares.
"""

from datetime import date
from typing import Iterable, Sequence

from core.models import ExpenseItem, Invoice, InvoiceStatus, RevenuePoint, TaxSummary
from utils.money import percent_of

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def paid_invoices(invoices: Iterable[Invoice]) -> list[Invoice]:
    return [invoice for invoice in invoices if invoice.status == InvoiceStatus.PAID]


def months_in_series(year: int, today: date) -> int:
    """How many months of `year` have started as of `today`."""
    if year < today.year:
        return 12
    if year == today.year:
        return today.month
    return 0


def monthly_revenue(invoices: Iterable[Invoice], year: int, today: date) -> list[RevenuePoint]:
    """
    Paid revenue per month of `year`.

    The series runs from January up to the current month for the current
    year, covers all twelve months for past years and is empty for future
    years. Months without revenue are reported as zero.
    """
    months = months_in_series(year, today)
    totals = [0] * months

    for invoice in paid_invoices(invoices):
        issued = invoice.issue_date
        if issued.year == year and issued.month <= months:
            totals[issued.month - 1] += invoice.total_amount_cents

    return [
        RevenuePoint(month=index + 1, label=MONTH_LABELS[index], amount_cents=amount)
        for index, amount in enumerate(totals)
    ]


def tax_summary(
    invoices: Iterable[Invoice],
    month: int,
    year: int,
    tax_rate_bps: int,
) -> TaxSummary:
    """
    Gross, tax and net for paid invoices issued in the given month.

    Args:
        invoices: Any invoices; only paid ones in the month count
        month: Calendar month, 1-12
        year: Calendar year
        tax_rate_bps: Rate shown alongside the figures (display only)

    Returns:
        TaxSummary with net = gross - tax collected
    """
    gross = 0
    tax = 0
    for invoice in paid_invoices(invoices):
        if invoice.issue_date.year == year and invoice.issue_date.month == month:
            gross += invoice.total_amount_cents
            tax += invoice.tax_amount_cents

    return TaxSummary(
        year=year,
        month=month,
        tax_rate_bps=tax_rate_bps,
        gross_revenue_cents=gross,
        tax_collected_cents=tax,
        net_revenue_cents=gross - tax,
    )


def total_revenue(invoices: Iterable[Invoice], start: date, end: date | None = None) -> int:
    """Sum of paid totals issued in [start, end). No end means open-ended."""
    return sum(
        invoice.total_amount_cents
        for invoice in paid_invoices(invoices)
        if invoice.issue_date >= start and (end is None or invoice.issue_date < end)
    )


def expense_breakdown(expenses: Sequence[tuple[str, int]]) -> list[ExpenseItem]:
    """Attach a rounded percentage share to each (category, amount_cents) pair."""
    total = sum(amount for _, amount in expenses)
    return [
        ExpenseItem(
            category=category,
            amount_cents=amount,
            percentage=percent_of(amount, total),
        )
        for category, amount in expenses
    ]
