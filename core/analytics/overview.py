"""Finance dashboard overview: headline KPIs, status shares, filter counts."""

from datetime import date, datetime
from typing import Iterable

from core.analytics.revenue import total_revenue
from core.models import FilterCounts, FinanceStats, Invoice, InvoiceStatus, ReminderStats, StatusBreakdown
from core.repositories.base import InvoiceFilters
from utils.money import percent_of, round_half_up


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _next_month_start(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def _previous_month_start(day: date) -> date:
    if day.month == 1:
        return date(day.year - 1, 12, 1)
    return date(day.year, day.month - 1, 1)


def month_change_percent(current_cents: int, previous_cents: int) -> float:
    """Month-over-month change rounded to one decimal. Zero baseline gives 0."""
    if previous_cents == 0:
        return 0.0
    change = (current_cents - previous_cents) / previous_cents * 100
    return float(round_half_up(change, 1))


def finance_stats(invoices: Iterable[Invoice], today: date) -> FinanceStats:
    """
    Headline figures for the finance page as of `today`.

    Revenue figures count paid invoices by issue date. Outstanding is the
    remaining balance across sent and overdue invoices. The average value
    covers every invoice that has left draft and was not cancelled.
    """
    invoices = list(invoices)

    month_start = _month_start(today)
    current = total_revenue(invoices, month_start, _next_month_start(today))
    previous = total_revenue(invoices, _previous_month_start(today), month_start)
    ytd = total_revenue(invoices, date(today.year, 1, 1), _next_month_start(today))

    billed = [
        invoice for invoice in invoices
        if invoice.status not in (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED)
    ]
    average = sum(i.total_amount_cents for i in billed) // len(billed) if billed else 0

    return FinanceStats(
        current_month_revenue_cents=current,
        prev_month_revenue_cents=previous,
        ytd_revenue_cents=ytd,
        outstanding_cents=sum(
            i.balance_due_cents for i in invoices
            if i.status in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE)
        ),
        overdue_count=sum(1 for i in invoices if i.status == InvoiceStatus.OVERDUE),
        average_value_cents=average,
        month_change_percent=month_change_percent(current, previous),
        total_invoices=len(invoices),
        paid_count=sum(1 for i in invoices if i.status == InvoiceStatus.PAID),
        pending_count=sum(1 for i in invoices if i.status == InvoiceStatus.SENT),
    )


def status_breakdown(invoices: Iterable[Invoice]) -> StatusBreakdown:
    """Invoiced totals per status; shares are over paid + pending + overdue."""
    totals = {status: 0 for status in InvoiceStatus}
    for invoice in invoices:
        totals[invoice.status] += invoice.total_amount_cents

    paid = totals[InvoiceStatus.PAID]
    pending = totals[InvoiceStatus.SENT]
    overdue = totals[InvoiceStatus.OVERDUE]
    base = paid + pending + overdue

    return StatusBreakdown(
        paid_cents=paid,
        pending_cents=pending,
        overdue_cents=overdue,
        cancelled_cents=totals[InvoiceStatus.CANCELLED],
        paid_percent=percent_of(paid, base),
        pending_percent=percent_of(pending, base),
        overdue_percent=percent_of(overdue, base),
    )


def filter_counts(invoices: Iterable[Invoice]) -> FilterCounts:
    counts = {status.value: 0 for status in InvoiceStatus}
    total = 0
    for invoice in invoices:
        counts[invoice.status.value] += 1
        total += 1
    return FilterCounts(all=total, **counts)


def reminder_stats(invoices: Iterable[Invoice], last_reminder_at: datetime | None = None) -> ReminderStats:
    overdue = [i for i in invoices if i.status == InvoiceStatus.OVERDUE]
    return ReminderStats(
        overdue_count=len(overdue),
        total_overdue_cents=sum(i.balance_due_cents for i in overdue),
        last_reminder_at=last_reminder_at,
    )


def filter_invoices(invoices: Iterable[Invoice], filters: InvoiceFilters) -> list[Invoice]:
    return [invoice for invoice in invoices if filters.matches(invoice)]
