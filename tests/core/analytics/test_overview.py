"""Tests for the finance dashboard overview."""

from datetime import date, datetime, timezone

from core.analytics.overview import (
    filter_counts, filter_invoices, finance_stats, month_change_percent,
    reminder_stats, status_breakdown,
)
from core.models import InvoiceStatus
from core.repositories import InvoiceFilters

TODAY = date(2026, 3, 15)


def _paid(make_invoice, total, issue_date):
    return make_invoice(total=total, paid=total, status=InvoiceStatus.PAID, issue_date=issue_date)


class TestFinanceStats:

    def test_revenue_periods(self, make_invoice):
        invoices = [
            _paid(make_invoice, 30000, date(2026, 3, 2)),
            _paid(make_invoice, 20000, date(2026, 2, 10)),
            _paid(make_invoice, 10000, date(2026, 1, 5)),
            _paid(make_invoice, 99999, date(2025, 12, 31)),
        ]

        stats = finance_stats(invoices, TODAY)

        assert stats.current_month_revenue_cents == 30000
        assert stats.prev_month_revenue_cents == 20000
        assert stats.ytd_revenue_cents == 60000
        assert stats.month_change_percent == 50.0
        assert stats.paid_count == 4

    def test_outstanding_and_counts(self, make_invoice):
        invoices = [
            make_invoice(total=45000, paid=32000),
            make_invoice(total=10000, status=InvoiceStatus.OVERDUE),
            make_invoice(total=5000, status=InvoiceStatus.DRAFT),
            make_invoice(total=7000, status=InvoiceStatus.CANCELLED),
        ]

        stats = finance_stats(invoices, TODAY)

        assert stats.outstanding_cents == 23000
        assert stats.overdue_count == 1
        assert stats.pending_count == 1
        assert stats.total_invoices == 4
        # (45000 + 10000) / 2, drafts and cancelled excluded
        assert stats.average_value_cents == 27500

    def test_empty(self):
        stats = finance_stats([], TODAY)
        assert stats.average_value_cents == 0
        assert stats.month_change_percent == 0.0

    def test_january_compares_with_december(self, make_invoice):
        invoices = [
            _paid(make_invoice, 100, date(2025, 12, 10)),
            _paid(make_invoice, 150, date(2026, 1, 10)),
        ]
        stats = finance_stats(invoices, date(2026, 1, 20))
        assert stats.prev_month_revenue_cents == 100
        assert stats.ytd_revenue_cents == 150


class TestMonthChange:

    def test_rounds_to_one_decimal(self):
        assert month_change_percent(2000, 3000) == -33.3

    def test_zero_baseline(self):
        assert month_change_percent(500, 0) == 0.0


class TestStatusBreakdown:

    def test_shares(self, make_invoice):
        breakdown = status_breakdown([
            make_invoice(total=5000, paid=5000, status=InvoiceStatus.PAID),
            make_invoice(total=3000),
            make_invoice(total=2000, status=InvoiceStatus.OVERDUE),
            make_invoice(total=999, status=InvoiceStatus.CANCELLED),
        ])

        assert (breakdown.paid_percent, breakdown.pending_percent, breakdown.overdue_percent) == (50, 30, 20)
        assert breakdown.cancelled_cents == 999

    def test_empty(self):
        assert status_breakdown([]).paid_percent == 0


class TestFilterCounts:

    def test_counts_per_status(self, make_invoice):
        counts = filter_counts([
            make_invoice(status=InvoiceStatus.DRAFT),
            make_invoice(status=InvoiceStatus.SENT),
            make_invoice(status=InvoiceStatus.SENT),
        ])
        assert counts.all == 3
        assert counts.sent == 2
        assert counts.paid == 0


class TestReminderStats:

    def test_overdue_balance(self, make_invoice):
        last = datetime(2026, 3, 1, tzinfo=timezone.utc)
        stats = reminder_stats([
            make_invoice(total=10000, paid=2500, status=InvoiceStatus.OVERDUE),
            make_invoice(total=10000),
        ], last)

        assert stats.overdue_count == 1
        assert stats.total_overdue_cents == 7500
        assert stats.last_reminder_at == last


class TestFilterInvoices:

    def test_search_and_status(self, make_invoice):
        target = make_invoice(notes="Album mastering", status=InvoiceStatus.OVERDUE)
        invoices = [target, make_invoice(notes="Album mastering"), make_invoice()]

        result = filter_invoices(invoices, InvoiceFilters(status=InvoiceStatus.OVERDUE, search="album"))

        assert result == [target]
