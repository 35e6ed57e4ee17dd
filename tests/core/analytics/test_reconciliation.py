"""Tests for the reconciliation classifier."""

import pytest

from core.analytics.reconciliation import classify_invoice, reconciliation_report
from core.models import InvoiceStatus


class TestClassifyInvoice:

    def test_fully_paid_is_matched(self, make_invoice):
        invoice = make_invoice(total=30000, paid=30000, status=InvoiceStatus.PAID)
        assert classify_invoice(invoice) == "matched"

    @pytest.mark.parametrize("status", [InvoiceStatus.SENT, InvoiceStatus.OVERDUE, InvoiceStatus.PAID])
    def test_some_money_is_partial(self, make_invoice, status):
        invoice = make_invoice(total=30000, paid=10000, status=status)
        assert classify_invoice(invoice) == "partial"

    def test_nothing_received_is_unmatched(self, make_invoice):
        assert classify_invoice(make_invoice(total=30000)) == "unmatched"

    def test_paid_at_zero_against_positive_total_is_unmatched(self, make_invoice):
        invoice = make_invoice(total=30000, paid=0, status=InvoiceStatus.PAID)
        assert classify_invoice(invoice) == "unmatched"

    def test_zero_total_paid_is_matched(self, make_invoice):
        invoice = make_invoice(subtotal=100, discount=100, paid=0, status=InvoiceStatus.PAID)
        assert invoice.total_amount_cents == 0
        assert classify_invoice(invoice) == "matched"


class TestReconciliationReport:

    def test_paid_invoice_amount(self, make_invoice):
        report = reconciliation_report([
            make_invoice(total=30000, paid=30000, status=InvoiceStatus.PAID),
        ])

        assert report.matched.count == 1
        assert report.matched.amount_cents == 30000
        assert report.matched.percent == 100

    def test_partial_reports_cash_received(self, make_invoice):
        report = reconciliation_report([make_invoice(total=45000, paid=32000)])
        assert report.partial.amount_cents == 32000

    def test_excludes_draft_and_cancelled(self, make_invoice):
        report = reconciliation_report([
            make_invoice(status=InvoiceStatus.DRAFT),
            make_invoice(status=InvoiceStatus.CANCELLED, total=100, paid=50),
        ])
        assert sum(c.count for c in report.categories().values()) == 0
        assert report.unmatched.percent == 0

    def test_partition_and_percentages(self, make_invoice):
        invoices = [
            make_invoice(total=100, paid=100, status=InvoiceStatus.PAID),
            make_invoice(total=100, paid=100, status=InvoiceStatus.PAID),
            make_invoice(total=100, paid=40),
            make_invoice(total=100),
            make_invoice(total=100, status=InvoiceStatus.OVERDUE),
            make_invoice(total=100, status=InvoiceStatus.OVERDUE),
            make_invoice(total=100, status=InvoiceStatus.OVERDUE),
            make_invoice(total=100, status=InvoiceStatus.OVERDUE),
        ]
        report = reconciliation_report(invoices)

        assert (report.matched.count, report.partial.count, report.unmatched.count) == (2, 1, 5)
        # 25%, 12.5% -> 13%, 62.5% -> 63%
        assert (report.matched.percent, report.partial.percent, report.unmatched.percent) == (25, 13, 63)

    def test_idempotent(self, make_invoice):
        invoices = [make_invoice(total=100, paid=40), make_invoice(total=100)]
        assert reconciliation_report(invoices) == reconciliation_report(invoices)
