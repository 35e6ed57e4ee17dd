"""Receivables aging.

Buckets every outstanding invoice (sent or overdue, balance > 0) by how many
days past its due date it is on an injected reference date. Bucket bounds
are inclusive on the lower bucket: 30 days is current, 31 is 31-60.
"""

from datetime import date
from typing import Iterable

from core.models import AgingBucket, AgingReport, Invoice

CURRENT = "current"
DAYS_31_60 = "days31_60"
DAYS_61_90 = "days61_90"
DAYS_90_PLUS = "days90plus"


def days_overdue(invoice: Invoice, today: date) -> int:
    """Whole days past due, never negative."""
    return max(0, (today - invoice.due_date).days)


def classify_age(days: int) -> str:
    if days <= 30:
        return CURRENT
    if days <= 60:
        return DAYS_31_60
    if days <= 90:
        return DAYS_61_90
    return DAYS_90_PLUS


def outstanding_invoices(invoices: Iterable[Invoice]) -> list[Invoice]:
    return [invoice for invoice in invoices if invoice.is_outstanding]


def aging_report(invoices: Iterable[Invoice], today: date) -> AgingReport:
    """
    Partition outstanding invoices into aging buckets.

    Args:
        invoices: Any invoices; non-outstanding ones are ignored
        today: Reference date, injected so results are reproducible

    Returns:
        AgingReport with per-bucket amount/count and the grand total
    """
    buckets = {
        CURRENT: AgingBucket(),
        DAYS_31_60: AgingBucket(),
        DAYS_61_90: AgingBucket(),
        DAYS_90_PLUS: AgingBucket(),
    }

    for invoice in outstanding_invoices(invoices):
        bucket = buckets[classify_age(days_overdue(invoice, today))]
        bucket.amount_cents += invoice.balance_due_cents
        bucket.count += 1

    return AgingReport(
        as_of=today,
        current=buckets[CURRENT],
        days31_60=buckets[DAYS_31_60],
        days61_90=buckets[DAYS_61_90],
        days90plus=buckets[DAYS_90_PLUS],
        total_cents=sum(b.amount_cents for b in buckets.values()),
    )
