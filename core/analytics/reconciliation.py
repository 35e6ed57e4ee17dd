"""Payment reconciliation.

Sorts every invoice that has left draft and was not cancelled into exactly
one of three categories by how fully payments cover it:

- matched:   paid and fully covered
- partial:   some money received, some still owed (any status)
- unmatched: nothing received

Matched and unmatched report invoiced value; partial reports cash received.
"""

from typing import Iterable

from core.models import Invoice, InvoiceStatus, ReconciliationCategory, ReconciliationReport
from utils.money import percent_of

MATCHED = "matched"
PARTIAL = "partial"
UNMATCHED = "unmatched"

_EXCLUDED = (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED)


def reconcilable_invoices(invoices: Iterable[Invoice]) -> list[Invoice]:
    return [invoice for invoice in invoices if invoice.status not in _EXCLUDED]


def classify_invoice(invoice: Invoice) -> str:
    paid = invoice.paid_amount_cents
    total = invoice.total_amount_cents

    if invoice.status == InvoiceStatus.PAID and paid >= total:
        return MATCHED
    if 0 < paid < total:
        return PARTIAL
    # paid == 0 here. A paid invoice settled at zero against a positive
    # total received nothing, so it reconciles as unmatched as well.
    return UNMATCHED


def reconciliation_report(invoices: Iterable[Invoice]) -> ReconciliationReport:
    """Categorize non-draft, non-cancelled invoices and compute shares."""
    qualifying = reconcilable_invoices(invoices)
    categories = {
        MATCHED: ReconciliationCategory(),
        PARTIAL: ReconciliationCategory(),
        UNMATCHED: ReconciliationCategory(),
    }

    for invoice in qualifying:
        name = classify_invoice(invoice)
        category = categories[name]
        category.count += 1
        if name == PARTIAL:
            category.amount_cents += invoice.paid_amount_cents
        else:
            category.amount_cents += invoice.total_amount_cents

    denominator = max(1, len(qualifying))
    for category in categories.values():
        category.percent = percent_of(category.count, denominator)

    return ReconciliationReport(
        matched=categories[MATCHED],
        partial=categories[PARTIAL],
        unmatched=categories[UNMATCHED],
    )
