"""
Invoice lifecycle state machine.

    draft   -> sent, paid, cancelled
    sent    -> paid, overdue, cancelled
    overdue -> paid, cancelled

paid and cancelled are terminal.

Every function here is pure: it takes an Invoice and an explicit `now`,
validates the transition and returns a new Invoice. The input is never
mutated, so a rejected transition leaves the caller's record untouched.
Nothing in this module reads a clock.
"""

from datetime import date, datetime

from core.exceptions import IllegalDelete, InvalidAmount, InvalidTransition
from core.models import Invoice, InvoiceStatus
from utils.money import format_cents

TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({
        InvoiceStatus.SENT, InvoiceStatus.PAID, InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.SENT: frozenset({
        InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.OVERDUE: frozenset({
        InvoiceStatus.PAID, InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    return target in TRANSITIONS[current]


def _require(invoice: Invoice, target: InvoiceStatus) -> None:
    if not can_transition(invoice.status, target):
        raise InvalidTransition(invoice.invoice_number, invoice.status.value, target.value)


def _touch(invoice: Invoice, now: datetime) -> datetime:
    # updated_at never moves behind created_at, even with a skewed clock
    return max(now, invoice.created_at)


def mark_sent(invoice: Invoice, now: datetime) -> Invoice:
    """draft -> sent. No monetary change."""
    _require(invoice, InvoiceStatus.SENT)
    return invoice.evolve(status=InvoiceStatus.SENT, updated_at=_touch(invoice, now))


def mark_paid(
    invoice: Invoice,
    now: datetime,
    paid_amount_cents: int | None = None,
) -> Invoice:
    """
    draft/sent/overdue -> paid.

    Without an explicit amount the invoice is settled in full. An explicit
    amount records what was actually collected (e.g. a settled short
    invoice). It must lie within [0, total] and may not undercut what the
    ledger already received, since payments are never reversed.

    Raises:
        InvalidTransition: Invoice is already paid or cancelled
        InvalidAmount: Explicit amount is negative, below the amount already
            received or above the total
    """
    _require(invoice, InvoiceStatus.PAID)

    if paid_amount_cents is None:
        paid_amount_cents = invoice.total_amount_cents
    elif paid_amount_cents < 0:
        raise InvalidAmount(
            f"Paid amount for invoice {invoice.invoice_number} cannot be negative"
        )
    elif paid_amount_cents < invoice.paid_amount_cents:
        raise InvalidAmount(
            f"Paid amount {format_cents(paid_amount_cents)} is below the "
            f"{format_cents(invoice.paid_amount_cents)} already received on invoice "
            f"{invoice.invoice_number}"
        )
    elif paid_amount_cents > invoice.total_amount_cents:
        raise InvalidAmount(
            f"Paid amount {format_cents(paid_amount_cents)} exceeds the total of "
            f"{format_cents(invoice.total_amount_cents)} on invoice {invoice.invoice_number}"
        )

    return invoice.evolve(
        status=InvoiceStatus.PAID,
        paid_amount_cents=paid_amount_cents,
        updated_at=_touch(invoice, now),
    )


def mark_overdue(invoice: Invoice, now: datetime) -> Invoice:
    """
    sent -> overdue.

    The caller decides whether the due date has passed (see is_past_due).
    """
    _require(invoice, InvoiceStatus.OVERDUE)
    return invoice.evolve(status=InvoiceStatus.OVERDUE, updated_at=_touch(invoice, now))


def cancel(invoice: Invoice, now: datetime) -> Invoice:
    """
    draft/sent/overdue -> cancelled.

    paid_amount_cents is kept so historical partial payments stay visible.
    """
    _require(invoice, InvoiceStatus.CANCELLED)
    return invoice.evolve(status=InvoiceStatus.CANCELLED, updated_at=_touch(invoice, now))


def ensure_deletable(invoice: Invoice) -> None:
    """Only drafts may be physically removed."""
    if invoice.status != InvoiceStatus.DRAFT:
        raise IllegalDelete(invoice.invoice_number, invoice.status.value)


def ensure_editable(invoice: Invoice) -> None:
    """Monetary and party edits are only allowed while the invoice is a draft."""
    if invoice.status != InvoiceStatus.DRAFT:
        raise InvalidTransition(
            invoice.invoice_number, invoice.status.value, InvoiceStatus.DRAFT.value
        )


def is_past_due(invoice: Invoice, today: date) -> bool:
    """Whether a sent invoice should be flagged overdue as of today."""
    return invoice.status == InvoiceStatus.SENT and invoice.due_date < today
