"""
Payment ledger.

Applies discrete payments to sent or overdue invoices. The payment row and
the invoice's paid amount change together in one repository call, and an
invoice whose balance reaches zero is moved to paid in the same operation.
"""

import logging
from datetime import date, datetime
from uuid import UUID, uuid4

from core import lifecycle
from core.event_bus import EventBus
from core.events import InvoicePaid, PaymentRecorded
from core.exceptions import InvalidAmount, InvalidState, InvoiceNotFound
from core.models import Invoice, InvoiceStatus, LedgerCheck, Payment, PaymentCreate, PaymentMethod
from core.repositories import InvoiceRepository, PaymentRepository
from utils.money import format_cents
from utils.studio_context import get_current_studio_id
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = (InvoiceStatus.SENT, InvoiceStatus.OVERDUE)


def post_payment(
    invoice: Invoice,
    data: PaymentCreate,
    now: datetime,
    payment_id: UUID | None = None,
) -> tuple[Invoice, Payment]:
    """
    Compute the effect of a payment on an invoice without persisting it.

    Args:
        invoice: Invoice as currently stored
        data: Payment input
        now: Timestamp for the payment and the invoice update
        payment_id: ID for the new payment (generated when omitted)

    Returns:
        (updated invoice, new payment)

    Raises:
        InvalidState: Invoice is not sent or overdue
        InvalidAmount: Amount is not positive or exceeds the remaining balance
    """
    if invoice.status not in PAYABLE_STATUSES:
        raise InvalidState(invoice.invoice_number, invoice.status.value)

    if data.amount_cents <= 0:
        raise InvalidAmount(
            f"Payment amount must be greater than zero, got {format_cents(data.amount_cents)}"
        )

    balance = invoice.balance_due_cents
    if data.amount_cents > balance:
        raise InvalidAmount(
            f"payment of {format_cents(data.amount_cents)} exceeds remaining balance "
            f"of {format_cents(balance)} on invoice {invoice.invoice_number}"
        )

    payment = Payment(
        id=payment_id or uuid4(),
        studio_id=invoice.studio_id,
        invoice_id=invoice.id,
        amount_cents=data.amount_cents,
        method=data.method,
        reference=data.reference,
        notes=data.notes,
        created_at=now,
    )

    paid = invoice.paid_amount_cents + data.amount_cents
    if paid == invoice.total_amount_cents:
        updated = lifecycle.mark_paid(invoice, now)
    else:
        updated = invoice.evolve(
            paid_amount_cents=paid,
            updated_at=max(now, invoice.created_at),
        )

    return updated, payment


class PaymentLedger:
    """Service for recording and querying payments."""

    def __init__(
        self,
        invoices: InvoiceRepository,
        payments: PaymentRepository,
        event_bus: EventBus,
    ):
        self.invoices = invoices
        self.payments = payments
        self.event_bus = event_bus

    def record_payment(
        self,
        invoice_id: UUID,
        data: PaymentCreate,
        now: datetime | None = None,
    ) -> tuple[Invoice, Payment]:
        """
        Record a payment against an invoice.

        Args:
            invoice_id: Invoice UUID
            data: Payment input
            now: Payment timestamp (defaults to current UTC time)

        Returns:
            (updated invoice, recorded payment). The invoice is PAID when the
            payment cleared the balance.

        Raises:
            InvoiceNotFound: Invoice doesn't exist
            InvalidState: Invoice is not sent or overdue
            InvalidAmount: Amount is not positive or exceeds the balance
        """
        studio_id = get_current_studio_id()
        now = now or now_utc()

        try:
            invoice, payment = self.payments.apply_payment(
                studio_id,
                invoice_id,
                lambda current: post_payment(current, data, now),
            )
        except (InvalidState, InvalidAmount) as e:
            logger.warning("Rejected payment on invoice %s: %s", invoice_id, e)
            raise

        logger.info(
            "Recorded payment of %s cents on invoice %s (paid %s/%s)",
            payment.amount_cents,
            invoice.invoice_number,
            invoice.paid_amount_cents,
            invoice.total_amount_cents,
        )

        self.event_bus.publish(PaymentRecorded.create(payment=payment, invoice=invoice))
        if invoice.status == InvoiceStatus.PAID:
            logger.info("Invoice %s settled in full", invoice.invoice_number)
            self.event_bus.publish(InvoicePaid.create(invoice=invoice))

        return invoice, payment

    def list_for_invoice(self, invoice_id: UUID) -> list[Payment]:
        """Payments against one invoice, oldest first."""
        return self.payments.list_for_invoice(get_current_studio_id(), invoice_id)

    def recent(self, limit: int = 20) -> list[Payment]:
        """Most recently received payments of the current studio."""
        return self.payments.list_for_studio(get_current_studio_id())[:limit]

    def list_received(
        self,
        start: date | None = None,
        end: date | None = None,
        method: PaymentMethod | None = None,
    ) -> list[Payment]:
        """Payments received in [start, end), newest first, optionally by method."""
        return self.payments.list_for_studio(get_current_studio_id(), start, end, method)

    def total_received(self, start: date | None = None, end: date | None = None) -> int:
        """Sum of payments received in [start, end) by payment date."""
        return sum(p.amount_cents for p in self.list_received(start, end))

    def verify(self, invoice_id: UUID) -> LedgerCheck:
        """
        Compare an invoice's paid amount with the sum of its payments.

        Invoices marked paid directly (without ledger payments) show up as
        unbalanced here; that is expected and is what this check is for.
        """
        studio_id = get_current_studio_id()
        invoice = self.invoices.get(studio_id, invoice_id)
        if invoice is None:
            raise InvoiceNotFound(invoice_id)

        payments = self.payments.list_for_invoice(studio_id, invoice_id)
        check = LedgerCheck(
            invoice_id=invoice_id,
            paid_amount_cents=invoice.paid_amount_cents,
            payments_total_cents=sum(p.amount_cents for p in payments),
            payment_count=len(payments),
        )
        if not check.balanced:
            logger.warning(
                "Ledger mismatch on invoice %s: paid %s, payments %s",
                invoice.invoice_number,
                check.paid_amount_cents,
                check.payments_total_cents,
            )
        return check
