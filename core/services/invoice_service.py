"""
Invoice service for the studio billing lifecycle.

Invoices are created as drafts, edited only while draft, and then moved
through the lifecycle state machine. Every mutation is computed on a copy
by core.lifecycle and only saved once it validated, so a rejected
operation leaves the stored record untouched.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable
from uuid import UUID, uuid4

from core import lifecycle
from core.config import FinanceConfig
from core.event_bus import EventBus
from core.events import (
    InvoiceCancelled, InvoiceCreated, InvoiceDeleted, InvoiceOverdue, InvoicePaid, InvoiceSent,
)
from core.exceptions import FinanceError, InvoiceNotFound
from core.models import (
    Invoice, InvoiceCreate, InvoiceStatus, InvoiceUpdate,
    compute_tax_cents, compute_total_cents,
)
from core.repositories import InvoiceFilters, InvoiceRepository
from utils.studio_context import get_current_studio_id
from utils.timezone import now_utc, today_in

logger = logging.getLogger(__name__)

# Fields an update may not blank out. notes/terms accept null to clear.
_REQUIRED_ON_UPDATE = (
    "client_id", "issue_date", "due_date", "line_items",
    "tax_rate_bps", "discount_amount_cents",
)


class InvoiceService:
    """Service for invoice operations."""

    def __init__(self, invoices: InvoiceRepository, event_bus: EventBus, config: FinanceConfig):
        self.invoices = invoices
        self.event_bus = event_bus
        self.config = config

    def _today(self, now: datetime) -> date:
        return today_in(self.config.timezone, now)

    def _generate_invoice_number(self, studio_id: UUID, year: int) -> str:
        """
        Next invoice number for a studio and year.

        Format: INV-YYYY-NNNNN, sequential within the year.
        """
        prefix = f"{self.config.invoice_number_prefix}-{year}-"
        latest = self.invoices.latest_number(studio_id, prefix)

        if latest is None:
            sequence = 1
        else:
            try:
                sequence = int(latest.rsplit("-", 1)[-1]) + 1
            except ValueError:
                sequence = 1

        return f"{prefix}{sequence:05d}"

    def create(self, data: InvoiceCreate, now: datetime | None = None) -> Invoice:
        """
        Create a draft invoice.

        Args:
            data: Validated invoice input
            now: Creation timestamp (defaults to current UTC time)

        Returns:
            Created invoice in DRAFT status

        Raises:
            ValueError: If the defaulted due date precedes the issue date
        """
        studio_id = get_current_studio_id()
        now = now or now_utc()

        issue_date = data.issue_date or self._today(now)
        due_date = data.due_date or issue_date + timedelta(days=self.config.payment_term_days)
        if due_date < issue_date:
            raise ValueError("Due date cannot be before issue date")

        tax_rate_bps = (
            data.tax_rate_bps if data.tax_rate_bps is not None
            else self.config.default_tax_rate_bps
        )
        subtotal_cents = data.subtotal_cents
        tax_amount_cents = compute_tax_cents(
            subtotal_cents, data.discount_amount_cents, tax_rate_bps
        )

        invoice = Invoice(
            id=uuid4(),
            studio_id=studio_id,
            client_id=data.client_id,
            booking_id=data.booking_id,
            invoice_number=self._generate_invoice_number(studio_id, issue_date.year),
            status=InvoiceStatus.DRAFT,
            issue_date=issue_date,
            due_date=due_date,
            subtotal_cents=subtotal_cents,
            tax_rate_bps=tax_rate_bps,
            tax_amount_cents=tax_amount_cents,
            discount_amount_cents=data.discount_amount_cents,
            total_amount_cents=compute_total_cents(
                subtotal_cents, data.discount_amount_cents, tax_amount_cents
            ),
            paid_amount_cents=0,
            notes=data.notes,
            terms=data.terms,
            created_at=now,
            updated_at=now,
        )

        self.invoices.add(invoice)
        logger.info(
            "Created invoice %s for client %s: total %s cents",
            invoice.invoice_number, invoice.client_id, invoice.total_amount_cents,
        )
        self.event_bus.publish(InvoiceCreated.create(invoice=invoice))
        return invoice

    def get(self, invoice_id: UUID) -> Invoice:
        """
        Get invoice by ID.

        Raises:
            InvoiceNotFound: No such invoice in the current studio
        """
        invoice = self.invoices.get(get_current_studio_id(), invoice_id)
        if invoice is None:
            raise InvoiceNotFound(invoice_id)
        return invoice

    def find(self, filters: InvoiceFilters | None = None) -> list[Invoice]:
        """Invoices of the current studio, newest issue date first."""
        return self.invoices.find(get_current_studio_id(), filters)

    def update(self, invoice_id: UUID, data: InvoiceUpdate, now: datetime | None = None) -> Invoice:
        """
        Edit a draft invoice.

        Only fields present in the request change. Line items, tax rate and
        discount edits recompute subtotal, tax and total.

        Args:
            invoice_id: Invoice UUID
            data: Fields to change
            now: Edit timestamp

        Returns:
            Updated invoice

        Raises:
            InvoiceNotFound: Invoice doesn't exist
            InvalidTransition: Invoice has left draft
            ValueError: Resulting amounts or dates are inconsistent
        """
        current = self.get(invoice_id)
        lifecycle.ensure_editable(current)
        now = now or now_utc()

        changes = data.model_dump(exclude_unset=True)
        for field_name in _REQUIRED_ON_UPDATE:
            if field_name in changes and changes[field_name] is None:
                raise ValueError(f"{field_name} cannot be cleared")

        subtotal_cents = current.subtotal_cents
        if "line_items" in changes:
            changes.pop("line_items")
            subtotal_cents = sum(item.total_cents for item in data.line_items)
        if subtotal_cents <= 0:
            raise ValueError("Invoice subtotal must be greater than zero")

        discount_cents = changes.get("discount_amount_cents", current.discount_amount_cents)
        if discount_cents >= subtotal_cents:
            raise ValueError("Discount must be less than the invoice subtotal")

        issue_date = changes.get("issue_date", current.issue_date)
        due_date = changes.get("due_date", current.due_date)
        if due_date < issue_date:
            raise ValueError("Due date cannot be before issue date")

        tax_rate_bps = changes.get("tax_rate_bps", current.tax_rate_bps)
        tax_amount_cents = compute_tax_cents(subtotal_cents, discount_cents, tax_rate_bps)

        updated = current.evolve(
            **changes,
            subtotal_cents=subtotal_cents,
            tax_amount_cents=tax_amount_cents,
            total_amount_cents=compute_total_cents(subtotal_cents, discount_cents, tax_amount_cents),
            updated_at=max(now, current.created_at),
        )
        self.invoices.save(updated)

        logger.info(
            "Updated draft invoice %s: total %s -> %s cents",
            updated.invoice_number, current.total_amount_cents, updated.total_amount_cents,
        )
        return updated

    def _transition(
        self,
        invoice_id: UUID,
        apply: Callable[[Invoice], Invoice],
        action: str,
    ) -> tuple[Invoice, Invoice]:
        current = self.get(invoice_id)
        try:
            updated = apply(current)
        except FinanceError as e:
            logger.warning("Rejected %s on invoice %s: %s", action, current.invoice_number, e)
            raise

        self.invoices.save(updated)
        logger.info(
            "Invoice %s: %s -> %s",
            updated.invoice_number, current.status.value, updated.status.value,
        )
        return current, updated

    def send(self, invoice_id: UUID, now: datetime | None = None) -> Invoice:
        """
        Send a draft invoice.

        Raises:
            InvoiceNotFound: Invoice doesn't exist
            InvalidTransition: Invoice is not a draft
        """
        now = now or now_utc()
        _, updated = self._transition(
            invoice_id, lambda invoice: lifecycle.mark_sent(invoice, now), "send"
        )
        self.event_bus.publish(InvoiceSent.create(invoice=updated))
        return updated

    def mark_paid(
        self,
        invoice_id: UUID,
        paid_amount_cents: int | None = None,
        now: datetime | None = None,
    ) -> Invoice:
        """
        Mark an invoice paid outside the payment ledger.

        Args:
            invoice_id: Invoice UUID
            paid_amount_cents: Amount actually collected; defaults to the total
            now: Transition timestamp

        Raises:
            InvoiceNotFound: Invoice doesn't exist
            InvalidTransition: Invoice is already paid or cancelled
            InvalidAmount: Explicit amount outside [0, total]
        """
        now = now or now_utc()
        _, updated = self._transition(
            invoice_id,
            lambda invoice: lifecycle.mark_paid(invoice, now, paid_amount_cents),
            "mark_paid",
        )
        self.event_bus.publish(InvoicePaid.create(invoice=updated))
        return updated

    def mark_overdue(self, invoice_id: UUID, now: datetime | None = None) -> Invoice:
        now = now or now_utc()
        _, updated = self._transition(
            invoice_id, lambda invoice: lifecycle.mark_overdue(invoice, now), "mark_overdue"
        )
        self.event_bus.publish(InvoiceOverdue.create(invoice=updated))
        return updated

    def cancel(self, invoice_id: UUID, now: datetime | None = None) -> Invoice:
        now = now or now_utc()
        _, updated = self._transition(
            invoice_id, lambda invoice: lifecycle.cancel(invoice, now), "cancel"
        )
        self.event_bus.publish(InvoiceCancelled.create(invoice=updated))
        return updated

    def delete(self, invoice_id: UUID) -> Invoice:
        """
        Delete a draft invoice.

        Returns:
            The deleted invoice as it was last stored

        Raises:
            InvoiceNotFound: Invoice doesn't exist
            IllegalDelete: Invoice has left draft
        """
        current = self.get(invoice_id)
        try:
            lifecycle.ensure_deletable(current)
        except FinanceError as e:
            logger.warning("Rejected delete of invoice %s: %s", current.invoice_number, e)
            raise

        self.invoices.delete(current.studio_id, invoice_id)
        logger.info("Deleted draft invoice %s", current.invoice_number)
        self.event_bus.publish(InvoiceDeleted.create(invoice=current))
        return current

    def list_overdue(self, today: date | None = None) -> list[Invoice]:
        """Sent or overdue invoices whose due date is before today."""
        today = today or self._today(now_utc())
        return [
            invoice for invoice in self.find()
            if invoice.status in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE)
            and invoice.due_date < today
        ]

    def sweep_overdue(self, today: date | None = None, now: datetime | None = None) -> list[Invoice]:
        """
        Flag every sent invoice past its due date as overdue.

        Running the sweep twice on the same day changes nothing the second
        time.

        Args:
            today: Reference date (defaults to the studio's local date)
            now: Transition timestamp

        Returns:
            Invoices that moved to OVERDUE in this run
        """
        now = now or now_utc()
        today = today or self._today(now)

        flagged = []
        for invoice in self.find(InvoiceFilters(status=InvoiceStatus.SENT)):
            if not lifecycle.is_past_due(invoice, today):
                continue
            updated = lifecycle.mark_overdue(invoice, now)
            self.invoices.save(updated)
            self.event_bus.publish(InvoiceOverdue.create(invoice=updated))
            flagged.append(updated)

        if flagged:
            logger.info("Overdue sweep for %s flagged %d invoices", today, len(flagged))
        return flagged
