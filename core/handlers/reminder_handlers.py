"""
Handlers that drive overdue payment reminders.

When an invoice turns overdue a reminder is queued for it; when it is paid
or cancelled the pending reminder is dropped. The dashboard's reminder card
reads the last time a reminder went out from the same log.
"""

import logging
from datetime import datetime
from typing import Callable
from uuid import UUID

from core.events import InvoiceCancelled, InvoiceOverdue, InvoicePaid

logger = logging.getLogger(__name__)


class ReminderLog:
    """Pending overdue reminders per invoice, plus when the last one was issued."""

    def __init__(self):
        self._pending: dict[UUID, datetime] = {}
        self.last_reminder_at: datetime | None = None

    def queue(self, invoice_id: UUID, at: datetime) -> None:
        self._pending[invoice_id] = at
        self.last_reminder_at = at

    def drop(self, invoice_id: UUID) -> bool:
        return self._pending.pop(invoice_id, None) is not None

    def pending(self) -> list[UUID]:
        return list(self._pending)


def handle_invoice_overdue(reminders: ReminderLog) -> Callable:
    """Factory that returns an InvoiceOverdue handler queueing a reminder."""

    def handler(event: InvoiceOverdue):
        invoice = event.invoice
        reminders.queue(invoice.id, event.occurred_at)
        logger.info(
            "Reminder queued for overdue invoice %s (balance %s cents)",
            invoice.invoice_number,
            invoice.balance_due_cents,
        )

    return handler


def handle_invoice_settled(reminders: ReminderLog) -> Callable:
    """Factory that returns an InvoicePaid/InvoiceCancelled handler dropping reminders."""

    def handler(event: InvoicePaid | InvoiceCancelled):
        if reminders.drop(event.invoice.id):
            logger.info("Reminder dropped for invoice %s", event.invoice.invoice_number)

    return handler


def register_reminder_handlers(event_bus, reminders: ReminderLog) -> None:
    event_bus.subscribe("InvoiceOverdue", handle_invoice_overdue(reminders))
    settled = handle_invoice_settled(reminders)
    event_bus.subscribe("InvoicePaid", settled)
    event_bus.subscribe("InvoiceCancelled", settled)
