"""In-memory repositories for tests, demos and single-session use."""

import logging
from datetime import date
from uuid import UUID

from core.exceptions import InvoiceNotFound
from core.models import Invoice, Payment, PaymentMethod
from core.repositories.base import (
    InvoiceFilters,
    InvoiceRepository,
    PaymentPosting,
    PaymentRepository,
)

logger = logging.getLogger(__name__)


class InMemoryInvoiceRepository(InvoiceRepository):
    """Dict-backed invoice store keyed by invoice ID."""

    def __init__(self, invoices: list[Invoice] | None = None):
        self._invoices: dict[UUID, Invoice] = {}
        for invoice in invoices or []:
            self._invoices[invoice.id] = invoice

    def get(self, studio_id: UUID, invoice_id: UUID) -> Invoice | None:
        invoice = self._invoices.get(invoice_id)
        if invoice is None or invoice.studio_id != studio_id:
            return None
        return invoice

    def find(self, studio_id: UUID, filters: InvoiceFilters | None = None) -> list[Invoice]:
        filters = filters or InvoiceFilters()
        matches = [
            invoice for invoice in self._invoices.values()
            if invoice.studio_id == studio_id and filters.matches(invoice)
        ]
        return sorted(
            matches,
            key=lambda i: (i.issue_date, i.invoice_number),
            reverse=True,
        )

    def add(self, invoice: Invoice) -> Invoice:
        if invoice.id in self._invoices:
            raise ValueError(f"Invoice {invoice.id} already exists")
        self._invoices[invoice.id] = invoice
        return invoice

    def save(self, invoice: Invoice) -> Invoice:
        if self.get(invoice.studio_id, invoice.id) is None:
            raise InvoiceNotFound(invoice.id)
        self._invoices[invoice.id] = invoice
        return invoice

    def delete(self, studio_id: UUID, invoice_id: UUID) -> bool:
        if self.get(studio_id, invoice_id) is None:
            return False
        del self._invoices[invoice_id]
        return True

    def latest_number(self, studio_id: UUID, prefix: str) -> str | None:
        numbers = [
            invoice.invoice_number for invoice in self._invoices.values()
            if invoice.studio_id == studio_id and invoice.invoice_number.startswith(prefix)
        ]
        # Longer sequence means larger number once the zero padding runs out
        return max(numbers, key=lambda number: (len(number), number)) if numbers else None


class InMemoryPaymentRepository(PaymentRepository):
    """
    List-backed payment store.

    Shares the invoice repository so apply_payment can update both sides
    together.
    """

    def __init__(self, invoices: InMemoryInvoiceRepository):
        self._invoices = invoices
        self._payments: list[Payment] = []

    def list_for_invoice(self, studio_id: UUID, invoice_id: UUID) -> list[Payment]:
        payments = [
            p for p in self._payments
            if p.studio_id == studio_id and p.invoice_id == invoice_id
        ]
        return sorted(payments, key=lambda p: p.created_at)

    def list_for_studio(
        self,
        studio_id: UUID,
        start: date | None = None,
        end: date | None = None,
        method: PaymentMethod | None = None,
    ) -> list[Payment]:
        payments = []
        for payment in self._payments:
            if payment.studio_id != studio_id:
                continue
            if method is not None and payment.method != method:
                continue
            received = payment.created_at.date()
            if start is not None and received < start:
                continue
            if end is not None and received >= end:
                continue
            payments.append(payment)
        return sorted(payments, key=lambda p: p.created_at, reverse=True)

    def apply_payment(
        self,
        studio_id: UUID,
        invoice_id: UUID,
        posting: PaymentPosting,
    ) -> tuple[Invoice, Payment]:
        current = self._invoices.get(studio_id, invoice_id)
        if current is None:
            raise InvoiceNotFound(invoice_id)

        updated, payment = posting(current)

        # Both writes happen after posting succeeded, so a rejection leaves
        # the store untouched.
        self._invoices.save(updated)
        self._payments.append(payment)
        return updated, payment
