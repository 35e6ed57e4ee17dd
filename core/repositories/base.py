"""Repository interfaces for invoice and payment records.

The engine never owns storage. Services receive repositories at
construction and every call is scoped by an explicit studio_id.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Callable
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from core.models import Invoice, InvoiceStatus, Payment, PaymentMethod

# Validates a payment against the freshly loaded invoice and returns the
# updated invoice plus the new payment. Raising aborts the posting.
PaymentPosting = Callable[[Invoice], tuple[Invoice, Payment]]


class InvoiceFilters(BaseModel):
    """Invoice list filters. All optional; issue-date bounds are inclusive."""

    status: InvoiceStatus | None = None
    client_id: UUID | None = None
    date_from: date | None = None
    date_to: date | None = None
    search: str | None = Field(None, max_length=200)

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def _check_range(self) -> "InvoiceFilters":
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to cannot be before date_from")
        return self

    def matches(self, invoice: Invoice) -> bool:
        if self.status is not None and invoice.status != self.status:
            return False
        if self.client_id is not None and invoice.client_id != self.client_id:
            return False
        if self.date_from is not None and invoice.issue_date < self.date_from:
            return False
        if self.date_to is not None and invoice.issue_date > self.date_to:
            return False
        if self.search:
            query = self.search.lower()
            in_number = query in invoice.invoice_number.lower()
            in_notes = invoice.notes is not None and query in invoice.notes.lower()
            if not (in_number or in_notes):
                return False
        return True


class InvoiceRepository(ABC):
    """Persistence contract for invoices."""

    @abstractmethod
    def get(self, studio_id: UUID, invoice_id: UUID) -> Invoice | None:
        """Invoice by ID, or None if it doesn't exist in this studio."""

    @abstractmethod
    def find(self, studio_id: UUID, filters: InvoiceFilters | None = None) -> list[Invoice]:
        """Invoices matching filters, newest issue date first."""

    @abstractmethod
    def add(self, invoice: Invoice) -> Invoice:
        """Persist a new invoice."""

    @abstractmethod
    def save(self, invoice: Invoice) -> Invoice:
        """
        Overwrite an existing invoice.

        Raises:
            InvoiceNotFound: No such invoice in the invoice's studio
        """

    @abstractmethod
    def delete(self, studio_id: UUID, invoice_id: UUID) -> bool:
        """Remove an invoice. Returns False if it didn't exist."""

    @abstractmethod
    def latest_number(self, studio_id: UUID, prefix: str) -> str | None:
        """
        Highest invoice_number starting with prefix, or None.

        Compared numerically on the sequence: INV-2026-100000 ranks above
        INV-2026-99999.
        """


class PaymentRepository(ABC):
    """Persistence contract for payments."""

    @abstractmethod
    def list_for_invoice(self, studio_id: UUID, invoice_id: UUID) -> list[Payment]:
        """Payments against one invoice, oldest first."""

    @abstractmethod
    def list_for_studio(
        self,
        studio_id: UUID,
        start: date | None = None,
        end: date | None = None,
        method: PaymentMethod | None = None,
    ) -> list[Payment]:
        """Payments received in [start, end) by creation date, newest first. Optionally one method only."""

    @abstractmethod
    def apply_payment(
        self,
        studio_id: UUID,
        invoice_id: UUID,
        posting: PaymentPosting,
    ) -> tuple[Invoice, Payment]:
        """
        Load the invoice, run posting against it and persist both results
        as a single unit. Nothing is written if posting raises.

        Raises:
            InvoiceNotFound: No such invoice in this studio
        """
