"""Invoice and payment record repositories."""

from core.repositories.base import (
    InvoiceFilters,
    InvoiceRepository,
    PaymentPosting,
    PaymentRepository,
)
from core.repositories.memory import InMemoryInvoiceRepository, InMemoryPaymentRepository
from core.repositories.postgres import PostgresInvoiceRepository, PostgresPaymentRepository
