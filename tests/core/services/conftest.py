"""Service fixtures wired to in-memory repositories."""

import pytest

from core.config import FinanceConfig
from core.event_bus import EventBus
from core.handlers.reminder_handlers import ReminderLog, register_reminder_handlers
from core.repositories import InMemoryInvoiceRepository, InMemoryPaymentRepository
from core.services.finance_service import FinanceService
from core.services.invoice_service import InvoiceService
from core.services.payment_service import PaymentLedger


@pytest.fixture
def config():
    return FinanceConfig(timezone="UTC")


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def published(event_bus):
    """Names of every event published, in order."""
    names = []
    for event_type in (
        "InvoiceCreated", "InvoiceSent", "InvoicePaid", "InvoiceOverdue",
        "InvoiceCancelled", "InvoiceDeleted", "PaymentRecorded",
    ):
        event_bus.subscribe(event_type, lambda e: names.append(type(e).__name__))
    return names


@pytest.fixture
def invoice_repo():
    return InMemoryInvoiceRepository()


@pytest.fixture
def payment_repo(invoice_repo):
    return InMemoryPaymentRepository(invoice_repo)


@pytest.fixture
def reminders(event_bus):
    log = ReminderLog()
    register_reminder_handlers(event_bus, log)
    return log


@pytest.fixture
def invoice_service(invoice_repo, event_bus, config):
    return InvoiceService(invoice_repo, event_bus, config)


@pytest.fixture
def ledger(invoice_repo, payment_repo, event_bus):
    return PaymentLedger(invoice_repo, payment_repo, event_bus)


@pytest.fixture
def finance_service(invoice_repo, config, reminders):
    return FinanceService(invoice_repo, config, reminders)
