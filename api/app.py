"""FastAPI application factory and service wiring."""

import logging

from fastapi import FastAPI

from api.actions import create_actions_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.finance import create_finance_router
from api.middleware import RequestIDMiddleware, StudioContextMiddleware
from api.reports import create_reports_router
from core.config import FinanceConfig
from core.event_bus import EventBus
from core.handlers.reminder_handlers import ReminderLog, register_reminder_handlers
from core.repositories import (
    InMemoryInvoiceRepository,
    InMemoryPaymentRepository,
    PostgresInvoiceRepository,
    PostgresPaymentRepository,
)
from core.services.finance_service import FinanceService
from core.services.invoice_service import InvoiceService
from core.services.payment_service import PaymentLedger

logger = logging.getLogger(__name__)


def build_services(config: FinanceConfig, postgres=None, event_bus: EventBus | None = None) -> dict:
    """
    Wire repositories, the event bus and services.

    Uses PostgreSQL when a client is given, in-memory storage otherwise.
    """
    event_bus = event_bus or EventBus()
    reminders = ReminderLog()
    register_reminder_handlers(event_bus, reminders)

    if postgres is not None:
        invoices = PostgresInvoiceRepository(postgres)
        payments = PostgresPaymentRepository(postgres)
    else:
        logger.warning("No database configured; records are kept in memory only")
        invoices = InMemoryInvoiceRepository()
        payments = InMemoryPaymentRepository(invoices)

    return {
        "invoice": InvoiceService(invoices, event_bus, config),
        "payment": PaymentLedger(invoices, payments, event_bus),
        "finance": FinanceService(invoices, config, reminders),
    }


def create_app(services: dict, config: FinanceConfig) -> FastAPI:
    """
    Build the API.

    Args:
        services: {"invoice": InvoiceService, "payment": PaymentLedger,
                   "finance": FinanceService}
        config: Finance configuration

    Returns:
        Configured FastAPI app with middleware, error handlers and routes
    """
    app = FastAPI(title="Studio Finance")

    # Added last runs first: request IDs exist before the studio check
    app.add_middleware(StudioContextMiddleware)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_actions_router(services), prefix="/api")
    app.include_router(create_data_router(services), prefix="/api")
    app.include_router(create_finance_router(services, config), prefix="/api")
    app.include_router(create_reports_router(services), prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    logger.info("API ready (ledger currency %s)", config.ledger_currency)
    return app


def create_default_app() -> FastAPI:
    """App factory reading configuration from the environment."""
    from clients.postgres_client import PostgresClient
    from core.config import configure_logging, load_config

    config = load_config()
    configure_logging(config.log_level)
    postgres = PostgresClient(config.database_url) if config.database_url else None
    return create_app(build_services(config, postgres), config)
