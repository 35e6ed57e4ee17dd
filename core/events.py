"""
Domain events for the finance engine.

Immutable event objects that represent state changes to invoices and
payments. Services publish what happened; handlers react without the
publisher knowing who's listening.

Event Categories:
- InvoiceEvent: Invoice lifecycle (create, send, paid, overdue, cancel, delete)
- PaymentEvent: Payments recorded by the ledger

Events carry the full domain object so handlers don't need to re-fetch state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class FinanceEvent:
    """Base class for all finance domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


# =============================================================================
# INVOICE EVENTS
# =============================================================================


@dataclass(frozen=True)
class InvoiceEvent(FinanceEvent):
    """Events related to invoice lifecycle."""
    invoice: Any = None  # Invoice, Any to keep events import-light

    @classmethod
    def create(cls, invoice: Any):
        return cls(invoice=invoice)


@dataclass(frozen=True)
class InvoiceCreated(InvoiceEvent):
    """A draft invoice was created."""


@dataclass(frozen=True)
class InvoiceSent(InvoiceEvent):
    """Invoice was sent to the client."""


@dataclass(frozen=True)
class InvoicePaid(InvoiceEvent):
    """Invoice reached paid, explicitly or by ledger auto-transition."""


@dataclass(frozen=True)
class InvoiceOverdue(InvoiceEvent):
    """A sent invoice passed its due date and was flagged overdue."""


@dataclass(frozen=True)
class InvoiceCancelled(InvoiceEvent):
    """Invoice was cancelled."""


@dataclass(frozen=True)
class InvoiceDeleted(InvoiceEvent):
    """A draft invoice was removed. Carries the last known state."""


# =============================================================================
# PAYMENT EVENTS
# =============================================================================


@dataclass(frozen=True)
class PaymentRecorded(FinanceEvent):
    """The ledger applied a payment to an invoice."""
    payment: Any = None
    invoice: Any = None

    @classmethod
    def create(cls, payment: Any, invoice: Any) -> "PaymentRecorded":
        return cls(payment=payment, invoice=invoice)
