"""Payment domain models.

A payment is a discrete amount received against one invoice. Payments are
append-only: corrections are new payments, never edits.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class PaymentMethod(str, Enum):
    """How the money was received."""

    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHECK = "check"
    OTHER = "other"


class PaymentCreate(BaseModel):
    """
    Data required to record a payment.

    amount_cents is deliberately unconstrained here: the ledger owns the
    amount rules and reports violations as InvalidAmount.
    """

    amount_cents: int
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    reference: str | None = Field(None, max_length=200)
    notes: str | None = Field(None, max_length=2000)

    model_config = {"extra": "forbid"}


class Payment(BaseModel):
    """Full payment entity as stored."""

    id: UUID
    studio_id: UUID
    invoice_id: UUID
    amount_cents: int = Field(..., gt=0)
    method: PaymentMethod
    reference: str | None = None
    notes: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
