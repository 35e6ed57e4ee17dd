"""Invoice domain models.

All amounts are stored in cents (integer) to avoid floating point issues.
450.00 = 45000 cents. Tax rate is basis points (10000 = 100%).

Monetary invariants, enforced on every validated Invoice:
- total = subtotal - discount + tax
- 0 <= paid <= total
"""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


def compute_tax_cents(subtotal_cents: int, discount_amount_cents: int, tax_rate_bps: int) -> int:
    """Tax on the discounted subtotal, rounded down to the cent."""
    return ((subtotal_cents - discount_amount_cents) * tax_rate_bps) // 10000


def compute_total_cents(subtotal_cents: int, discount_amount_cents: int, tax_amount_cents: int) -> int:
    return subtotal_cents - discount_amount_cents + tax_amount_cents


class LineItemInput(BaseModel):
    """One billed line on a new or edited invoice."""

    description: str = Field(..., min_length=1, max_length=500)
    quantity: int = Field(1, gt=0)
    unit_price_cents: int = Field(..., ge=0)

    @property
    def total_cents(self) -> int:
        return self.quantity * self.unit_price_cents


class InvoiceCreate(BaseModel):
    """Data required to create a draft invoice."""

    client_id: UUID
    booking_id: UUID | None = None
    issue_date: date | None = None  # Defaults to today
    due_date: date | None = None  # Defaults to issue_date + payment term
    line_items: list[LineItemInput] = Field(..., min_length=1)
    tax_rate_bps: int | None = Field(None, ge=0, le=10000)  # None = studio default
    discount_amount_cents: int = Field(0, ge=0)
    notes: str | None = Field(None, max_length=2000)
    terms: str | None = Field(None, max_length=2000)

    model_config = {"extra": "forbid"}

    @property
    def subtotal_cents(self) -> int:
        return sum(item.total_cents for item in self.line_items)

    @model_validator(mode="after")
    def _check_amounts_and_dates(self) -> "InvoiceCreate":
        if self.subtotal_cents <= 0:
            raise ValueError("Invoice subtotal must be greater than zero")
        # A zero total could never be settled through the ledger
        if self.discount_amount_cents >= self.subtotal_cents:
            raise ValueError("Discount must be less than the invoice subtotal")
        if self.issue_date and self.due_date and self.due_date < self.issue_date:
            raise ValueError("Due date cannot be before issue date")
        return self


class InvoiceUpdate(BaseModel):
    """
    Edit of a draft invoice. Only provided fields change.

    Monetary edits (line items, tax rate, discount) recompute tax and total.
    """

    client_id: UUID | None = None
    booking_id: UUID | None = None
    issue_date: date | None = None
    due_date: date | None = None
    line_items: list[LineItemInput] | None = Field(None, min_length=1)
    tax_rate_bps: int | None = Field(None, ge=0, le=10000)
    discount_amount_cents: int | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=2000)
    terms: str | None = Field(None, max_length=2000)

    model_config = {"extra": "forbid"}


class Invoice(BaseModel):
    """Full invoice entity as stored."""

    id: UUID
    studio_id: UUID
    client_id: UUID
    booking_id: UUID | None = None
    invoice_number: str
    status: InvoiceStatus
    issue_date: date
    due_date: date
    subtotal_cents: int = Field(..., ge=0)
    tax_rate_bps: int = Field(0, ge=0)
    tax_amount_cents: int = Field(0, ge=0)
    discount_amount_cents: int = Field(0, ge=0)
    total_amount_cents: int = Field(..., ge=0)
    paid_amount_cents: int = Field(0, ge=0)
    notes: str | None = None
    terms: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def _check_invariants(self) -> "Invoice":
        expected = compute_total_cents(
            self.subtotal_cents, self.discount_amount_cents, self.tax_amount_cents
        )
        if self.total_amount_cents != expected:
            raise ValueError(
                f"total_amount_cents {self.total_amount_cents} does not equal "
                f"subtotal - discount + tax ({expected})"
            )
        if self.paid_amount_cents > self.total_amount_cents:
            raise ValueError("paid_amount_cents cannot exceed total_amount_cents")
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be earlier than created_at")
        return self

    def evolve(self, **changes: Any) -> "Invoice":
        """Validated copy with the given fields replaced."""
        return Invoice.model_validate({**self.model_dump(), **changes})

    @property
    def balance_due_cents(self) -> int:
        """Outstanding amount in cents."""
        return self.total_amount_cents - self.paid_amount_cents

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    @property
    def is_outstanding(self) -> bool:
        """Sent or overdue with money still owed."""
        return (
            self.status in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE)
            and self.paid_amount_cents < self.total_amount_cents
        )
