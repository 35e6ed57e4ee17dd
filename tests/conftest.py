"""Shared test fixtures for the finance test suite."""

from datetime import date, datetime, timezone
from uuid import UUID, uuid4

import pytest

from core.models import Invoice, InvoiceStatus, compute_tax_cents, compute_total_cents
from utils.studio_context import studio_context, clear_current_studio_id


# =============================================================================
# TEST STUDIO CONSTANTS
# =============================================================================

# Primary test studio - use for single-studio tests
TEST_STUDIO_ID = UUID("00000000-0000-0000-0000-000000000001")

# Secondary test studio - use for isolation tests
TEST_STUDIO_B_ID = UUID("00000000-0000-0000-0000-000000000002")

TEST_CLIENT_ID = UUID("00000000-0000-0000-0000-0000000000c1")

# Fixed clock for deterministic lifecycle and aging tests
FIXED_NOW = datetime(2026, 2, 20, 10, 0, tzinfo=timezone.utc)
FIXED_TODAY = date(2026, 2, 20)


def build_invoice(
    *,
    total: int | None = None,
    subtotal: int = 45000,
    discount: int = 0,
    tax_rate_bps: int = 0,
    paid: int = 0,
    status: InvoiceStatus = InvoiceStatus.SENT,
    issue_date: date = date(2026, 1, 1),
    due_date: date | None = None,
    studio_id: UUID = TEST_STUDIO_ID,
    client_id: UUID = TEST_CLIENT_ID,
    number: str | None = None,
    notes: str | None = None,
    created_at: datetime = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc),
) -> Invoice:
    """
    Build a valid Invoice.

    Pass `total` to get an untaxed, undiscounted invoice of exactly that
    amount; otherwise the total is derived from subtotal, discount and rate.
    """
    if total is not None:
        subtotal, discount, tax_rate_bps = total, 0, 0
    tax = compute_tax_cents(subtotal, discount, tax_rate_bps)
    return Invoice(
        id=uuid4(),
        studio_id=studio_id,
        client_id=client_id,
        invoice_number=number or f"INV-{issue_date.year}-{uuid4().int % 100000:05d}",
        status=status,
        issue_date=issue_date,
        due_date=due_date or issue_date,
        subtotal_cents=subtotal,
        tax_rate_bps=tax_rate_bps,
        tax_amount_cents=tax,
        discount_amount_cents=discount,
        total_amount_cents=compute_total_cents(subtotal, discount, tax),
        paid_amount_cents=paid,
        notes=notes,
        created_at=created_at,
        updated_at=created_at,
    )


# =============================================================================
# STUDIO CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_studio_context():
    """Ensure clean studio context before and after each test."""
    clear_current_studio_id()
    yield
    clear_current_studio_id()


@pytest.fixture
def studio_id() -> UUID:
    """The primary test studio's ID."""
    return TEST_STUDIO_ID


@pytest.fixture
def as_test_studio(studio_id):
    """Run the test inside the primary studio's context."""
    with studio_context(studio_id):
        yield studio_id


@pytest.fixture
def as_test_studio_b():
    """Run the test inside the secondary studio's context."""
    with studio_context(TEST_STUDIO_B_ID):
        yield TEST_STUDIO_B_ID


@pytest.fixture
def make_invoice():
    """Factory fixture around build_invoice."""
    return build_invoice


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fixed_today() -> date:
    return FIXED_TODAY
