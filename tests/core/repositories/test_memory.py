"""Tests for the in-memory repositories."""

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from core.exceptions import InvalidAmount, InvoiceNotFound
from core.models import InvoiceStatus, Payment, PaymentMethod
from core.repositories import (
    InMemoryInvoiceRepository,
    InMemoryPaymentRepository,
    InvoiceFilters,
)


@pytest.fixture
def repo():
    return InMemoryInvoiceRepository()


@pytest.fixture
def payments(repo):
    return InMemoryPaymentRepository(repo)


def _payment(invoice, amount, at, method=PaymentMethod.CASH):
    return Payment(
        id=uuid4(), studio_id=invoice.studio_id, invoice_id=invoice.id,
        amount_cents=amount, method=method, created_at=at,
    )


# =============================================================================
# INVOICES
# =============================================================================


class TestInvoiceRepository:

    def test_add_then_get(self, repo, make_invoice, studio_id):
        invoice = repo.add(make_invoice())
        assert repo.get(studio_id, invoice.id) == invoice

    def test_get_is_studio_scoped(self, repo, make_invoice):
        invoice = repo.add(make_invoice())
        assert repo.get(uuid4(), invoice.id) is None

    def test_add_duplicate_rejected(self, repo, make_invoice):
        invoice = repo.add(make_invoice())
        with pytest.raises(ValueError, match="already exists"):
            repo.add(invoice)

    def test_save_unknown_raises(self, repo, make_invoice):
        with pytest.raises(InvoiceNotFound):
            repo.save(make_invoice())

    def test_delete(self, repo, make_invoice, studio_id):
        invoice = repo.add(make_invoice())
        assert repo.delete(studio_id, invoice.id) is True
        assert repo.delete(studio_id, invoice.id) is False

    def test_find_newest_first(self, repo, make_invoice, studio_id):
        older = repo.add(make_invoice(issue_date=date(2026, 1, 5)))
        newer = repo.add(make_invoice(issue_date=date(2026, 2, 5)))
        assert repo.find(studio_id) == [newer, older]

    def test_find_with_filters(self, repo, make_invoice, studio_id):
        repo.add(make_invoice(status=InvoiceStatus.DRAFT))
        sent = repo.add(make_invoice(status=InvoiceStatus.SENT, notes="Mixing session"))

        assert repo.find(studio_id, InvoiceFilters(status=InvoiceStatus.SENT)) == [sent]
        assert repo.find(studio_id, InvoiceFilters(search="MIXING")) == [sent]

    def test_latest_number(self, repo, make_invoice, studio_id):
        repo.add(make_invoice(number="INV-2026-00002"))
        repo.add(make_invoice(number="INV-2026-00010"))
        repo.add(make_invoice(number="INV-2025-00099"))

        assert repo.latest_number(studio_id, "INV-2026-") == "INV-2026-00010"
        assert repo.latest_number(studio_id, "INV-2027-") is None

    def test_latest_number_past_five_digits(self, repo, make_invoice, studio_id):
        repo.add(make_invoice(number="INV-2026-99999"))
        repo.add(make_invoice(number="INV-2026-100000"))

        assert repo.latest_number(studio_id, "INV-2026-") == "INV-2026-100000"


class TestInvoiceFilters:

    def test_date_range_inclusive(self, make_invoice):
        filters = InvoiceFilters(date_from=date(2026, 1, 1), date_to=date(2026, 1, 31))
        assert filters.matches(make_invoice(issue_date=date(2026, 1, 1)))
        assert filters.matches(make_invoice(issue_date=date(2026, 1, 31)))
        assert not filters.matches(make_invoice(issue_date=date(2026, 2, 1)))

    def test_rejects_inverted_range(self):
        with pytest.raises(ValueError, match="date_to"):
            InvoiceFilters(date_from=date(2026, 2, 1), date_to=date(2026, 1, 1))

    def test_search_matches_number(self, make_invoice):
        invoice = make_invoice(number="INV-2026-00042")
        assert InvoiceFilters(search="00042").matches(invoice)
        assert not InvoiceFilters(search="00043").matches(invoice)


# =============================================================================
# PAYMENTS
# =============================================================================


class TestPaymentRepository:

    def test_apply_payment_persists_both(self, repo, payments, make_invoice, studio_id):
        invoice = repo.add(make_invoice(total=45000))
        now = datetime(2026, 2, 1, tzinfo=timezone.utc)

        def posting(current):
            return current.evolve(paid_amount_cents=1000), _payment(current, 1000, now)

        updated, payment = payments.apply_payment(studio_id, invoice.id, posting)

        assert repo.get(studio_id, invoice.id).paid_amount_cents == 1000
        assert payments.list_for_invoice(studio_id, invoice.id) == [payment]
        assert updated.paid_amount_cents == 1000

    def test_rejected_posting_writes_nothing(self, repo, payments, make_invoice, studio_id):
        invoice = repo.add(make_invoice(total=45000))

        def posting(current):
            raise InvalidAmount("nope")

        with pytest.raises(InvalidAmount):
            payments.apply_payment(studio_id, invoice.id, posting)

        assert repo.get(studio_id, invoice.id) == invoice
        assert payments.list_for_invoice(studio_id, invoice.id) == []

    def test_apply_payment_unknown_invoice(self, payments, studio_id):
        with pytest.raises(InvoiceNotFound):
            payments.apply_payment(studio_id, uuid4(), lambda current: None)

    def test_list_for_studio_half_open_range(self, repo, payments, make_invoice, studio_id):
        invoice = repo.add(make_invoice(total=45000))
        start = datetime(2026, 2, 1, 12, tzinfo=timezone.utc)
        for day in range(3):
            payments._payments.append(_payment(invoice, 100, start + timedelta(days=day)))

        in_range = payments.list_for_studio(studio_id, date(2026, 2, 1), date(2026, 2, 3))

        assert [p.created_at.day for p in in_range] == [2, 1]

    def test_list_for_studio_by_method(self, repo, payments, make_invoice, studio_id):
        invoice = repo.add(make_invoice(total=45000))
        at = datetime(2026, 2, 1, 12, tzinfo=timezone.utc)
        payments._payments.append(_payment(invoice, 100, at))
        card = _payment(invoice, 200, at + timedelta(hours=1), PaymentMethod.CARD)
        payments._payments.append(card)

        assert payments.list_for_studio(studio_id, method=PaymentMethod.CARD) == [card]
        assert len(payments.list_for_studio(studio_id)) == 2
