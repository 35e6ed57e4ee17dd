"""Tests for the PostgreSQL repositories against a mocked client."""

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from clients.postgres_client import PostgresClient
from core.exceptions import InvoiceNotFound
from core.models import InvoiceStatus, Payment, PaymentMethod
from core.repositories import (
    InvoiceFilters,
    PostgresInvoiceRepository,
    PostgresPaymentRepository,
)


@pytest.fixture
def postgres():
    return MagicMock(spec=PostgresClient)


@pytest.fixture
def cursor(postgres):
    cur = MagicMock()
    postgres.transaction.return_value.__enter__.return_value = cur
    return cur


class TestPostgresInvoiceRepository:

    def test_get_validates_row(self, postgres, make_invoice, studio_id):
        invoice = make_invoice()
        postgres.execute_single.return_value = invoice.model_dump()

        assert PostgresInvoiceRepository(postgres).get(studio_id, invoice.id) == invoice

        query, params = postgres.execute_single.call_args.args
        assert "studio_id = %s" in query
        assert params == (invoice.id, studio_id)

    def test_get_missing_returns_none(self, postgres, studio_id):
        postgres.execute_single.return_value = None
        assert PostgresInvoiceRepository(postgres).get(studio_id, uuid4()) is None

    def test_find_builds_filters(self, postgres, studio_id):
        postgres.execute.return_value = []

        PostgresInvoiceRepository(postgres).find(
            studio_id, InvoiceFilters(status=InvoiceStatus.SENT, search="50%_off")
        )

        query, params = postgres.execute.call_args.args
        assert "status = %s" in query
        assert "ILIKE" in query
        assert params == (studio_id, "sent", "%50\\%\\_off%", "%50\\%\\_off%")

    def test_add_inserts_status_value(self, postgres, make_invoice):
        invoice = make_invoice()
        postgres.execute_returning.return_value = [invoice.model_dump()]

        PostgresInvoiceRepository(postgres).add(invoice)

        query, params = postgres.execute_returning.call_args.args
        assert query.strip().startswith("INSERT INTO invoices")
        assert "sent" in params

    def test_save_missing_raises(self, postgres, make_invoice):
        postgres.execute_returning.return_value = []
        with pytest.raises(InvoiceNotFound):
            PostgresInvoiceRepository(postgres).save(make_invoice())

    def test_delete_reports_outcome(self, postgres, studio_id):
        postgres.execute_returning.return_value = []
        assert PostgresInvoiceRepository(postgres).delete(studio_id, uuid4()) is False

    def test_latest_number(self, postgres, studio_id):
        postgres.execute_scalar.return_value = "INV-2026-00007"
        assert PostgresInvoiceRepository(postgres).latest_number(studio_id, "INV-2026-") == "INV-2026-00007"

        query = postgres.execute_scalar.call_args.args[0]
        assert "ORDER BY length(invoice_number) DESC, invoice_number DESC" in query


class TestPostgresPaymentRepository:

    def test_apply_payment_locks_row_inside_transaction(self, postgres, cursor, make_invoice, studio_id):
        invoice = make_invoice(total=45000)
        updated = invoice.evolve(paid_amount_cents=1000)
        payment = Payment(
            id=uuid4(), studio_id=studio_id, invoice_id=invoice.id, amount_cents=1000,
            method=PaymentMethod.CARD, created_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
        )
        cursor.execute_single.side_effect = [invoice.model_dump(), updated.model_dump()]

        saved, recorded = PostgresPaymentRepository(postgres).apply_payment(
            studio_id, invoice.id, lambda current: (updated, payment)
        )

        lock_query = cursor.execute_single.call_args_list[0].args[0]
        assert "FOR UPDATE" in lock_query
        insert_query = cursor.execute.call_args.args[0]
        assert "INSERT INTO payments" in insert_query
        assert saved.paid_amount_cents == 1000
        assert recorded is payment

    def test_apply_payment_missing_invoice(self, postgres, cursor, studio_id):
        cursor.execute_single.return_value = None
        posting = MagicMock()

        with pytest.raises(InvoiceNotFound):
            PostgresPaymentRepository(postgres).apply_payment(studio_id, uuid4(), posting)

        posting.assert_not_called()
        cursor.execute.assert_not_called()

    def test_list_for_studio_range(self, postgres, studio_id):
        postgres.execute.return_value = []
        start = datetime(2026, 1, 1).date()

        PostgresPaymentRepository(postgres).list_for_studio(studio_id, start)

        query, params = postgres.execute.call_args.args
        assert "created_at::date >= %s" in query
        assert params == (studio_id, start)

    def test_list_for_studio_by_method(self, postgres, studio_id):
        postgres.execute.return_value = []

        PostgresPaymentRepository(postgres).list_for_studio(studio_id, method=PaymentMethod.CARD)

        query, params = postgres.execute.call_args.args
        assert "method = %s" in query
        assert params == (studio_id, "card")
