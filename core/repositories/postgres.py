"""PostgreSQL repositories backed by PostgresClient.

Column names match the model field names one to one, so rows validate
straight into Invoice / Payment.
"""

import logging
from datetime import date
from uuid import UUID

from clients.postgres_client import PostgresClient
from core.exceptions import InvoiceNotFound
from core.models import Invoice, Payment, PaymentMethod
from core.repositories.base import (
    InvoiceFilters,
    InvoiceRepository,
    PaymentPosting,
    PaymentRepository,
)

logger = logging.getLogger(__name__)

_INVOICE_COLUMNS = (
    "id", "studio_id", "client_id", "booking_id", "invoice_number", "status",
    "issue_date", "due_date",
    "subtotal_cents", "tax_rate_bps", "tax_amount_cents", "discount_amount_cents",
    "total_amount_cents", "paid_amount_cents",
    "notes", "terms", "created_at", "updated_at",
)

_PAYMENT_COLUMNS = (
    "id", "studio_id", "invoice_id", "amount_cents", "method",
    "reference", "notes", "created_at",
)

# Columns a save() may change; identity and ownership are fixed at insert
_INVOICE_MUTABLE_COLUMNS = tuple(
    c for c in _INVOICE_COLUMNS if c not in {"id", "studio_id", "invoice_number", "created_at"}
)


def _invoice_params(invoice: Invoice, columns: tuple[str, ...]) -> tuple:
    data = invoice.model_dump()
    data["status"] = invoice.status.value
    return tuple(data[c] for c in columns)


_UPDATE_INVOICE_SQL = f"""
    UPDATE invoices
    SET {", ".join(f"{c} = %s" for c in _INVOICE_MUTABLE_COLUMNS)}
    WHERE id = %s AND studio_id = %s
    RETURNING *
"""


class PostgresInvoiceRepository(InvoiceRepository):
    """Invoice persistence in the invoices table."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def get(self, studio_id: UUID, invoice_id: UUID) -> Invoice | None:
        row = self.postgres.execute_single(
            "SELECT * FROM invoices WHERE id = %s AND studio_id = %s",
            (invoice_id, studio_id)
        )
        if row is None:
            return None
        return Invoice.model_validate(row)

    def find(self, studio_id: UUID, filters: InvoiceFilters | None = None) -> list[Invoice]:
        filters = filters or InvoiceFilters()
        clauses = ["studio_id = %s"]
        params: list = [studio_id]

        if filters.status is not None:
            clauses.append("status = %s")
            params.append(filters.status.value)
        if filters.client_id is not None:
            clauses.append("client_id = %s")
            params.append(filters.client_id)
        if filters.date_from is not None:
            clauses.append("issue_date >= %s")
            params.append(filters.date_from)
        if filters.date_to is not None:
            clauses.append("issue_date <= %s")
            params.append(filters.date_to)
        if filters.search:
            clauses.append("(invoice_number ILIKE %s OR notes ILIKE %s)")
            pattern = f"%{_escape_like(filters.search)}%"
            params.extend([pattern, pattern])

        rows = self.postgres.execute(
            f"""
            SELECT * FROM invoices
            WHERE {" AND ".join(clauses)}
            ORDER BY issue_date DESC, invoice_number DESC
            """,
            tuple(params)
        )
        return [Invoice.model_validate(row) for row in rows]

    def add(self, invoice: Invoice) -> Invoice:
        row = self.postgres.execute_returning(
            f"""
            INSERT INTO invoices ({", ".join(_INVOICE_COLUMNS)})
            VALUES ({", ".join(["%s"] * len(_INVOICE_COLUMNS))})
            RETURNING *
            """,
            _invoice_params(invoice, _INVOICE_COLUMNS)
        )[0]
        return Invoice.model_validate(row)

    def save(self, invoice: Invoice) -> Invoice:
        rows = self.postgres.execute_returning(
            _UPDATE_INVOICE_SQL,
            _invoice_params(invoice, _INVOICE_MUTABLE_COLUMNS) + (invoice.id, invoice.studio_id)
        )
        if not rows:
            raise InvoiceNotFound(invoice.id)
        return Invoice.model_validate(rows[0])

    def delete(self, studio_id: UUID, invoice_id: UUID) -> bool:
        rows = self.postgres.execute_returning(
            "DELETE FROM invoices WHERE id = %s AND studio_id = %s RETURNING id",
            (invoice_id, studio_id)
        )
        return len(rows) > 0

    def latest_number(self, studio_id: UUID, prefix: str) -> str | None:
        return self.postgres.execute_scalar(
            """
            SELECT invoice_number FROM invoices
            WHERE studio_id = %s AND invoice_number LIKE %s
            ORDER BY length(invoice_number) DESC, invoice_number DESC
            LIMIT 1
            """,
            (studio_id, f"{_escape_like(prefix)}%")
        )


class PostgresPaymentRepository(PaymentRepository):
    """Payment persistence in the payments table."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def list_for_invoice(self, studio_id: UUID, invoice_id: UUID) -> list[Payment]:
        rows = self.postgres.execute(
            """
            SELECT * FROM payments
            WHERE studio_id = %s AND invoice_id = %s
            ORDER BY created_at ASC
            """,
            (studio_id, invoice_id)
        )
        return [Payment.model_validate(row) for row in rows]

    def list_for_studio(
        self,
        studio_id: UUID,
        start: date | None = None,
        end: date | None = None,
        method: PaymentMethod | None = None,
    ) -> list[Payment]:
        clauses = ["studio_id = %s"]
        params: list = [studio_id]
        if method is not None:
            clauses.append("method = %s")
            params.append(method.value)
        if start is not None:
            clauses.append("created_at::date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("created_at::date < %s")
            params.append(end)

        rows = self.postgres.execute(
            f"""
            SELECT * FROM payments
            WHERE {" AND ".join(clauses)}
            ORDER BY created_at DESC
            """,
            tuple(params)
        )
        return [Payment.model_validate(row) for row in rows]

    def apply_payment(
        self,
        studio_id: UUID,
        invoice_id: UUID,
        posting: PaymentPosting,
    ) -> tuple[Invoice, Payment]:
        # Row lock serializes concurrent postings against the same invoice,
        # so the remaining-balance check always sees committed state.
        with self.postgres.transaction() as cur:
            row = cur.execute_single(
                "SELECT * FROM invoices WHERE id = %s AND studio_id = %s FOR UPDATE",
                (invoice_id, studio_id)
            )
            if row is None:
                raise InvoiceNotFound(invoice_id)

            updated, payment = posting(Invoice.model_validate(row))

            cur.execute(
                f"""
                INSERT INTO payments ({", ".join(_PAYMENT_COLUMNS)})
                VALUES ({", ".join(["%s"] * len(_PAYMENT_COLUMNS))})
                """,
                (
                    payment.id, payment.studio_id, payment.invoice_id, payment.amount_cents,
                    payment.method.value, payment.reference, payment.notes, payment.created_at,
                )
            )
            saved = cur.execute_single(
                _UPDATE_INVOICE_SQL,
                _invoice_params(updated, _INVOICE_MUTABLE_COLUMNS) + (updated.id, updated.studio_id)
            )

        return Invoice.model_validate(saved), payment


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
