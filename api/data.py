"""GET /api/data: unified read endpoint."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, Request

from api.base import success_response
from core.models import InvoiceStatus, PaymentMethod
from core.repositories import InvoiceFilters


VALID_TYPES = {"invoices", "payments"}


def create_data_router(services: dict) -> APIRouter:
    router = APIRouter()

    invoice_svc = services["invoice"]
    ledger = services["payment"]

    # -------------------------------------------------------------------------
    # Convenience routes (must be registered before the generic /data route)
    # -------------------------------------------------------------------------

    @router.get("/data/invoices/overdue")
    async def invoices_overdue(request: Request):
        invoices = invoice_svc.list_overdue()
        return success_response(
            [i.model_dump(mode="json") for i in invoices],
            getattr(request.state, "request_id", None),
        ).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Generic data endpoint
    # -------------------------------------------------------------------------

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        id: UUID | None = Query(None),
        status: InvoiceStatus | None = Query(None),
        client_id: UUID | None = Query(None),
        invoice_id: UUID | None = Query(None),
        method: PaymentMethod | None = Query(None),
        date_from: date | None = Query(None),
        date_to: date | None = Query(None),
        search: str | None = Query(None, max_length=200),
        limit: int = Query(50, ge=1, le=500),
        offset: int = Query(0, ge=0),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        request_id = getattr(request.state, "request_id", None)

        if type == "invoices":
            if id is not None:
                data = invoice_svc.get(id).model_dump(mode="json")
            else:
                filters = InvoiceFilters(
                    status=status,
                    client_id=client_id,
                    date_from=date_from,
                    date_to=date_to,
                    search=search,
                )
                invoices = invoice_svc.find(filters)[offset:offset + limit]
                data = [i.model_dump(mode="json") for i in invoices]
            return success_response(data, request_id).model_dump(mode="json")

        return _handle_payments(
            ledger, invoice_id, method, date_from, date_to, limit, offset, request_id
        )

    return router


def _handle_payments(ledger, invoice_id, method, date_from, date_to, limit, offset, request_id):
    if invoice_id is not None:
        payments = [
            p for p in ledger.list_for_invoice(invoice_id)
            if method is None or p.method == method
        ]
    else:
        # date_to is inclusive on the wire; the ledger takes a half-open range
        end = date.fromordinal(date_to.toordinal() + 1) if date_to else None
        payments = ledger.list_received(date_from, end, method)

    return success_response(
        [p.model_dump(mode="json") for p in payments[offset:offset + limit]],
        request_id,
    ).model_dump(mode="json")
