"""POST /api/actions: unified mutation endpoint."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import success_response
from core.models import InvoiceCreate, InvoiceUpdate, PaymentCreate


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict = {}


def _id(data: dict, key: str = "id") -> UUID:
    value = data.pop(key, None)
    if value is None:
        raise ValueError(f"'{key}' is required")
    return UUID(str(value))


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "invoice": InvoiceHandler(services["invoice"]),
        "payment": PaymentHandler(services["payment"]),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}")
        result = method(dict(body.data))
        return success_response(
            result, getattr(request.state, "request_id", None)
        ).model_dump(mode="json")

    return router


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class InvoiceHandler:
    ALLOWED_ACTIONS = {
        "create", "update", "send", "mark_paid", "mark_overdue",
        "cancel", "delete", "sweep_overdue",
    }

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        invoice = self.service.create(InvoiceCreate(**data))
        return invoice.model_dump(mode="json")

    def _handle_update(self, data: dict):
        invoice_id = _id(data)
        invoice = self.service.update(invoice_id, InvoiceUpdate(**data))
        return invoice.model_dump(mode="json")

    def _handle_send(self, data: dict):
        invoice = self.service.send(_id(data))
        return invoice.model_dump(mode="json")

    def _handle_mark_paid(self, data: dict):
        invoice_id = _id(data)
        paid_amount_cents = data.get("paid_amount_cents")
        if paid_amount_cents is not None and (
            isinstance(paid_amount_cents, bool) or not isinstance(paid_amount_cents, int)
        ):
            raise ValueError("'paid_amount_cents' must be an integer number of cents")
        invoice = self.service.mark_paid(invoice_id, paid_amount_cents)
        return invoice.model_dump(mode="json")

    def _handle_mark_overdue(self, data: dict):
        invoice = self.service.mark_overdue(_id(data))
        return invoice.model_dump(mode="json")

    def _handle_cancel(self, data: dict):
        invoice = self.service.cancel(_id(data))
        return invoice.model_dump(mode="json")

    def _handle_delete(self, data: dict):
        invoice = self.service.delete(_id(data))
        return {"deleted": True, "id": str(invoice.id)}

    def _handle_sweep_overdue(self, data: dict):
        today = data.get("today")
        flagged = self.service.sweep_overdue(
            today=date.fromisoformat(today) if today else None
        )
        return {
            "flagged": len(flagged),
            "invoices": [invoice.model_dump(mode="json") for invoice in flagged],
        }


class PaymentHandler:
    ALLOWED_ACTIONS = {"record"}

    def __init__(self, ledger):
        self.ledger = ledger

    def _handle_record(self, data: dict):
        invoice_id = _id(data, "invoice_id")
        invoice, payment = self.ledger.record_payment(invoice_id, PaymentCreate(**data))
        return {
            "invoice": invoice.model_dump(mode="json"),
            "payment": payment.model_dump(mode="json"),
        }
