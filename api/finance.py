"""GET /api/finance/*: derived finance views."""

from uuid import UUID

from fastapi import APIRouter, Query, Request

from api.base import success_response
from core.analytics import convert_for_display


def create_finance_router(services: dict, config) -> APIRouter:
    router = APIRouter(prefix="/finance")

    finance = services["finance"]
    ledger = services["payment"]

    def _respond(request: Request, data):
        return success_response(
            data, getattr(request.state, "request_id", None)
        ).model_dump(mode="json")

    @router.get("/aging")
    async def aging(request: Request):
        return _respond(request, finance.aging().model_dump(mode="json"))

    @router.get("/reconciliation")
    async def reconciliation(request: Request):
        return _respond(request, finance.reconciliation().model_dump(mode="json"))

    @router.get("/revenue")
    async def revenue(request: Request, year: int | None = Query(None, ge=1900, le=9999)):
        points = finance.revenue(year=year)
        return _respond(request, [p.model_dump(mode="json") for p in points])

    @router.get("/tax")
    async def tax(
        request: Request,
        month: int | None = Query(None, ge=1, le=12),
        year: int | None = Query(None, ge=1900, le=9999),
    ):
        return _respond(request, finance.tax(month=month, year=year).model_dump(mode="json"))

    @router.get("/overview")
    async def overview(request: Request):
        dashboard = finance.dashboard()
        data = dashboard.model_dump(mode="json")
        # Display-currency figures for the headline cards only
        data["display"] = {
            "currency": config.display_currency,
            "outstanding_cents": convert_for_display(dashboard.stats.outstanding_cents, config),
            "ytd_revenue_cents": convert_for_display(dashboard.stats.ytd_revenue_cents, config),
        }
        return _respond(request, data)

    @router.get("/ledger/{invoice_id}")
    async def ledger_check(request: Request, invoice_id: UUID):
        check = ledger.verify(invoice_id)
        data = check.model_dump(mode="json")
        data["balanced"] = check.balanced
        data["discrepancy_cents"] = check.discrepancy_cents
        data["payments"] = [
            p.model_dump(mode="json") for p in ledger.list_for_invoice(invoice_id)
        ]
        return _respond(request, data)

    return router
