"""GET /api/reports/finance.csv: downloadable finance report."""

from datetime import date

from fastapi import APIRouter, Query
from starlette.responses import Response

from core.models import InvoiceStatus
from core.repositories import InvoiceFilters


def create_reports_router(services: dict) -> APIRouter:
    router = APIRouter(prefix="/reports")

    finance = services["finance"]

    @router.get("/finance.csv")
    async def finance_csv(
        status: InvoiceStatus | None = Query(None),
        date_from: date | None = Query(None),
        date_to: date | None = Query(None),
        search: str | None = Query(None, max_length=200),
    ):
        filters = None
        if any(v is not None for v in (status, date_from, date_to, search)):
            filters = InvoiceFilters(
                status=status, date_from=date_from, date_to=date_to, search=search
            )

        filename, content = finance.export(filters)
        return Response(
            content=content,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    return router
