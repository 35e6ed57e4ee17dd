"""
Finance read service.

Fetches the current studio's invoices and runs the pure aggregators over
them. Nothing is cached: every call recomputes from the records.
"""

import logging
from datetime import date

from core.analytics import (
    aging_report, filter_counts, finance_stats, monthly_revenue,
    reconciliation_report, reminder_stats, status_breakdown, tax_summary,
)
from core.config import FinanceConfig
from core.export import export_report, report_filename
from core.handlers.reminder_handlers import ReminderLog
from core.models import (
    AgingReport, FinanceDashboard, Invoice, ReconciliationReport, RevenuePoint, TaxSummary,
)
from core.repositories import InvoiceFilters, InvoiceRepository
from utils.studio_context import get_current_studio_id
from utils.timezone import today_in

logger = logging.getLogger(__name__)


class FinanceService:
    """Service for derived finance views and the CSV report."""

    def __init__(
        self,
        invoices: InvoiceRepository,
        config: FinanceConfig,
        reminders: ReminderLog | None = None,
    ):
        self.invoices = invoices
        self.config = config
        self.reminders = reminders or ReminderLog()

    def _records(self, filters: InvoiceFilters | None = None) -> list[Invoice]:
        return self.invoices.find(get_current_studio_id(), filters)

    def _today(self, today: date | None) -> date:
        return today or today_in(self.config.timezone)

    def aging(self, today: date | None = None) -> AgingReport:
        return aging_report(self._records(), self._today(today))

    def reconciliation(self) -> ReconciliationReport:
        return reconciliation_report(self._records())

    def revenue(self, year: int | None = None, today: date | None = None) -> list[RevenuePoint]:
        today = self._today(today)
        return monthly_revenue(self._records(), year or today.year, today)

    def tax(
        self,
        month: int | None = None,
        year: int | None = None,
        today: date | None = None,
    ) -> TaxSummary:
        """Tax summary for a month, defaulting to the current one."""
        today = self._today(today)
        return tax_summary(
            self._records(),
            month or today.month,
            year or today.year,
            self.config.default_tax_rate_bps,
        )

    def dashboard(self, today: date | None = None) -> FinanceDashboard:
        """
        Everything the finance page shows, computed from one fetch.

        Args:
            today: Reference date (defaults to the studio's local date)

        Returns:
            FinanceDashboard
        """
        today = self._today(today)
        invoices = self._records()

        return FinanceDashboard(
            as_of=today,
            stats=finance_stats(invoices, today),
            status_breakdown=status_breakdown(invoices),
            filter_counts=filter_counts(invoices),
            aging=aging_report(invoices, today),
            reconciliation=reconciliation_report(invoices),
            monthly_revenue=monthly_revenue(invoices, today.year, today),
            tax=tax_summary(invoices, today.month, today.year, self.config.default_tax_rate_bps),
            reminders=reminder_stats(invoices, self.reminders.last_reminder_at),
        )

    def export(
        self,
        filters: InvoiceFilters | None = None,
        today: date | None = None,
    ) -> tuple[str, bytes]:
        """
        Build the CSV report.

        The invoice section honours filters; the summary sections always
        cover the whole studio.

        Returns:
            (filename, CSV bytes)
        """
        today = self._today(today)
        everything = self._records()
        listed = self._records(filters) if filters is not None else everything

        content = export_report(
            listed,
            aging_report(everything, today),
            reconciliation_report(everything),
            tax_summary(everything, today.month, today.year, self.config.default_tax_rate_bps),
            generated_on=today,
            delimiter=self.config.export_delimiter,
            include_bom=self.config.export_bom,
        )
        logger.info("Exported finance report with %d invoices", len(listed))
        return report_filename(today), content
