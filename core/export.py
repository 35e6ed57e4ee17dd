"""Flat CSV export of the finance page.

Layout: a title block, one row per invoice, then fixed summary sections for
tax, aging and reconciliation. Amounts use a decimal comma so the file opens
correctly in French-locale spreadsheets; the BOM tells them it is UTF-8.
"""

import csv
import io
from datetime import date
from typing import Iterable

from core.models import AgingReport, Invoice, ReconciliationReport, TaxSummary
from utils.money import format_cents

BOM = "\ufeff"

INVOICE_HEADER = [
    "Numéro", "Client", "Statut", "Date d'émission", "Date d'échéance",
    "Sous-total", "Remise", "TVA", "Total", "Payé", "Restant", "Notes",
]

AGING_LABELS = {
    "current": "0-30 jours",
    "days31_60": "31-60 jours",
    "days61_90": "61-90 jours",
    "days90plus": "90+ jours",
}

RECONCILIATION_LABELS = {
    "matched": "Rapprochées",
    "partial": "Partielles",
    "unmatched": "Non rapprochées",
}


def _amount(cents: int) -> str:
    return format_cents(cents, decimal_separator=",")


def _rate(bps: int) -> str:
    units, rest = divmod(bps, 100)
    return f"{units},{rest:02d} %"


def invoice_row(invoice: Invoice) -> list[str]:
    return [
        invoice.invoice_number,
        str(invoice.client_id),
        invoice.status.value,
        invoice.issue_date.isoformat(),
        invoice.due_date.isoformat(),
        _amount(invoice.subtotal_cents),
        _amount(invoice.discount_amount_cents),
        _amount(invoice.tax_amount_cents),
        _amount(invoice.total_amount_cents),
        _amount(invoice.paid_amount_cents),
        _amount(invoice.balance_due_cents),
        invoice.notes or "",
    ]


def export_report(
    invoices: Iterable[Invoice],
    aging: AgingReport,
    reconciliation: ReconciliationReport,
    tax: TaxSummary,
    generated_on: date,
    delimiter: str = ";",
    include_bom: bool = True,
) -> bytes:
    """
    Serialize invoices and summaries to CSV bytes.

    Fields containing the delimiter, a quote or a line break are quoted
    with inner quotes doubled, so free text round-trips through any CSV
    reader.

    Args:
        invoices: Invoices to list, in the order given
        aging: Aging report for the summary section
        reconciliation: Reconciliation report for the summary section
        tax: Tax summary for the summary section
        generated_on: Date printed in the title block
        delimiter: Field separator
        include_bom: Prefix the output with a UTF-8 byte-order mark

    Returns:
        UTF-8 encoded CSV
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=delimiter,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )

    writer.writerow(["Rapport financier"])
    writer.writerow(["Généré le", generated_on.isoformat()])
    writer.writerow([])

    writer.writerow(["Factures"])
    writer.writerow(INVOICE_HEADER)
    for invoice in invoices:
        writer.writerow(invoice_row(invoice))
    writer.writerow([])

    writer.writerow(["TVA", f"{tax.month:02d}/{tax.year}"])
    writer.writerow(["Taux", _rate(tax.tax_rate_bps)])
    writer.writerow(["Chiffre d'affaires brut", _amount(tax.gross_revenue_cents)])
    writer.writerow(["TVA collectée", _amount(tax.tax_collected_cents)])
    writer.writerow(["Chiffre d'affaires net", _amount(tax.net_revenue_cents)])
    writer.writerow([])

    writer.writerow(["Balance âgée", "Montant", "Nombre"])
    for name, bucket in aging.buckets().items():
        writer.writerow([AGING_LABELS[name], _amount(bucket.amount_cents), bucket.count])
    writer.writerow(["Total", _amount(aging.total_cents), ""])
    writer.writerow([])

    writer.writerow(["Rapprochement", "Nombre", "Montant", "Pourcentage"])
    for name, category in reconciliation.categories().items():
        writer.writerow([
            RECONCILIATION_LABELS[name],
            category.count,
            _amount(category.amount_cents),
            f"{category.percent} %",
        ])

    text = buffer.getvalue()
    if include_bom:
        text = BOM + text
    return text.encode("utf-8")


def report_filename(today: date) -> str:
    return f"rapport-finance-{today.isoformat()}.csv"
