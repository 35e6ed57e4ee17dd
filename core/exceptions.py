"""Typed exceptions for finance engine failures.

Every failure is a precondition violation: the requested mutation did not
happen and the record set is unchanged. Nothing here is retried.
"""


class FinanceError(Exception):
    """Base class for finance engine errors."""


class InvoiceNotFound(FinanceError):
    """No invoice with that ID in the current studio."""

    def __init__(self, invoice_id):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice {invoice_id} not found")


class InvalidTransition(FinanceError):
    """Illegal status change attempted (e.g. paying a cancelled invoice)."""

    def __init__(self, invoice_number: str, current: str, target: str):
        self.invoice_number = invoice_number
        self.current = current
        self.target = target
        super().__init__(
            f"Invoice {invoice_number} cannot move from '{current}' to '{target}'"
        )


class InvalidAmount(FinanceError):
    """
    Amount is non-positive, exceeds the remaining balance, or an explicit
    paid amount exceeds the invoice total.

    Over-payments are rejected, never clamped.
    """


class InvalidState(FinanceError):
    """Payment attempted against an invoice that is not sent or overdue."""

    def __init__(self, invoice_number: str, status: str):
        self.invoice_number = invoice_number
        self.status = status
        super().__init__(
            f"Cannot record a payment on invoice {invoice_number} "
            f"with status '{status}'. Only sent or overdue invoices accept payments."
        )


class IllegalDelete(FinanceError):
    """Only draft invoices may be deleted."""

    def __init__(self, invoice_number: str, status: str):
        self.invoice_number = invoice_number
        self.status = status
        super().__init__(
            f"Invoice {invoice_number} is '{status}' and cannot be deleted. "
            f"Cancel it instead."
        )


class UnsupportedCurrency(FinanceError):
    """Currency code has no configured exchange rate."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unsupported currency: {code}")
