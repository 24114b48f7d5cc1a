# invoice_engine/core/errors.py
"""
Error taxonomy for the invoice engine.

ValidationError   -> bad caller input, rejected before computation, never retried
AllocationError   -> counter store unreachable / failed on the atomic path
IntegrityError    -> stored hash no longer matches the hashed fields
"""

from __future__ import annotations


class InvoiceEngineError(Exception):
    """Base class for all invoice engine errors."""


class ValidationError(InvoiceEngineError):
    """Raised when line items or invoice input fail validation."""

    def __init__(
        self,
        message: str,
        *,
        item_index: int | None = None,
        field: str | None = None,
    ):
        super().__init__(message)
        self.item_index = item_index
        self.field = field


class InvalidInvoiceError(ValidationError):
    """Raised when an invoice as a whole is invalid (e.g. no line items)."""


class TransientStoreError(InvoiceEngineError):
    """Raised by counter stores for failures that are safe to retry."""


class AllocationError(InvoiceEngineError):
    """Raised when an invoice number could not be allocated."""

    def __init__(self, message: str, *, scope_key: str, attempts: int = 0):
        super().__init__(message)
        self.scope_key = scope_key
        self.attempts = attempts


class IntegrityError(InvoiceEngineError):
    """Raised when an invoice's stored hash does not match its contents."""

    def __init__(
        self,
        message: str,
        *,
        invoice_number: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ):
        super().__init__(message)
        self.invoice_number = invoice_number
        self.expected = expected
        self.actual = actual
