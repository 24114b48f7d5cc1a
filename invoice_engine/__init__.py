"""GST invoice engine: tax computation, invoice numbering, integrity hashing."""

from invoice_engine.core.errors import (
    AllocationError,
    IntegrityError,
    InvalidInvoiceError,
    InvoiceEngineError,
    TransientStoreError,
    ValidationError,
)
from invoice_engine.domain.models.finalized_invoice import FinalizedInvoice
from invoice_engine.domain.models.invoice import (
    ComputedLineItem,
    Customer,
    InvoiceCalculation,
    InvoiceTotals,
    LineItem,
    ResolvedRate,
)
from invoice_engine.domain.models.rate_table import RateTable
from invoice_engine.domain.services.gst_calculator import compute_invoice_totals, compute_simple_totals
from invoice_engine.domain.services.invoice_finalizer import finalize_invoice
from invoice_engine.domain.services.invoice_integrity import (
    canonical_view,
    compute_hash,
    ensure_integrity,
    verify_hash,
)
from invoice_engine.domain.services.invoice_numbering import SequenceAllocator, next_invoice_number

__all__ = [
    "AllocationError",
    "ComputedLineItem",
    "Customer",
    "FinalizedInvoice",
    "IntegrityError",
    "InvalidInvoiceError",
    "InvoiceCalculation",
    "InvoiceEngineError",
    "InvoiceTotals",
    "LineItem",
    "RateTable",
    "ResolvedRate",
    "SequenceAllocator",
    "TransientStoreError",
    "ValidationError",
    "canonical_view",
    "compute_hash",
    "compute_invoice_totals",
    "compute_simple_totals",
    "ensure_integrity",
    "finalize_invoice",
    "next_invoice_number",
    "verify_hash",
]
