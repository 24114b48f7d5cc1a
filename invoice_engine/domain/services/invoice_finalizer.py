# invoice_engine/domain/services/invoice_finalizer.py
"""
Invoice finalization.

Steps:
1. Validate customer and line items
2. Compute GST (or simple) totals
3. Allocate the invoice number (only after the computation succeeded,
   so rejected input never consumes a number)
4. Build the FinalizedInvoice, which stamps the integrity hash
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Literal, Mapping

from pydantic import ValidationError as PydanticValidationError

from invoice_engine.core.errors import ValidationError
from invoice_engine.domain.models.finalized_invoice import FinalizedInvoice
from invoice_engine.domain.models.invoice import Customer, LineItem
from invoice_engine.domain.models.rate_table import RateTable
from invoice_engine.domain.services.gst_calculator import compute_invoice_totals, compute_simple_totals
from invoice_engine.domain.services.invoice_numbering import SequenceAllocator

logger = logging.getLogger("invoice_finalizer")


def coerce_customer(customer: Customer | Mapping[str, Any]) -> Customer:
    if isinstance(customer, Customer):
        return customer
    try:
        return Customer.model_validate(customer)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(
            f"Invalid customer: {first.get('msg', 'invalid value')} ({loc})",
            field=f"customer.{loc}" if loc else "customer",
        ) from exc


async def finalize_invoice(
    user_id: str,
    customer: Customer | Mapping[str, Any],
    items: Iterable[LineItem | Mapping[str, Any]],
    seller_region: str | None,
    allocator: SequenceAllocator,
    *,
    invoice_date: date | None = None,
    invoice_type: Literal["gst", "simple"] = "gst",
    rate_table: RateTable | None = None,
    due_date: date | None = None,
    notes: str | None = None,
    terms: str | None = None,
    use_scan_fallback: bool = False,
) -> FinalizedInvoice:
    """
    Compute, number and hash an invoice.

    ``use_scan_fallback`` switches numbering to the racy scan-based path;
    it is the caller's explicit choice and is never made here on failure.
    """
    customer = coerce_customer(customer)
    invoice_date = invoice_date or date.today()

    if invoice_type == "gst":
        if not (seller_region or "").strip():
            raise ValidationError(
                "Seller address state is required for GST invoices", field="seller_region",
            )
        calculation = compute_invoice_totals(
            items, seller_region, customer.address.state, rate_table,
        )
    else:
        calculation = compute_simple_totals(items)

    if use_scan_fallback:
        invoice_number = await allocator.allocate_by_scan(user_id, invoice_date)
    else:
        invoice_number = await allocator.allocate(user_id, invoice_date)

    invoice = FinalizedInvoice(
        invoice_number=invoice_number,
        invoice_date=invoice_date,
        user_id=str(user_id),
        customer=customer,
        calculation=calculation,
        invoice_type=invoice_type,
        due_date=due_date,
        notes=notes,
        terms=terms,
        seller_region=seller_region.strip() if invoice_type == "gst" else None,
    )
    logger.info(
        "Finalized invoice %s for user %s: items=%d grand_total=%s",
        invoice.invoice_number,
        invoice.user_id,
        len(invoice.items),
        invoice.grand_total,
    )
    return invoice
