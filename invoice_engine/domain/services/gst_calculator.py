# invoice_engine/domain/services/gst_calculator.py
"""
GST line-item calculation and invoice aggregation.

Rounding order matters for cent-level parity with previously issued
invoices:

1. taxable = round2(gross - discount) per line
2. each of CGST / SGST / IGST = round2(taxable * rate / 100), independently
3. line total = taxable + cgst + sgst + igst (already 2 dp)
4. invoice taxable / tax totals = sums of the rounded per-line values
   (subtotal and discount are summed from raw line values, rounded once)

Totals are never recomputed from unrounded figures.
"""

from __future__ import annotations

from decimal import InvalidOperation
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError

from invoice_engine.core.errors import InvalidInvoiceError, ValidationError
from invoice_engine.domain.models.invoice import (
    ComputedLineItem,
    InvoiceCalculation,
    InvoiceTotals,
    LineItem,
    ResolvedRate,
)
from invoice_engine.domain.models.rate_table import RateTable
from invoice_engine.domain.money import HUNDRED, MAX_AMOUNT, ZERO, percent_of, round2
from invoice_engine.domain.services.tax_rate_resolver import is_inter_state, resolve_rates, split_rate

NO_TAX = ResolvedRate()


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def coerce_line_item(raw: LineItem | Mapping[str, Any], index: int) -> LineItem:
    """Accept a LineItem or a plain dict (API payload) for item ``index``."""
    if isinstance(raw, LineItem):
        return raw
    try:
        return LineItem.model_validate(raw)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(
            f"Item {index + 1}: {first.get('msg', 'invalid value')} ({loc})",
            item_index=index,
            field=loc,
        ) from exc


def validate_line_item(item: LineItem, index: int) -> None:
    if not item.quantity.is_finite() or item.quantity < ZERO:
        raise ValidationError(
            f"Item {index + 1} has invalid quantity: {item.quantity}",
            item_index=index,
            field="quantity",
        )
    if not item.unit_price.is_finite() or item.unit_price < ZERO:
        raise ValidationError(
            f"Item {index + 1} has invalid unit price: {item.unit_price}",
            item_index=index,
            field="unit_price",
        )
    discount = item.discount_percent
    if not discount.is_finite() or discount < ZERO or discount > HUNDRED:
        raise ValidationError(
            f"Item {index + 1} has invalid discount percentage: {discount}",
            item_index=index,
            field="discount_percent",
        )


def _prepare_items(items: Iterable[LineItem | Mapping[str, Any]] | None) -> list[LineItem]:
    raw_items = list(items or [])
    if not raw_items:
        raise InvalidInvoiceError("Invoice must have at least one item", field="items")
    prepared = []
    for index, raw in enumerate(raw_items):
        item = coerce_line_item(raw, index)
        validate_line_item(item, index)
        prepared.append(item)
    return prepared


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------

def calculate_line_item(item: LineItem, rates: ResolvedRate, index: int = 0) -> ComputedLineItem:
    """Compute taxable value and per-head tax for one validated line."""
    validate_line_item(item, index)

    gross = item.quantity * item.unit_price
    if gross > MAX_AMOUNT:
        raise ValidationError(
            f"Item {index + 1} amount {gross:E} exceeds the maximum of {MAX_AMOUNT}",
            item_index=index,
            field="quantity",
        )

    try:
        discount_amount = gross * item.discount_percent / HUNDRED
        taxable = round2(gross - discount_amount)

        cgst = percent_of(taxable, rates.cgst_percent)
        sgst = percent_of(taxable, rates.sgst_percent)
        igst = percent_of(taxable, rates.igst_percent)
        gross_amount = round2(gross)
        discount_amount = round2(discount_amount)
    except InvalidOperation as exc:
        raise ValidationError(
            f"Item {index + 1} amount cannot be represented to the paisa",
            item_index=index,
            field="quantity",
        ) from exc

    return ComputedLineItem(
        description=item.description,
        hsn=item.hsn,
        quantity=item.quantity,
        unit=item.unit,
        unit_price=item.unit_price,
        discount_percent=item.discount_percent,
        gross_amount=gross_amount,
        discount_amount=discount_amount,
        rates=rates,
        taxable_amount=taxable,
        cgst_amount=cgst,
        sgst_amount=sgst,
        igst_amount=igst,
        total_amount=taxable + cgst + sgst + igst,
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def aggregate_totals(items: Sequence[ComputedLineItem]) -> InvoiceTotals:
    """Sum already-rounded line values into invoice totals."""
    if not items:
        raise InvalidInvoiceError("Invoice must have at least one item", field="items")

    # Gross and discount totals come from unrounded line values.
    subtotal = sum((i.quantity * i.unit_price for i in items), ZERO)
    total_discount = sum(
        (i.quantity * i.unit_price * i.discount_percent / HUNDRED for i in items), ZERO
    )
    taxable = sum((i.taxable_amount for i in items), ZERO)
    total_cgst = sum((i.cgst_amount for i in items), ZERO)
    total_sgst = sum((i.sgst_amount for i in items), ZERO)
    total_igst = sum((i.igst_amount for i in items), ZERO)
    total_tax = total_cgst + total_sgst + total_igst
    if taxable + total_tax > MAX_AMOUNT:
        raise InvalidInvoiceError(
            f"Invoice total exceeds the maximum of {MAX_AMOUNT}", field="items",
        )

    return InvoiceTotals(
        subtotal=round2(subtotal),
        total_discount=round2(total_discount),
        taxable_amount=round2(taxable),
        total_cgst=round2(total_cgst),
        total_sgst=round2(total_sgst),
        total_igst=round2(total_igst),
        total_tax=round2(total_tax),
        grand_total=round2(taxable + total_tax),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compute_invoice_totals(
    items: Iterable[LineItem | Mapping[str, Any]],
    seller_region: str,
    buyer_region: str,
    rate_table: RateTable | None = None,
) -> InvoiceCalculation:
    """
    Full GST computation for an invoice.

    Raises ValidationError (with item index) for bad lines, and
    InvalidInvoiceError when ``items`` is empty. Same input always gives
    the same output.
    """
    if not (seller_region or "").strip() or not (buyer_region or "").strip():
        raise ValidationError("Seller state and buyer state are required", field="region")

    if rate_table is None:
        from invoice_engine.domain.services.tax_rate_defaults import default_rate_table

        rate_table = default_rate_table()

    prepared = _prepare_items(items)
    inter_state = is_inter_state(seller_region, buyer_region)

    computed = tuple(
        calculate_line_item(item, resolve_rates(item.hsn, inter_state, rate_table), index)
        for index, item in enumerate(prepared)
    )
    return InvoiceCalculation(
        items=computed,
        totals=aggregate_totals(computed),
        is_inter_state=inter_state,
    )


def compute_simple_totals(items: Iterable[LineItem | Mapping[str, Any]]) -> InvoiceCalculation:
    """Totals for a non-GST invoice: same discounting, no tax heads."""
    prepared = _prepare_items(items)
    computed = tuple(
        calculate_line_item(item, NO_TAX, index) for index, item in enumerate(prepared)
    )
    return InvoiceCalculation(items=computed, totals=aggregate_totals(computed))


def recalculate_for_regions(
    calculation: InvoiceCalculation,
    seller_region: str,
    buyer_region: str,
) -> InvoiceCalculation:
    """
    Re-split an existing calculation for a new seller/buyer state pair.

    Each line keeps its total GST rate; only the CGST/SGST vs IGST split
    (and therefore the per-head amounts) follows the new regions.
    """
    if not (seller_region or "").strip() or not (buyer_region or "").strip():
        raise ValidationError("Seller state and buyer state are required", field="region")

    inter_state = is_inter_state(seller_region, buyer_region)
    if inter_state == calculation.is_inter_state:
        return calculation

    computed = tuple(
        calculate_line_item(
            LineItem(
                description=line.description,
                hsn=line.hsn,
                quantity=line.quantity,
                unit_price=line.unit_price,
                discount_percent=line.discount_percent,
                unit=line.unit,
            ),
            split_rate(line.rates.total_percent, inter_state),
            index,
        )
        for index, line in enumerate(calculation.items)
    )
    return InvoiceCalculation(
        items=computed,
        totals=aggregate_totals(computed),
        is_inter_state=inter_state,
    )
