# invoice_engine/domain/services/invoice_integrity.py
"""
Tamper-evident invoice hashing.

The digest covers a canonical projection of the invoice:

    invoice_number, invoice_date (YYYY-MM-DD), user_id,
    customer (fixed fields), items (fixed fields), grand_total

Amounts are rendered as fixed 2-decimal strings and percents / quantities
as normalized decimal strings, so the same invoice always serializes to the
same bytes whether it comes from a freshly built FinalizedInvoice, a
database row, or a plain dict. The digest is SHA-256 over compact JSON
with sorted keys.

A mismatch on verification is reported, never repaired.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import date, datetime
from decimal import InvalidOperation
from typing import Any, Mapping, Sequence

from invoice_engine.core.errors import IntegrityError
from invoice_engine.domain.money import format_amount, format_percent

logger = logging.getLogger("invoice_integrity")

ITEM_AMOUNT_FIELDS = (
    "taxable_amount",
    "cgst_amount",
    "sgst_amount",
    "igst_amount",
    "total_amount",
)
ITEM_NUMBER_FIELDS = (
    "quantity",
    "unit_price",
    "discount_percent",
    "cgst_percent",
    "sgst_percent",
    "igst_percent",
)
ITEM_TEXT_FIELDS = ("description", "hsn", "unit")
CUSTOMER_FIELDS = ("name", "email", "phone", "gst_number")
ADDRESS_FIELDS = ("street", "city", "state", "pincode", "country")


# ---------------------------------------------------------------------------
# Canonical projection
# ---------------------------------------------------------------------------

def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip()


def _number(value: Any, fmt) -> str | None:
    if value is None or value == "":
        return None
    try:
        return fmt(value)
    except (InvalidOperation, TypeError, ValueError):
        # Not a number any more: keep the raw text so the digest differs.
        return str(value)


def canonical_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def canonical_item(item: Any) -> dict[str, Any]:
    """Fixed-field projection of a ComputedLineItem or its stored dict."""
    rates = _get(item, "rates")
    out: dict[str, Any] = {}
    for name in ITEM_TEXT_FIELDS:
        out[name] = _text(_get(item, name))
    for name in ITEM_NUMBER_FIELDS:
        value = _get(item, name)
        if value is None and rates is not None:
            value = _get(rates, name)
        out[name] = _number(value, format_percent)
    for name in ITEM_AMOUNT_FIELDS:
        out[name] = _number(_get(item, name), format_amount)
    return out


def canonical_customer(customer: Any) -> dict[str, Any]:
    address = _get(customer, "address") or {}
    out: dict[str, Any] = {name: _text(_get(customer, name)) for name in CUSTOMER_FIELDS}
    out["address"] = {name: _text(_get(address, name)) for name in ADDRESS_FIELDS}
    return out


def canonical_view(
    *,
    invoice_number: str,
    invoice_date: Any,
    user_id: Any,
    customer: Any,
    items: Sequence[Any],
    grand_total: Any,
) -> dict[str, Any]:
    """Build the hashing input from invoice fields (models or stored dicts)."""
    return {
        "invoice_number": _text(invoice_number),
        "invoice_date": canonical_date(invoice_date),
        "user_id": _text(user_id),
        "customer": canonical_customer(customer),
        "items": [canonical_item(i) for i in items],
        "grand_total": _number(grand_total, format_amount),
    }


def serialize_view(view: Mapping[str, Any]) -> bytes:
    return json.dumps(
        view, sort_keys=True, separators=(",", ":"), ensure_ascii=False,
    ).encode("utf-8")


def compute_hash(view: Mapping[str, Any]) -> str:
    """SHA-256 hex digest of the canonical view."""
    return hashlib.sha256(serialize_view(view)).hexdigest()


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

def view_for_record(record: Any) -> dict[str, Any]:
    """
    Canonical view for a FinalizedInvoice, an ``invoices`` ORM row, or a
    mapping with the same keys.
    """
    calculation = _get(record, "calculation")
    if calculation is not None:
        items = _get(calculation, "items")
        grand_total = _get(_get(calculation, "totals"), "grand_total")
    else:
        items = _get(record, "items_json")
        if items is None:
            items = _get(record, "items", [])
        grand_total = _get(record, "grand_total")

    customer = _get(record, "customer_json")
    if customer is None:
        customer = _get(record, "customer", {})

    return canonical_view(
        invoice_number=_get(record, "invoice_number"),
        invoice_date=_get(record, "invoice_date"),
        user_id=_get(record, "user_id"),
        customer=customer,
        items=items or [],
        grand_total=grand_total,
    )


def verify_hash(record: Any) -> bool:
    """Recompute the digest and compare with the stored ``integrity_hash``."""
    stored = _get(record, "integrity_hash") or _get(record, "hash")
    if not stored:
        return False
    return compute_hash(view_for_record(record)) == stored


def ensure_integrity(record: Any) -> None:
    """Raise IntegrityError if the record was changed after hashing."""
    stored = _get(record, "integrity_hash") or _get(record, "hash")
    actual = compute_hash(view_for_record(record))
    if stored == actual:
        return

    number = _get(record, "invoice_number")
    logger.error(
        "Integrity check failed for invoice %s: stored=%s computed=%s",
        number, stored, actual,
    )
    raise IntegrityError(
        f"Invoice {number} does not match its integrity hash",
        invoice_number=number,
        expected=stored,
        actual=actual,
    )
