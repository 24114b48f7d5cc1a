# invoice_engine/domain/services/tax_rate_resolver.py
"""
HSN/SAC code -> CGST / SGST / IGST split.

Intra-state supply: CGST + SGST, each half of the total rate.
Inter-state supply: IGST at the full rate.
Unknown codes resolve to the table's default rate; they never block an
invoice.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from invoice_engine.domain.models.invoice import ResolvedRate
from invoice_engine.domain.models.rate_table import RateTable

logger = logging.getLogger("tax_rate_resolver")

_TWO = Decimal("2")


def normalize_region(region: str | None) -> str:
    return " ".join((region or "").split()).casefold()


def is_inter_state(seller_region: str | None, buyer_region: str | None) -> bool:
    """True when seller and buyer states differ (case-insensitive)."""
    return normalize_region(seller_region) != normalize_region(buyer_region)


def resolve_rates(code: str | None, inter_state: bool, table: RateTable) -> ResolvedRate:
    total = table.rate_for(code)
    if total is None:
        logger.debug("No rate for HSN %r, using default %s%%", code, table.default_rate)
        total = table.default_rate
    return split_rate(total, inter_state)


def split_rate(total: Decimal, inter_state: bool) -> ResolvedRate:
    """Total GST % -> IGST (inter-state) or equal CGST + SGST halves."""
    if inter_state:
        return ResolvedRate(igst_percent=total)

    half = total / _TWO
    return ResolvedRate(cgst_percent=half, sgst_percent=half)
