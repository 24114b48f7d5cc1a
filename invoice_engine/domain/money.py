# invoice_engine/domain/money.py
"""Fixed-point helpers for rupee amounts (2 decimal places, half-up)."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
# Largest amount the Numeric(14, 2) invoice columns hold
MAX_AMOUNT = Decimal("999999999999.99")


def to_decimal(value) -> Decimal:
    """Convert int / float / str / Decimal to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value) -> Decimal:
    """Round to 2 decimals, half away from zero (statutory rounding)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return round2(amount * percent / HUNDRED)


def format_amount(value) -> str:
    """Fixed 2-decimal string, e.g. ``Decimal("236")`` -> ``"236.00"``."""
    return f"{round2(value):.2f}"


def format_percent(value) -> str:
    """Normalized percent string: 9 -> "9", 2.50 -> "2.5", 0 -> "0"."""
    d = to_decimal(value).normalize()
    if d == ZERO:
        return "0"
    return f"{d:f}"
