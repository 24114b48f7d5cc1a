# invoice_engine/domain/services/tax_rate_defaults.py
"""
Built-in HSN/SAC rate table.

Used when no table is passed to the calculator. Deployments layer their own
rates on top via GST_RATE_OVERRIDES.
"""

from __future__ import annotations

from decimal import Decimal

from invoice_engine.domain.models.rate_table import RateTable

# (code, description, total GST rate %)
COMMON_HSN_CODES: tuple[tuple[str, str, Decimal], ...] = (
    ("1001", "Wheat", Decimal("0")),
    ("1006", "Rice", Decimal("0")),
    ("0401", "Milk and cream", Decimal("0")),
    ("3004", "Medicaments", Decimal("12")),
    ("6403", "Footwear", Decimal("18")),
    ("8517", "Telephone sets, mobile phones", Decimal("18")),
    ("8703", "Motor cars", Decimal("28")),
    ("2402", "Cigars, cigarettes", Decimal("28")),
    ("9999", "Default services", Decimal("18")),
    ("9954", "Software development services", Decimal("18")),
    ("9972", "Consulting services", Decimal("18")),
    ("9973", "Information technology services", Decimal("18")),
    ("9982", "Business support services", Decimal("18")),
    ("9983", "Advertising services", Decimal("18")),
    ("9984", "Market research services", Decimal("18")),
    ("9985", "Management consulting services", Decimal("18")),
    ("9986", "Legal services", Decimal("18")),
    ("9987", "Accounting services", Decimal("18")),
    ("9988", "Engineering services", Decimal("18")),
    ("9989", "Architectural services", Decimal("18")),
)

DEFAULT_GST_RATE = Decimal("18")


def common_hsn_codes() -> list[dict]:
    """Code / description / rate rows for pickers and docs."""
    return [
        {"code": code, "description": description, "rate": rate}
        for code, description, rate in COMMON_HSN_CODES
    ]


def default_rate_table() -> RateTable:
    """Return the hardcoded rate table."""
    return RateTable(
        rates={code: rate for code, _, rate in COMMON_HSN_CODES},
        default_rate=DEFAULT_GST_RATE,
        source="hardcoded",
    )


def rate_table_from_settings() -> RateTable:
    """Hardcoded table with the configured default rate and overrides applied."""
    from invoice_engine.config.settings import settings

    base = RateTable(
        rates={code: rate for code, _, rate in COMMON_HSN_CODES},
        default_rate=Decimal(str(settings.DEFAULT_GST_RATE)),
        source="settings",
    )
    if settings.GST_RATE_OVERRIDES:
        return base.with_overrides(settings.GST_RATE_OVERRIDES, source="settings")
    return base
