# invoice_engine/domain/models/rate_table.py
"""
Immutable GST rate table.

Maps HSN/SAC code prefixes to a total GST percentage. The table is passed
explicitly to the resolver; there is no module-level rate registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any, Mapping

from invoice_engine.core.errors import ValidationError
from invoice_engine.domain.money import HUNDRED, ZERO, to_decimal

STANDARD_GST_RATES: frozenset[Decimal] = frozenset(
    Decimal(r) for r in ("0", "0.1", "0.25", "1.5", "3", "5", "6", "7.5", "12", "14", "18", "28", "40")
)


def _parse_rate(value: Any, label: str) -> Decimal:
    try:
        rate = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"GST rate for {label} is not a number: {value!r}", field="rate")
    if not rate.is_finite() or rate < ZERO or rate > HUNDRED:
        raise ValidationError(f"GST rate for {label} must be between 0 and 100, got {value!r}", field="rate")
    return rate


@dataclass(frozen=True)
class RateTable:
    """HSN/SAC prefix -> total GST rate, plus the fallback rate."""

    rates: Mapping[str, Decimal] = field(default_factory=dict)
    default_rate: Decimal = Decimal("18")
    source: str = "hardcoded"  # "hardcoded", "settings", "manual"

    def __post_init__(self) -> None:
        parsed: dict[str, Decimal] = {}
        for code, rate in dict(self.rates).items():
            key = str(code).strip()
            if not key:
                raise ValidationError("HSN/SAC prefix in rate table cannot be blank", field="hsn")
            parsed[key] = _parse_rate(rate, f"HSN {key}")
        object.__setattr__(self, "rates", MappingProxyType(parsed))
        object.__setattr__(self, "default_rate", _parse_rate(self.default_rate, "default"))

    def rate_for(self, code: str | None) -> Decimal | None:
        """Longest table prefix of ``code``, or None when nothing matches."""
        code = (code or "").strip()
        for length in range(len(code), 0, -1):
            rate = self.rates.get(code[:length])
            if rate is not None:
                return rate
        return None

    def total_rate(self, code: str | None) -> Decimal:
        rate = self.rate_for(code)
        return self.default_rate if rate is None else rate

    @staticmethod
    def is_standard_rate(rate: Any) -> bool:
        return to_decimal(rate) in STANDARD_GST_RATES

    def with_overrides(self, overrides: Mapping[str, Any], source: str = "manual") -> RateTable:
        """Return a new table with ``overrides`` layered on top."""
        merged: dict[str, Any] = dict(self.rates)
        merged.update(overrides)
        return RateTable(rates=merged, default_rate=self.default_rate, source=source)

    # ---- serialization ----

    def to_dict(self) -> dict[str, Any]:
        return {
            "rates": {code: str(rate) for code, rate in sorted(self.rates.items())},
            "default_rate": str(self.default_rate),
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RateTable:
        return cls(
            rates=data.get("rates", {}),
            default_rate=data.get("default_rate", "18"),
            source=data.get("source", "manual"),
        )
