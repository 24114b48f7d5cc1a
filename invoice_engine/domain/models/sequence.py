# invoice_engine/domain/models/sequence.py
"""Invoice-number scope keys and the ``INV-YYYYMM-NNNN`` format."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from invoice_engine.core.errors import ValidationError

DEFAULT_PREFIX = "INV"


@dataclass(frozen=True)
class CounterScope:
    """One independent numbering sequence: (user, calendar year, month)."""

    user_id: str
    year: int
    month: int

    @classmethod
    def for_date(cls, user_id: str, on: date) -> CounterScope:
        user_id = str(user_id).strip()
        if not user_id:
            raise ValidationError("user_id is required for invoice numbering", field="user_id")
        return cls(user_id=user_id, year=on.year, month=on.month)

    @property
    def period(self) -> str:
        """``YYYYMM``"""
        return f"{self.year:04d}{self.month:02d}"

    @property
    def key(self) -> str:
        return f"{self.user_id}_{self.period}"

    def number_prefix(self, prefix: str = DEFAULT_PREFIX) -> str:
        return f"{prefix}-{self.period}-"


def format_invoice_number(scope: CounterScope, sequence: int, prefix: str = DEFAULT_PREFIX) -> str:
    if sequence < 1:
        raise ValueError(f"Invoice sequence must be positive, got {sequence}")
    return f"{scope.number_prefix(prefix)}{sequence:04d}"


def parse_invoice_number(number: str, prefix: str = DEFAULT_PREFIX) -> tuple[int, int, int] | None:
    """``"INV-202407-0012"`` -> ``(2024, 7, 12)``; None if it doesn't match."""
    m = re.fullmatch(rf"{re.escape(prefix)}-(\d{{4}})(\d{{2}})-(\d+)", (number or "").strip())
    if not m:
        return None
    return int(m.group(1)), int(m.group(2)), int(m.group(3))
