# invoice_engine/domain/models/finalized_invoice.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from invoice_engine.core.errors import IntegrityError
from invoice_engine.domain.models.invoice import ComputedLineItem, Customer, InvoiceCalculation
from invoice_engine.domain.services.gst_calculator import recalculate_for_regions
from invoice_engine.domain.services.invoice_integrity import compute_hash, view_for_record
from invoice_engine.domain.services.tax_rate_resolver import is_inter_state, normalize_region


class FinalizedInvoice(BaseModel):
    """
    A numbered invoice together with its integrity hash.

    The hash is computed during validation, so an instance never exists
    with a stale or missing hash. Use ``with_changes`` to edit: it builds a
    new instance and therefore a new hash. Passing ``integrity_hash`` in
    the input checks it against the recomputed value.
    """

    model_config = ConfigDict(frozen=True)

    invoice_number: str
    invoice_date: date
    user_id: str
    customer: Customer
    calculation: InvoiceCalculation
    invoice_type: Literal["gst", "simple"] = "gst"
    due_date: Optional[date] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    # State the invoice was issued from; drives the CGST/SGST vs IGST split
    seller_region: Optional[str] = None
    integrity_hash: str = ""

    @model_validator(mode="after")
    def _stamp_hash(self) -> FinalizedInvoice:
        if self.invoice_type == "gst" and self.seller_region:
            inter_state = is_inter_state(self.seller_region, self.customer.address.state)
            if inter_state != self.calculation.is_inter_state:
                raise ValueError(
                    f"calculation is_inter_state={self.calculation.is_inter_state} does not match "
                    f"seller {self.seller_region!r} / buyer {self.customer.address.state!r}"
                )

        digest = compute_hash(view_for_record(self))
        if self.integrity_hash and self.integrity_hash != digest:
            raise IntegrityError(
                f"Invoice {self.invoice_number} does not match its integrity hash",
                invoice_number=self.invoice_number,
                expected=self.integrity_hash,
                actual=digest,
            )
        # frozen model: bypass __setattr__ for the one derived field
        object.__setattr__(self, "integrity_hash", digest)
        return self

    @classmethod
    def model_construct(cls, _fields_set: set[str] | None = None, **values: Any) -> FinalizedInvoice:
        # no unvalidated construction: the hash must always be stamped
        return cls.model_validate(values)

    @property
    def items(self) -> tuple[ComputedLineItem, ...]:
        return self.calculation.items

    @property
    def grand_total(self) -> Decimal:
        return self.calculation.totals.grand_total

    def model_copy(self, *, update: Mapping[str, Any] | None = None, deep: bool = False) -> FinalizedInvoice:
        """Copies with ``update`` go through ``with_changes`` and get a fresh hash."""
        if update:
            return self.with_changes(**update)
        return super().model_copy(deep=deep)

    def with_changes(self, **updates: Any) -> FinalizedInvoice:
        """
        New instance with ``updates`` applied and the hash recomputed.

        When the customer (buyer state) or seller region changes on a GST
        invoice and no new ``calculation`` is given, the tax split is
        recomputed for the new state pair. Without a known seller region a
        buyer-state change needs an explicit ``calculation``.
        """
        if "invoice_number" in updates and updates["invoice_number"] != self.invoice_number:
            raise ValueError("invoice_number is assigned once and cannot be changed")
        data = self.model_dump(exclude={"integrity_hash"})
        data.update(updates)
        data.pop("integrity_hash", None)

        regions_changed = "customer" in updates or "seller_region" in updates
        if data.get("invoice_type") == "gst" and regions_changed and "calculation" not in updates:
            buyer_state = Customer.model_validate(data["customer"]).address.state
            seller_region = data.get("seller_region")
            if seller_region:
                data["calculation"] = recalculate_for_regions(self.calculation, seller_region, buyer_state)
            elif normalize_region(buyer_state) != normalize_region(self.customer.address.state):
                raise ValueError(
                    "Buyer state changed but the seller region is unknown; "
                    "pass a recomputed calculation"
                )

        return type(self).model_validate(data)
