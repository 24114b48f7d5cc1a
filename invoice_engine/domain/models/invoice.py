# invoice_engine/domain/models/invoice.py
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from invoice_engine.domain.money import ZERO
from invoice_engine.domain.services.gstin_validation import is_valid_gstin


class LineItem(BaseModel):
    """Caller-supplied invoice line. Range checks happen in the calculator."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    description: str
    hsn: str = Field(validation_alias=AliasChoices("hsn", "code", "hsn_code"))
    quantity: Decimal
    unit_price: Decimal = Field(validation_alias=AliasChoices("unit_price", "rate", "unitPrice"))
    discount_percent: Decimal = Field(
        default=ZERO,
        validation_alias=AliasChoices("discount_percent", "discount"),
    )
    unit: str = "NOS"


class ResolvedRate(BaseModel):
    model_config = ConfigDict(frozen=True)

    cgst_percent: Decimal = ZERO
    sgst_percent: Decimal = ZERO
    igst_percent: Decimal = ZERO

    @model_validator(mode="after")
    def _check_split(self) -> ResolvedRate:
        if self.cgst_percent != self.sgst_percent:
            raise ValueError("CGST and SGST rates must be equal")
        if self.igst_percent and self.cgst_percent:
            raise ValueError("IGST cannot be combined with CGST/SGST")
        return self

    @property
    def total_percent(self) -> Decimal:
        return self.cgst_percent + self.sgst_percent + self.igst_percent


class ComputedLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    hsn: str
    quantity: Decimal
    unit: str
    unit_price: Decimal
    discount_percent: Decimal
    gross_amount: Decimal
    discount_amount: Decimal
    rates: ResolvedRate
    taxable_amount: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    total_amount: Decimal


class InvoiceTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: Decimal = ZERO
    total_discount: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    total_cgst: Decimal = ZERO
    total_sgst: Decimal = ZERO
    total_igst: Decimal = ZERO
    total_tax: Decimal = ZERO
    grand_total: Decimal = ZERO


class InvoiceCalculation(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[ComputedLineItem, ...]
    totals: InvoiceTotals
    is_inter_state: bool = False


class Address(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    street: str
    city: str
    state: str
    pincode: str
    country: str = "India"


class Customer(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    name: str
    address: Address
    email: Optional[str] = None
    phone: Optional[str] = None
    gst_number: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("gst_number", "gstNumber", "gstin"),
    )

    @field_validator("gst_number")
    @classmethod
    def _check_gstin(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip().upper()
        if not is_valid_gstin(value):
            raise ValueError(f"Invalid GST number format: {value}")
        return value
