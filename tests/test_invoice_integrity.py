"""Tests for integrity hashing of finalized invoices."""

from datetime import date
from decimal import Decimal

import pytest

from invoice_engine.core.errors import IntegrityError
from invoice_engine.domain.models.finalized_invoice import FinalizedInvoice
from invoice_engine.domain.services.gst_calculator import compute_invoice_totals
from invoice_engine.domain.services.invoice_integrity import (
    canonical_customer,
    canonical_item,
    canonical_view,
    compute_hash,
    ensure_integrity,
    serialize_view,
    verify_hash,
    view_for_record,
)


@pytest.fixture
def invoice(widget_item, customer, invoice_day) -> FinalizedInvoice:
    calculation = compute_invoice_totals([widget_item], "Maharashtra", customer.address.state)
    return FinalizedInvoice(
        invoice_number="INV-202407-0001",
        invoice_date=invoice_day,
        user_id="u1",
        customer=customer,
        calculation=calculation,
    )


def _view(**overrides):
    base = dict(
        invoice_number="INV-202407-0001",
        invoice_date=date(2024, 7, 15),
        user_id="u1",
        customer={"name": "XYZ", "address": {"state": "Goa"}},
        items=[{"description": "Widget", "hsn": "8517", "quantity": 2, "unit_price": 100,
                "taxable_amount": 200, "total_amount": 236}],
        grand_total=Decimal("236.00"),
    )
    base.update(overrides)
    return canonical_view(**base)


class TestComputeHash:
    def test_stable_hex_digest(self):
        first = compute_hash(_view())
        assert first == compute_hash(_view())
        assert len(first) == 64
        assert all(c in "0123456789abcdef" for c in first)

    def test_amount_representation_does_not_matter(self):
        assert compute_hash(_view(grand_total=236)) == compute_hash(_view(grand_total="236.00"))

    def test_one_paisa_changes_hash(self):
        assert compute_hash(_view()) != compute_hash(_view(grand_total=Decimal("236.01")))

    def test_customer_change_changes_hash(self):
        changed = _view(customer={"name": "XYZ Ltd", "address": {"state": "Goa"}})
        assert compute_hash(_view()) != compute_hash(changed)

    def test_item_change_changes_hash(self):
        items = [{"description": "Gadget", "hsn": "8517", "quantity": 2, "unit_price": 100,
                  "taxable_amount": 200, "total_amount": 236}]
        assert compute_hash(_view()) != compute_hash(_view(items=items))

    def test_serialization_is_compact_and_sorted(self):
        raw = serialize_view({"b": 1, "a": [1, 2]})
        assert raw == b'{"a":[1,2],"b":1}'


class TestFinalizedInvoice:
    def test_hash_is_stamped_on_construction(self, invoice):
        assert len(invoice.integrity_hash) == 64
        assert verify_hash(invoice)
        ensure_integrity(invoice)

    def test_grand_total_and_items(self, invoice):
        assert invoice.grand_total == Decimal("236.00")
        assert len(invoice.items) == 1

    def test_non_hashed_edit_keeps_hash(self, invoice):
        edited = invoice.with_changes(notes="Thank you for your business")
        assert edited.notes == "Thank you for your business"
        assert edited.integrity_hash == invoice.integrity_hash

    def test_hashed_edit_recomputes_hash(self, invoice, customer):
        renamed = customer.model_copy(update={"name": "XYZ Enterprises Pvt Ltd"})
        edited = invoice.with_changes(customer=renamed)
        assert edited.integrity_hash != invoice.integrity_hash
        assert verify_hash(edited)

    def test_invoice_number_cannot_change(self, invoice):
        with pytest.raises(ValueError):
            invoice.with_changes(invoice_number="INV-202407-0002")

    def test_model_copy_with_update_rehashes(self, invoice):
        moved = invoice.model_copy(update={"user_id": "someone-else"})
        assert moved.user_id == "someone-else"
        assert moved.integrity_hash != invoice.integrity_hash
        assert verify_hash(moved)

    def test_model_copy_cannot_change_invoice_number(self, invoice):
        with pytest.raises(ValueError):
            invoice.model_copy(update={"invoice_number": "INV-202407-0009"})

    def test_plain_model_copy_keeps_hash(self, invoice):
        assert invoice.model_copy().integrity_hash == invoice.integrity_hash
        assert verify_hash(invoice.model_copy(deep=True))

    def test_model_construct_is_validated(self, invoice):
        fields = {name: getattr(invoice, name) for name in type(invoice).model_fields}
        rebuilt = FinalizedInvoice.model_construct(**dict(fields, integrity_hash=""))
        assert rebuilt.integrity_hash == invoice.integrity_hash
        with pytest.raises(IntegrityError):
            FinalizedInvoice.model_construct(**dict(fields, user_id="someone-else"))

    def test_buyer_state_change_without_seller_region_rejected(self, invoice, customer):
        kerala = customer.model_copy(update={"address": customer.address.model_copy(update={"state": "Kerala"})})
        with pytest.raises(ValueError):
            invoice.with_changes(customer=kerala)

    def test_calculation_must_match_regions(self, invoice, widget_item):
        located = invoice.with_changes(seller_region="Maharashtra")
        inter_state = compute_invoice_totals([widget_item], "Maharashtra", "Kerala")
        with pytest.raises(ValueError):
            located.with_changes(calculation=inter_state)

    def test_customer_text_is_normalized_before_hashing(self, invoice):
        padded = invoice.customer.model_dump()
        padded["name"] = "  XYZ Enterprises  "
        padded["address"]["city"] = " Mumbai "
        edited = invoice.with_changes(customer=padded)
        assert edited.customer.name == "XYZ Enterprises"
        assert edited.customer.address.city == "Mumbai"
        assert edited.integrity_hash == invoice.integrity_hash

    def test_wrong_supplied_hash_rejected(self, invoice):
        data = invoice.model_dump()
        data["integrity_hash"] = "0" * 64
        with pytest.raises(IntegrityError):
            FinalizedInvoice.model_validate(data)

    def test_matching_supplied_hash_accepted(self, invoice):
        restored = FinalizedInvoice.model_validate(invoice.model_dump())
        assert restored.integrity_hash == invoice.integrity_hash


class TestStoredRecords:
    def _record(self, invoice):
        return {
            "invoice_number": invoice.invoice_number,
            "invoice_date": invoice.invoice_date.isoformat(),
            "user_id": invoice.user_id,
            "customer_json": canonical_customer(invoice.customer),
            "items_json": [canonical_item(i) for i in invoice.items],
            "grand_total": "236.00",
            "integrity_hash": invoice.integrity_hash,
        }

    def test_stored_mapping_matches_model_hash(self, invoice):
        record = self._record(invoice)
        assert view_for_record(record) == view_for_record(invoice)
        assert verify_hash(record)

    def test_tampered_items_detected(self, invoice):
        record = self._record(invoice)
        record["items_json"][0]["quantity"] = "3"
        assert not verify_hash(record)

    def test_missing_hash_fails(self, invoice):
        record = self._record(invoice)
        record["integrity_hash"] = None
        assert not verify_hash(record)
        with pytest.raises(IntegrityError):
            ensure_integrity(record)

    def test_ensure_integrity_reports_expected_hash(self, invoice):
        record = self._record(invoice)
        record["user_id"] = "someone-else"
        with pytest.raises(IntegrityError) as exc_info:
            ensure_integrity(record)
        assert exc_info.value.invoice_number == "INV-202407-0001"
        assert exc_info.value.expected == invoice.integrity_hash
        assert exc_info.value.actual != invoice.integrity_hash
