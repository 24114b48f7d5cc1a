"""Tests for GST line-item calculation and invoice aggregation."""

from decimal import Decimal

import pytest

from invoice_engine.core.errors import InvalidInvoiceError, ValidationError
from invoice_engine.domain.models.invoice import LineItem, ResolvedRate
from invoice_engine.domain.models.rate_table import RateTable
from invoice_engine.domain.services.gst_calculator import (
    aggregate_totals,
    calculate_line_item,
    compute_invoice_totals,
    compute_simple_totals,
)


class TestWorkedExamples:
    def test_widget_same_state(self, widget_item):
        calc = compute_invoice_totals([widget_item], "Maharashtra", "maharashtra")
        line = calc.items[0]
        assert calc.is_inter_state is False
        assert line.taxable_amount == Decimal("200.00")
        assert line.cgst_amount == Decimal("18.00")
        assert line.sgst_amount == Decimal("18.00")
        assert line.igst_amount == Decimal("0.00")
        assert line.total_amount == Decimal("236.00")

    def test_widget_different_state(self, widget_item):
        calc = compute_invoice_totals([widget_item], "Telangana", "Maharashtra")
        line = calc.items[0]
        assert calc.is_inter_state is True
        assert line.igst_amount == Decimal("36.00")
        assert line.cgst_amount == Decimal("0.00")
        assert line.sgst_amount == Decimal("0.00")
        assert line.total_amount == Decimal("236.00")

    def test_grand_total_independent_of_split(self, widget_item):
        intra = compute_invoice_totals([widget_item], "Goa", "Goa")
        inter = compute_invoice_totals([widget_item], "Goa", "Kerala")
        assert intra.totals.grand_total == inter.totals.grand_total == Decimal("236.00")
        assert intra.totals.total_tax == inter.totals.total_tax == Decimal("36.00")


class TestLineItem:
    def test_discount_and_rounding(self):
        item = LineItem(description="Shoes", hsn="6403", quantity=3, unit_price="99.99", discount_percent=10)
        calc = compute_invoice_totals([item], "Karnataka", "Karnataka")
        line = calc.items[0]
        assert line.gross_amount == Decimal("299.97")
        assert line.taxable_amount == Decimal("269.97")
        assert line.cgst_amount == Decimal("24.30")
        assert line.sgst_amount == Decimal("24.30")
        assert line.total_amount == Decimal("318.57")
        assert calc.totals.subtotal == Decimal("299.97")
        assert calc.totals.total_discount == Decimal("30.00")
        assert calc.totals.grand_total == Decimal("318.57")

    def test_total_is_sum_of_rounded_components(self):
        items = [
            LineItem(description="A", hsn="3004", quantity="1.5", unit_price="33.33"),
            LineItem(description="B", hsn="8703", quantity=7, unit_price="0.19", discount_percent="12.5"),
            LineItem(description="C", hsn="9983", quantity=1, unit_price="1234.567"),
        ]
        for seller, buyer in (("Delhi", "Delhi"), ("Delhi", "Punjab")):
            calc = compute_invoice_totals(items, seller, buyer)
            for line in calc.items:
                assert line.total_amount == (
                    line.taxable_amount + line.cgst_amount + line.sgst_amount + line.igst_amount
                )
                assert line.total_amount == line.total_amount.quantize(Decimal("0.01"))

    def test_each_tax_head_rounded_independently(self):
        rates = ResolvedRate(cgst_percent="0.75", sgst_percent="0.75")
        item = LineItem(description="Ring", hsn="7113", quantity=1, unit_price=1)
        line = calculate_line_item(item, rates)
        # 1.00 * 0.75% = 0.0075 -> 0.01 per head
        assert line.cgst_amount == Decimal("0.01")
        assert line.sgst_amount == Decimal("0.01")
        assert line.total_amount == Decimal("1.02")

    def test_zero_quantity_is_allowed(self):
        item = LineItem(description="Sample", hsn="8517", quantity=0, unit_price=500)
        calc = compute_invoice_totals([item], "Goa", "Goa")
        assert calc.totals.grand_total == Decimal("0.00")

    def test_accepts_api_style_dicts(self):
        calc = compute_invoice_totals(
            [{"description": "Widget", "hsn": "8517", "quantity": 2, "rate": 100, "discount": 0}],
            "Goa",
            "Goa",
        )
        assert calc.totals.grand_total == Decimal("236.00")

    def test_float_inputs_do_not_leak_binary_error(self):
        item = LineItem(description="Pen", hsn="9608", quantity=3, unit_price=0.1)
        calc = compute_invoice_totals([item], "Goa", "Goa")
        assert calc.items[0].taxable_amount == Decimal("0.30")


class TestAggregation:
    def test_round_per_line_then_sum(self):
        table = RateTable(rates={"7113": "1.5"})
        items = [LineItem(description=f"Ring {n}", hsn="7113", quantity=1, unit_price=1) for n in range(3)]
        calc = compute_invoice_totals(items, "Rajasthan", "Rajasthan", rate_table=table)
        # per line: 0.0075 -> 0.01; summed -> 0.03 (rounding the 0.0225 total would give 0.02)
        assert calc.totals.total_cgst == Decimal("0.03")
        assert calc.totals.total_sgst == Decimal("0.03")
        assert calc.totals.total_tax == Decimal("0.06")
        assert calc.totals.grand_total == Decimal("3.06")

    def test_totals_sum_lines(self, widget_item):
        second = LineItem(description="Tablets", hsn="3004", quantity=10, unit_price="12.50", discount_percent=5)
        calc = compute_invoice_totals([widget_item, second], "Gujarat", "Gujarat")
        totals = calc.totals
        assert totals.taxable_amount == sum((i.taxable_amount for i in calc.items), Decimal("0"))
        assert totals.total_tax == totals.total_cgst + totals.total_sgst + totals.total_igst
        assert totals.grand_total == totals.taxable_amount + totals.total_tax
        assert totals.total_igst == Decimal("0.00")

    def test_empty_list_rejected(self):
        with pytest.raises(InvalidInvoiceError):
            compute_invoice_totals([], "Goa", "Goa")
        with pytest.raises(InvalidInvoiceError):
            aggregate_totals([])

    def test_idempotent(self, widget_item):
        items = [widget_item, LineItem(description="Car", hsn="8703", quantity=1, unit_price="550000")]
        first = compute_invoice_totals(items, "Bihar", "Assam")
        second = compute_invoice_totals(items, "Bihar", "Assam")
        assert first == second

    def test_simple_invoice_has_no_tax(self, widget_item):
        calc = compute_simple_totals([widget_item])
        assert calc.totals.total_tax == Decimal("0.00")
        assert calc.totals.grand_total == Decimal("200.00")


class TestValidation:
    def test_negative_quantity_reports_item_index(self, widget_item):
        bad = LineItem(description="Bad", hsn="8517", quantity=-1, unit_price=10)
        with pytest.raises(ValidationError) as exc_info:
            compute_invoice_totals([widget_item, bad], "Goa", "Goa")
        assert exc_info.value.item_index == 1
        assert exc_info.value.field == "quantity"

    def test_negative_unit_price(self):
        bad = LineItem(description="Bad", hsn="8517", quantity=1, unit_price=-5)
        with pytest.raises(ValidationError) as exc_info:
            compute_invoice_totals([bad], "Goa", "Goa")
        assert exc_info.value.field == "unit_price"

    @pytest.mark.parametrize("discount", ["-0.01", "100.01", "250"])
    def test_discount_out_of_range(self, discount):
        bad = LineItem(description="Bad", hsn="8517", quantity=1, unit_price=5, discount_percent=discount)
        with pytest.raises(ValidationError) as exc_info:
            compute_invoice_totals([bad], "Goa", "Goa")
        assert exc_info.value.field == "discount_percent"

    def test_full_discount_allowed(self):
        item = LineItem(description="Free", hsn="8517", quantity=1, unit_price=5, discount_percent=100)
        calc = compute_invoice_totals([item], "Goa", "Goa")
        assert calc.totals.grand_total == Decimal("0.00")

    def test_missing_field_in_dict(self):
        with pytest.raises(ValidationError) as exc_info:
            compute_invoice_totals([{"description": "No code", "quantity": 1, "rate": 5}], "Goa", "Goa")
        assert exc_info.value.item_index == 0

    def test_regions_required(self, widget_item):
        with pytest.raises(ValidationError):
            compute_invoice_totals([widget_item], "", "Goa")

    def test_oversized_amount_reports_item_index(self, widget_item):
        huge = LineItem(description="Bulk", hsn="8517", quantity="1E20", unit_price="1E10")
        with pytest.raises(ValidationError) as exc_info:
            compute_invoice_totals([widget_item, huge], "Goa", "Goa")
        assert exc_info.value.item_index == 1
        assert exc_info.value.field == "quantity"

    def test_invoice_total_above_column_capacity_rejected(self):
        items = [
            LineItem(description=f"Plant {n}", hsn="8517", quantity=1, unit_price="600000000000")
            for n in range(2)
        ]
        with pytest.raises(InvalidInvoiceError):
            compute_invoice_totals(items, "Goa", "Goa")

    def test_largest_single_line_accepted(self):
        item = LineItem(description="Plant", hsn="1006", quantity=1, unit_price="999999999999.99")
        calc = compute_invoice_totals([item], "Goa", "Goa")
        assert calc.totals.grand_total == Decimal("999999999999.99")
