"""
Unit tests for the billing calculators.
"""

import pytest
from decimal import Decimal

from invoice_engine.domain.services.billing_service import (
    DiscountEngine,
    InvoiceTotalsCalculator,
    LineItemCalculator,
    TaxEngine,
    compute_totals,
)
from invoice_engine.domain.models.money import Money
from invoice_engine.domain.models.base import InvalidLineItem
from invoice_engine.domain.models.value_objects import DiscountSpec, DiscountType, LineItem, TaxSpec


class TestLineItemCalculator:
    """Test cases for LineItemCalculator."""

    def setup_method(self):
        """Set up test fixtures."""
        self.calculator = LineItemCalculator()

    def test_compute_amount(self):
        """Test quantity times rate."""
        item = LineItem(description="Design", quantity=2, rate=500)
        assert self.calculator.compute_amount(item) == Money.of(1000)

    def test_compute_amount_rounds_half_up(self):
        """Test fractional quantities round to the minor unit."""
        item = LineItem(description="Consulting", quantity="1.5", rate="33.33")
        # 49.995 rounds up
        assert self.calculator.compute_amount(item) == Money.of("50.00")

    def test_compute_amount_rejects_bad_item(self):
        """Test items that bypassed validation are still rejected."""
        item = LineItem(description="Design", quantity=1, rate=10)
        object.__setattr__(item, "quantity", Decimal("0"))

        with pytest.raises(InvalidLineItem, match="Quantity must be greater than zero"):
            self.calculator.compute_amount(item)

    def test_compute_subtotal(self):
        """Test the sum of line amounts."""
        items = [
            LineItem(description="Design", quantity=2, rate=500),
            LineItem(description="Development", quantity=1, rate=1000),
        ]
        assert self.calculator.compute_subtotal(items) == Money.of(2000)

    def test_compute_subtotal_empty(self):
        """Test an empty invoice has a zero subtotal."""
        assert self.calculator.compute_subtotal([]) == Money.zero()

    def test_float_inputs_do_not_drift(self):
        """Test many small float amounts sum exactly."""
        items = [LineItem(description=f"Item {i}", quantity=1, rate=0.1) for i in range(10)]
        assert self.calculator.compute_subtotal(items) == Money.of(1)


class TestDiscountEngine:
    """Test cases for DiscountEngine."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = DiscountEngine()
        self.subtotal = Money.of(2000)

    def test_no_discount(self):
        assert self.engine.apply_discount(self.subtotal, None) == Money.zero()

    def test_percentage_discount(self):
        """Test percentage of subtotal."""
        spec = DiscountSpec.percentage(10)
        assert self.engine.apply_discount(self.subtotal, spec) == Money.of(200)

    def test_flat_discount(self):
        """Test flat discount."""
        spec = DiscountSpec.amount(150)
        assert self.engine.apply_discount(self.subtotal, spec) == Money.of(150)

    def test_flat_discount_clamped_to_subtotal(self):
        """Test a flat discount cannot exceed the subtotal."""
        spec = DiscountSpec.amount(5000)
        assert self.engine.apply_discount(self.subtotal, spec) == self.subtotal

    def test_percentage_clamped_to_hundred(self):
        """Test an over-range percentage is clamped at 100."""
        spec = DiscountSpec.percentage(100)
        object.__setattr__(spec, "value", Decimal("150"))

        assert self.engine.apply_discount(self.subtotal, spec) == self.subtotal

    def test_full_percentage_discount(self):
        """Test a 100% discount zeroes the taxable amount."""
        spec = DiscountSpec(DiscountType.PERCENTAGE, 100)
        assert self.engine.apply_discount(self.subtotal, spec) == self.subtotal


class TestTaxEngine:
    """Test cases for TaxEngine."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = TaxEngine()

    def test_apply_tax(self):
        """Test tax on the taxable amount."""
        assert self.engine.apply_tax(Money.of(1800), TaxSpec(18)) == Money.of(324)

    def test_no_tax(self):
        assert self.engine.apply_tax(Money.of(1800), None) == Money.zero()

    def test_zero_rate(self):
        assert self.engine.apply_tax(Money.of(1800), TaxSpec(0)) == Money.zero()

    def test_tax_rounds_half_up(self):
        """Test tax rounding to the minor unit."""
        # 18% of 0.25 is 0.045
        assert self.engine.apply_tax(Money.of("0.25"), TaxSpec(18)) == Money.of("0.05")


class TestInvoiceTotalsCalculator:
    """Test cases for InvoiceTotalsCalculator."""

    def setup_method(self):
        """Set up test fixtures."""
        self.calculator = InvoiceTotalsCalculator()
        self.line_items = [
            LineItem(description="Design", quantity=2, rate=500),
            LineItem(description="Development", quantity=1, rate=1000),
        ]

    def test_percentage_discount_with_tax(self):
        """Test the standard discount-then-tax pipeline."""
        totals = self.calculator.compute(self.line_items, DiscountSpec.percentage(10), TaxSpec(18))

        assert totals.subtotal == Money.of(2000)
        assert totals.discount_amount == Money.of(200)
        assert totals.taxable_amount == Money.of(1800)
        assert totals.tax_amount == Money.of(324)
        assert totals.total == Money.of(2124)

    def test_totals_are_deterministic(self):
        """Test identical inputs produce identical totals."""
        first = self.calculator.compute(self.line_items, DiscountSpec.percentage(10), TaxSpec(18))
        second = self.calculator.compute(self.line_items, DiscountSpec.percentage(10), TaxSpec(18))

        assert first == second

    def test_total_identity_holds(self):
        """Test total equals subtotal minus discount plus tax for awkward figures."""
        cases = [
            ([LineItem(description="A", quantity="3", rate="33.33")], DiscountSpec.percentage("7.5"), TaxSpec("12.5")),
            ([LineItem(description="B", quantity="0.333", rate="19.99")], DiscountSpec.amount("0.01"), TaxSpec("18")),
            ([LineItem(description="C", quantity="1", rate="0.01")], DiscountSpec.percentage(50), TaxSpec("5")),
            ([LineItem(description="D", quantity="7", rate="14.2857")], None, TaxSpec("28")),
        ]

        for line_items, discount, tax in cases:
            totals = self.calculator.compute(line_items, discount, tax)
            expected = totals.subtotal.minor_units - totals.discount_amount.minor_units + totals.tax_amount.minor_units
            assert totals.total.minor_units == expected

    def test_total_never_negative(self):
        """Test an oversized flat discount leaves a zero total."""
        totals = self.calculator.compute(self.line_items, DiscountSpec.amount(99999), TaxSpec(18))

        assert totals.discount_amount == Money.of(2000)
        assert totals.tax_amount == Money.zero()
        assert totals.total == Money.zero()

    def test_empty_invoice(self):
        """Test an empty invoice totals to zero."""
        totals = self.calculator.compute([], None, TaxSpec(18))
        assert totals.total == Money.zero()

    def test_compute_totals_function(self):
        """Test the module-level helper."""
        totals = compute_totals(self.line_items, DiscountSpec.percentage(10), TaxSpec(18))
        assert totals.total == Money.of(2124)
