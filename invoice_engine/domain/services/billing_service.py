"""Billing services for line-item, discount, tax and invoice total calculations.
All arithmetic goes through Money so that figures are exact in minor units.
"""

from typing import Iterable, Optional

from invoice_engine.domain.models.money import Money, to_decimal
from invoice_engine.domain.models.value_objects import (
    DiscountSpec,
    DiscountType,
    InvoiceTotals,
    LineItem,
    TaxSpec,
    check_quantity_and_rate,
)


_MAX_PERCENTAGE = to_decimal(100)


class LineItemCalculator:
    """Computes line-item amounts and invoice subtotals."""

    def compute_amount(self, line_item: LineItem) -> Money:
        """
        Amount of a single line item: quantity * rate, rounded half up.
        Raises InvalidLineItem if quantity <= 0 or rate < 0.
        """
        quantity, rate = check_quantity_and_rate(line_item.quantity, line_item.rate)
        return Money.of(quantity * rate)

    def compute_subtotal(self, line_items: Iterable[LineItem]) -> Money:
        """
        Sum of all line-item amounts.
        An empty sequence yields zero; rejecting empty invoices is the job of
        the send transition, not of this calculation.
        """
        subtotal = Money.zero()
        for item in line_items:
            subtotal = subtotal + self.compute_amount(item)
        return subtotal


class DiscountEngine:
    """Turns a discount specification into a discount amount."""

    def apply_discount(self, subtotal: Money, spec: Optional[DiscountSpec]) -> Money:
        """
        Discount amount for the given subtotal.

        Flat discounts are clamped to the subtotal and percentages to 100,
        so the discount can never push the total below zero.
        """
        if spec is None:
            return Money.zero()

        if spec.type == DiscountType.AMOUNT:
            return Money.of(spec.value, field="discount").min(subtotal)

        return subtotal.percentage_of(min(spec.value, _MAX_PERCENTAGE))


class TaxEngine:
    """Applies a single flat tax rate."""

    def apply_tax(self, taxable_amount: Money, spec: Optional[TaxSpec]) -> Money:
        """Tax amount on the taxable (post-discount) amount."""
        if spec is None:
            return Money.zero()
        return taxable_amount.percentage_of(spec.rate)


class InvoiceTotalsCalculator:
    """
    Orchestrates line items, discount and tax into invoice totals.
    Pure: identical inputs always produce identical totals.
    """

    def __init__(
        self,
        line_item_calculator: Optional[LineItemCalculator] = None,
        discount_engine: Optional[DiscountEngine] = None,
        tax_engine: Optional[TaxEngine] = None
    ):
        self.line_item_calculator = line_item_calculator or LineItemCalculator()
        self.discount_engine = discount_engine or DiscountEngine()
        self.tax_engine = tax_engine or TaxEngine()

    def compute(
        self,
        line_items: Iterable[LineItem],
        discount_spec: Optional[DiscountSpec] = None,
        tax_spec: Optional[TaxSpec] = None
    ) -> InvoiceTotals:
        """Compute subtotal, discount, tax and total from scratch."""
        subtotal = self.line_item_calculator.compute_subtotal(line_items)
        discount_amount = self.discount_engine.apply_discount(subtotal, discount_spec)
        taxable_amount = subtotal - discount_amount
        tax_amount = self.tax_engine.apply_tax(taxable_amount, tax_spec)

        return InvoiceTotals(
            subtotal=subtotal,
            discount_amount=discount_amount,
            tax_amount=tax_amount,
            total=taxable_amount + tax_amount,
        )


def compute_totals(
    line_items: Iterable[LineItem],
    discount_spec: Optional[DiscountSpec] = None,
    tax_spec: Optional[TaxSpec] = None
) -> InvoiceTotals:
    """Compute invoice totals with the default calculators."""
    return InvoiceTotalsCalculator().compute(line_items, discount_spec, tax_spec)
