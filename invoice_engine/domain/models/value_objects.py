"""
Value Objects for the invoice engine.
Immutable line items, discount and tax configuration, payments and totals.
"""

from typing import Tuple
from decimal import Decimal
from datetime import date, datetime
from dataclasses import dataclass
from enum import Enum

from invoice_engine.domain.models.base import (
    ValueObject,
    ValidationError,
    InvalidAmount,
    InvalidLineItem,
)
from invoice_engine.domain.models.money import Money, Numeric, to_decimal


class InvoiceStatus(str, Enum):
    """Invoice status, stored or effective."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """How far the ledger has settled the invoice total."""
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERPAID = "overpaid"


class PaymentMethod(str, Enum):
    """Payment method."""
    BANK_TRANSFER = "Bank Transfer"
    UPI = "UPI"
    CREDIT_CARD = "Credit Card"
    CASH = "Cash"
    CHEQUE = "Cheque"
    STRIPE = "Stripe"
    PAYPAL = "PayPal"


class DiscountType(str, Enum):
    """Discount type."""
    AMOUNT = "amount"
    PERCENTAGE = "percentage"


def parse_enum(enum_cls, value, field: str):
    """Coerce a raw value into ``enum_cls`` or raise ValidationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field}: {value!r} (expected one of {allowed})", field)


def check_quantity_and_rate(quantity: Numeric, rate: Numeric) -> Tuple[Decimal, Decimal]:
    """
    Validate the numeric parts of a line item.
    Malformed numbers raise InvalidAmount; out-of-range values raise InvalidLineItem.
    """
    quantity = to_decimal(quantity, "quantity")
    rate = to_decimal(rate, "rate")

    if quantity <= 0:
        raise InvalidLineItem("Quantity must be greater than zero", "quantity")

    if rate < 0:
        raise InvalidLineItem("Rate cannot be negative", "rate")

    return quantity, rate


@dataclass(frozen=True)
class LineItem(ValueObject):
    """
    A single billable entry on an invoice.
    The amount is always derived from quantity and rate.
    """

    description: str
    quantity: Decimal
    rate: Decimal

    def validate(self) -> None:
        if not self.description or not str(self.description).strip():
            raise InvalidLineItem("Description is required", "description")

        quantity, rate = check_quantity_and_rate(self.quantity, self.rate)
        object.__setattr__(self, "description", str(self.description).strip())
        object.__setattr__(self, "quantity", quantity)
        object.__setattr__(self, "rate", rate)

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "quantity": str(self.quantity),
            "rate": str(self.rate),
        }


@dataclass(frozen=True)
class DiscountSpec(ValueObject):
    """Flat or percentage discount applied to the subtotal."""

    type: DiscountType
    value: Decimal

    def validate(self) -> None:
        discount_type = parse_enum(DiscountType, self.type, "discount type")
        value = to_decimal(self.value, "discount")

        if value < 0:
            raise InvalidAmount("Discount cannot be negative", "discount")

        if discount_type == DiscountType.PERCENTAGE and value > 100:
            raise InvalidAmount("Discount cannot exceed 100%", "discount")

        object.__setattr__(self, "type", discount_type)
        object.__setattr__(self, "value", value)

    @classmethod
    def amount(cls, value: Numeric) -> "DiscountSpec":
        return cls(DiscountType.AMOUNT, value)

    @classmethod
    def percentage(cls, value: Numeric) -> "DiscountSpec":
        return cls(DiscountType.PERCENTAGE, value)

    @property
    def is_percentage(self) -> bool:
        return self.type == DiscountType.PERCENTAGE


@dataclass(frozen=True)
class TaxSpec(ValueObject):
    """Single flat tax rate, as a percentage of the taxable amount."""

    rate: Decimal

    def validate(self) -> None:
        rate = to_decimal(self.rate, "tax rate")
        if rate < 0:
            raise InvalidAmount("Tax rate cannot be negative", "tax_rate")
        object.__setattr__(self, "rate", rate)


@dataclass(frozen=True)
class InvoiceTotals:
    """
    Derived financial figures of an invoice.
    Never edited by hand; always produced by the totals calculator.
    """

    subtotal: Money
    discount_amount: Money
    tax_amount: Money
    total: Money

    @property
    def taxable_amount(self) -> Money:
        """Subtotal minus discount, the base the tax is computed on."""
        return self.subtotal - self.discount_amount

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal.amount,
            "discount_amount": self.discount_amount.amount,
            "tax_amount": self.tax_amount.amount,
            "total": self.total.amount,
        }


@dataclass(frozen=True)
class Payment(ValueObject):
    """
    A payment recorded against an invoice.
    Immutable once created; the reference is unique within one invoice.
    """

    amount: Money
    reference: str
    method: PaymentMethod
    payment_date: date
    notes: str = ""

    def validate(self) -> None:
        amount = self.amount
        if not isinstance(amount, Money):
            amount = Money.of(amount, field="payment amount")
        if not amount.is_positive:
            raise InvalidAmount("Payment amount must be positive", "amount")

        if not self.reference or not str(self.reference).strip():
            raise ValidationError("Payment reference is required", "reference")

        payment_date = self.payment_date
        if not isinstance(payment_date, date):
            raise ValidationError("Payment date is required", "payment_date")
        # Payments are dated, not timestamped
        if isinstance(payment_date, datetime):
            payment_date = payment_date.date()

        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "reference", str(self.reference).strip())
        object.__setattr__(self, "payment_date", payment_date)
        object.__setattr__(self, "method", parse_enum(PaymentMethod, self.method, "payment method"))
        object.__setattr__(self, "notes", self.notes or "")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "amount": str(self.amount.amount),
            "reference": self.reference,
            "method": self.method.value,
            "payment_date": self.payment_date.isoformat(),
            "notes": self.notes,
        }
