"""
Domain models for the invoice engine.
This module exports the value objects, the payment ledger and the exceptions.
The Invoice aggregate lives in ``invoice_engine.domain.models.invoice``.
"""

# Base classes
from .base import (
    BaseEntity,
    AggregateRoot,
    DomainException,
    ValidationError,
    InvalidAmount,
    InvalidLineItem,
    BusinessRuleViolation,
    DuplicatePaymentReference,
    InvalidTransition,
    StaleInvoiceVersion,
    ValueObject
)

# Value Objects
from .money import Money, to_decimal
from .value_objects import (
    InvoiceStatus,
    PaymentStatus,
    PaymentMethod,
    DiscountType,
    LineItem,
    DiscountSpec,
    TaxSpec,
    InvoiceTotals,
    Payment
)

# Ledger
from .payment_ledger import PaymentLedger, LedgerState

__all__ = [
    # Base
    "BaseEntity",
    "AggregateRoot",
    "DomainException",
    "ValidationError",
    "InvalidAmount",
    "InvalidLineItem",
    "BusinessRuleViolation",
    "DuplicatePaymentReference",
    "InvalidTransition",
    "StaleInvoiceVersion",
    "ValueObject",

    # Value Objects
    "Money",
    "to_decimal",
    "InvoiceStatus",
    "PaymentStatus",
    "PaymentMethod",
    "DiscountType",
    "LineItem",
    "DiscountSpec",
    "TaxSpec",
    "InvoiceTotals",
    "Payment",

    # Ledger
    "PaymentLedger",
    "LedgerState",
]
