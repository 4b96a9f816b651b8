"""
Invoice domain model.
The aggregate root owning line items, discount/tax configuration and the
payment ledger of a single invoice.
"""

import logging
from datetime import date
from typing import Optional, List, Iterable

from invoice_engine.domain.models.base import (
    AggregateRoot,
    ValidationError,
    BusinessRuleViolation,
    InvalidTransition,
)
from invoice_engine.domain.models.money import Money, Numeric
from invoice_engine.domain.models.payment_ledger import LedgerState, PaymentLedger
from invoice_engine.domain.models.value_objects import (
    DiscountSpec,
    InvoiceStatus,
    InvoiceTotals,
    LineItem,
    Payment,
    TaxSpec,
    parse_enum,
)
from invoice_engine.domain.events.invoice_events import InvoicePaymentRecorded
from invoice_engine.domain.services.billing_service import InvoiceTotalsCalculator
from invoice_engine.domain.services.status_machine import effective_status


logger = logging.getLogger(__name__)


class Invoice(AggregateRoot):
    """
    Invoice aggregate root.

    Totals are recomputed from line items, discount and tax on every read and
    the effective status is derived on demand; only the explicitly set
    ``status`` is stored. Client and project are referenced by identifier.
    """

    def __init__(
        self,
        invoice_number: str,
        client_id: str,
        project_id: Optional[str] = None,
        line_items: Iterable[LineItem] = (),
        discount: Optional[DiscountSpec] = None,
        tax: Optional[TaxSpec] = None,
        due_date: Optional[date] = None,
        invoice_date: Optional[date] = None,
        status: InvoiceStatus = InvoiceStatus.DRAFT,
        payments: Iterable[Payment] = (),
        currency: str = "INR",
        notes: Optional[str] = None,
        **kwargs
    ):
        super().__init__(**kwargs)

        # Required fields
        self.invoice_number = invoice_number
        self.client_id = client_id
        self.project_id = project_id

        # Dates
        self.invoice_date = invoice_date or date.today()
        self.due_date = due_date

        # Stored status, the last one explicitly set
        self.status = parse_enum(InvoiceStatus, status, "status")

        # Financial configuration
        self.currency = currency
        self.line_items: List[LineItem] = list(line_items)
        self.discount = discount
        self.tax = tax
        self.notes = notes

        self._calculator = InvoiceTotalsCalculator()
        self._ledger = PaymentLedger(payments)

        self.validate()

    def validate(self) -> None:
        """Validate invoice state."""
        if not self.invoice_number or not str(self.invoice_number).strip():
            raise ValidationError("Invoice number is required", "invoice_number")

        if not self.client_id:
            raise ValidationError("Client ID is required", "client_id")

        if self.due_date and self.due_date < self.invoice_date:
            raise ValidationError("Due date cannot be before invoice date", "due_date")

    # Derived figures

    @property
    def totals(self) -> InvoiceTotals:
        """Financial totals, recomputed from scratch."""
        return self._calculator.compute(self.line_items, self.discount, self.tax)

    @property
    def ledger(self) -> PaymentLedger:
        return self._ledger

    @property
    def ledger_state(self) -> LedgerState:
        return self._ledger.state(self.totals.total)

    @property
    def payments(self) -> tuple:
        return self._ledger.payments

    @property
    def has_payments(self) -> bool:
        return self._ledger.has_payments

    @property
    def paid_amount(self) -> Money:
        return self._ledger.paid_amount

    @property
    def balance_due(self) -> Money:
        return self._ledger.balance_due(self.totals.total)

    @property
    def is_draft(self) -> bool:
        return self.status == InvoiceStatus.DRAFT

    def effective_status(self, today: Optional[date] = None) -> InvoiceStatus:
        """Status to display, derived from stored status, due date and balance."""
        return effective_status(self.status, self.due_date, self.balance_due, today)

    def can_be_edited(self) -> bool:
        """Line items, discount and tax can only change while in draft."""
        return self.is_draft

    # Draft editing

    def add_line_item(self, description: str, quantity: Numeric, rate: Numeric) -> LineItem:
        """Add a line item to a draft invoice."""
        self._ensure_editable()
        item = LineItem(description=description, quantity=quantity, rate=rate)
        self.line_items.append(item)
        self._touch()
        return item

    def remove_line_item(self, index: int) -> LineItem:
        """Remove a line item by index."""
        self._ensure_editable()

        if index < 0 or index >= len(self.line_items):
            raise ValidationError("Invalid line item index", "index")

        item = self.line_items.pop(index)
        self._touch()
        return item

    def replace_line_items(self, line_items: Iterable[LineItem]) -> None:
        """Replace all line items at once."""
        self._ensure_editable()
        self.line_items = list(line_items)
        self._touch()

    def set_discount(self, discount: Optional[DiscountSpec]) -> None:
        """Set or clear the discount."""
        self._ensure_editable()
        self.discount = discount
        self._touch()

    def set_tax(self, tax: Optional[TaxSpec]) -> None:
        """Set or clear the tax rate."""
        self._ensure_editable()
        self.tax = tax
        self._touch()

    # Payments and status

    def record_payment(self, payment: Payment) -> LedgerState:
        """
        Apply a payment to the ledger.
        The stored status is left untouched; paid/overdue display follows
        from the effective status derivation.
        """
        if self.status in (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED):
            raise InvalidTransition(f"Cannot record a payment on a {self.status.value} invoice")

        state = self._ledger.apply_payment(payment, self.totals.total)
        self.increment_version()

        self.add_event(InvoicePaymentRecorded(
            invoice_number=self.invoice_number,
            reference=payment.reference,
            amount=payment.amount.amount,
            payment_method=payment.method.value,
            payment_date=payment.payment_date,
            balance_due=state.balance_due.amount
        ))
        return state

    def apply_status(self, status: InvoiceStatus) -> None:
        """
        Store a new status.
        Transition rules live in InvoiceStatusMachine, which is the only caller.
        """
        previous = self.status
        self.status = status
        self.increment_version()
        logger.info(f"Invoice {self.invoice_number} status changed: {previous.value} -> {status.value}")

    def _ensure_editable(self) -> None:
        if not self.can_be_edited():
            raise BusinessRuleViolation(
                f"Cannot edit invoice {self.invoice_number} in status {self.status.value}"
            )

    def _touch(self) -> None:
        self.increment_version()

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        totals = self.totals
        ledger = self.ledger_state
        return {
            "id": self.id,
            "invoice_number": self.invoice_number,
            "client_id": self.client_id,
            "project_id": self.project_id,
            "invoice_date": self.invoice_date.isoformat(),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "status": self.status.value,
            "currency": self.currency,
            "line_items": [item.to_dict() for item in self.line_items],
            "discount": (
                {"type": self.discount.type.value, "value": str(self.discount.value)}
                if self.discount else None
            ),
            "tax_rate": str(self.tax.rate) if self.tax else None,
            "notes": self.notes,
            "version": self.version,
            **totals.to_dict(),
            **ledger.to_dict(),
        }
