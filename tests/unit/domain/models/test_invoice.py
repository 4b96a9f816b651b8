"""
Unit tests for the Invoice aggregate.
"""

import pytest
from datetime import date
from decimal import Decimal

from invoice_engine.domain.models.invoice import Invoice
from invoice_engine.domain.models.money import Money
from invoice_engine.domain.models.base import (
    BusinessRuleViolation,
    DuplicatePaymentReference,
    InvalidTransition,
    ValidationError,
)
from invoice_engine.domain.models.value_objects import (
    DiscountSpec,
    InvoiceStatus,
    LineItem,
    Payment,
    PaymentMethod,
    TaxSpec,
)


INVOICE_DATE = date(2024, 3, 1)
DUE_DATE = date(2024, 3, 31)


def make_invoice(**overrides):
    data = dict(
        invoice_number="INV-2024-001",
        client_id="client123",
        line_items=[
            LineItem(description="Design", quantity=2, rate=500),
            LineItem(description="Development", quantity=1, rate=1000),
        ],
        discount=DiscountSpec.percentage(10),
        tax=TaxSpec(18),
        invoice_date=INVOICE_DATE,
        due_date=DUE_DATE,
    )
    data.update(overrides)
    return Invoice(**data)


def make_payment(reference="PAY-1", amount=2124):
    return Payment(
        amount=amount,
        reference=reference,
        method=PaymentMethod.UPI,
        payment_date=date(2024, 3, 10)
    )


class TestInvoiceCreation:
    """Test cases for creating invoices."""

    def test_create_invoice(self):
        """Test defaults and computed totals."""
        invoice = make_invoice()

        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.is_draft
        assert invoice.currency == "INR"
        assert invoice.version == 1
        assert invoice.totals.total == Money.of(2124)
        assert invoice.balance_due == Money.of(2124)
        assert invoice.paid_amount == Money.zero()

    def test_status_from_string(self):
        """Test stored status may be given as its raw value."""
        invoice = make_invoice(status="sent")
        assert invoice.status == InvoiceStatus.SENT

    def test_invoice_number_required(self):
        """Test missing invoice number."""
        with pytest.raises(ValidationError, match="Invoice number is required"):
            make_invoice(invoice_number="  ")

    def test_client_required(self):
        """Test missing client."""
        with pytest.raises(ValidationError, match="Client ID is required"):
            make_invoice(client_id="")

    def test_due_date_before_invoice_date(self):
        """Test due date ordering."""
        with pytest.raises(ValidationError, match="Due date cannot be before invoice date"):
            make_invoice(due_date=date(2024, 2, 1))

    def test_existing_payments_are_replayed(self):
        """Test payments given at construction go through the ledger."""
        invoice = make_invoice(status=InvoiceStatus.SENT, payments=[make_payment(amount=1000)])

        assert invoice.paid_amount == Money.of(1000)
        assert invoice.balance_due == Money.of(1124)

    def test_equality_by_id(self):
        """Test entity identity."""
        assert make_invoice(id="inv-1") == make_invoice(id="inv-1")
        assert make_invoice(id="inv-1") != make_invoice(id="inv-2")
        assert make_invoice() != make_invoice()


class TestInvoiceEditing:
    """Test cases for draft editing."""

    def test_add_line_item_updates_totals_and_balance(self):
        """Test totals and balance follow line item changes."""
        invoice = make_invoice(discount=None, tax=None)

        invoice.add_line_item("Hosting", 1, 500)

        assert invoice.totals.subtotal == Money.of(2500)
        assert invoice.balance_due == Money.of(2500)
        assert invoice.version == 2

    def test_remove_line_item(self):
        """Test removing by index."""
        invoice = make_invoice(discount=None, tax=None)

        removed = invoice.remove_line_item(0)

        assert removed.description == "Design"
        assert invoice.totals.total == Money.of(1000)

    def test_remove_line_item_invalid_index(self):
        """Test out of range index."""
        invoice = make_invoice()

        with pytest.raises(ValidationError, match="Invalid line item index"):
            invoice.remove_line_item(5)

    def test_set_discount_and_tax(self):
        """Test changing discount and tax."""
        invoice = make_invoice()

        invoice.set_discount(DiscountSpec.amount(500))
        invoice.set_tax(None)

        assert invoice.totals.total == Money.of(1500)
        assert invoice.balance_due == Money.of(1500)

    def test_balance_follows_directly_assigned_discount(self):
        """Test balance due tracks the total even when attributes are set directly."""
        invoice = make_invoice(discount=None, status=InvoiceStatus.SENT)
        assert invoice.balance_due == Money.of(2360)

        invoice.discount = DiscountSpec.percentage(10)

        assert invoice.totals.total == Money.of(2124)
        assert invoice.balance_due == Money.of(2124)
        assert invoice.ledger_state.balance_due == Money.of(2124)

    def test_balance_follows_directly_assigned_line_items(self):
        """Test balance due after paying and then replacing line items."""
        invoice = make_invoice(discount=None, tax=None, status=InvoiceStatus.SENT)
        invoice.record_payment(make_payment(amount=500))

        invoice.line_items = [LineItem(description="Retainer", quantity=1, rate=800)]

        assert invoice.balance_due == Money.of(300)

    def test_replace_line_items(self):
        """Test replacing all line items."""
        invoice = make_invoice(discount=None, tax=None)

        invoice.replace_line_items([LineItem(description="Retainer", quantity=1, rate=300)])

        assert invoice.totals.total == Money.of(300)

    def test_cannot_edit_sent_invoice(self):
        """Test line items are frozen once sent."""
        invoice = make_invoice(status=InvoiceStatus.SENT)

        assert not invoice.can_be_edited()
        with pytest.raises(BusinessRuleViolation, match="Cannot edit invoice"):
            invoice.add_line_item("Extra", 1, 100)

        with pytest.raises(BusinessRuleViolation):
            invoice.set_discount(None)


class TestInvoicePayments:
    """Test cases for recording payments."""

    def test_record_payment(self):
        """Test a full payment settles the invoice."""
        invoice = make_invoice(status=InvoiceStatus.SENT)

        state = invoice.record_payment(make_payment())

        assert state.balance_due == Money.zero()
        assert invoice.status == InvoiceStatus.SENT
        assert invoice.effective_status(date(2024, 3, 15)) == InvoiceStatus.PAID
        assert invoice.version == 2

    def test_record_payment_raises_event(self):
        """Test a payment event is collected."""
        invoice = make_invoice(status=InvoiceStatus.SENT)
        invoice.record_payment(make_payment(amount=1000))

        events = invoice.pull_events()

        assert len(events) == 1
        assert events[0].event_type == "InvoicePaymentRecorded"
        assert events[0].balance_due == Decimal("1124.00")
        assert invoice.pull_events() == []

    def test_paid_takes_precedence_over_overdue(self):
        """Test a settled invoice is paid even after the due date."""
        invoice = make_invoice(status=InvoiceStatus.SENT)
        invoice.record_payment(make_payment())

        assert invoice.effective_status(date(2024, 5, 1)) == InvoiceStatus.PAID

    def test_duplicate_payment_rejected(self):
        """Test the same reference cannot be applied twice."""
        invoice = make_invoice(status=InvoiceStatus.SENT)
        invoice.record_payment(make_payment())

        with pytest.raises(DuplicatePaymentReference):
            invoice.record_payment(make_payment())

        assert invoice.paid_amount == Money.of(2124)
        assert invoice.version == 2

    def test_cannot_pay_draft_or_cancelled(self):
        """Test payments need an issued invoice."""
        with pytest.raises(InvalidTransition, match="draft"):
            make_invoice().record_payment(make_payment())

        with pytest.raises(InvalidTransition, match="cancelled"):
            make_invoice(status=InvoiceStatus.CANCELLED).record_payment(make_payment())

    def test_to_dict(self):
        """Test serialization includes computed figures."""
        invoice = make_invoice(status=InvoiceStatus.SENT)
        invoice.record_payment(make_payment(amount=124))

        data = invoice.to_dict()

        assert data["status"] == "sent"
        assert data["total"] == Decimal("2124.00")
        assert data["balance_due"] == Decimal("2000.00")
        assert data["discount"] == {"type": "percentage", "value": "10"}
        assert data["payment_status"] == "partially_paid"
