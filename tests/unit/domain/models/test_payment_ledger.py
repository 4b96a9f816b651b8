"""
Unit tests for the PaymentLedger.
"""

import pytest
from datetime import date, datetime

from invoice_engine.domain.models.money import Money
from invoice_engine.domain.models.base import DuplicatePaymentReference
from invoice_engine.domain.models.payment_ledger import PaymentLedger
from invoice_engine.domain.models.value_objects import Payment, PaymentMethod, PaymentStatus


TOTAL = Money.of(2124)


def make_payment(reference, amount, payment_date=date(2024, 3, 1)):
    return Payment(
        amount=amount,
        reference=reference,
        method=PaymentMethod.BANK_TRANSFER,
        payment_date=payment_date
    )


class TestPaymentLedger:
    """Test cases for PaymentLedger."""

    def setup_method(self):
        """Set up test fixtures."""
        self.ledger = PaymentLedger()

    def test_empty_ledger(self):
        """Test a fresh ledger owes the full total."""
        state = self.ledger.state(TOTAL)

        assert state.paid_amount == Money.zero()
        assert state.balance_due == TOTAL
        assert state.payment_status == PaymentStatus.UNPAID
        assert not self.ledger.has_payments

    def test_full_payment_settles_balance(self):
        """Test paying the total leaves nothing due."""
        state = self.ledger.apply_payment(make_payment("PAY-1", 2124), TOTAL)

        assert state.paid_amount == Money.of(2124)
        assert state.balance_due == Money.zero()
        assert state.payment_status == PaymentStatus.PAID
        assert state.is_settled

    def test_partial_payments_accumulate(self):
        """Test paid amount is the sum of payments."""
        self.ledger.apply_payment(make_payment("PAY-1", 1000), TOTAL)
        state = self.ledger.apply_payment(make_payment("PAY-2", "124.50"), TOTAL)

        assert state.paid_amount == Money.of("1124.50")
        assert state.balance_due == Money.of("999.50")
        assert state.payment_status == PaymentStatus.PARTIALLY_PAID
        assert not state.is_settled

    def test_duplicate_reference_rejected(self):
        """Test a reference can only be applied once."""
        self.ledger.apply_payment(make_payment("PAY-1", 2124), TOTAL)

        with pytest.raises(DuplicatePaymentReference, match="PAY-1"):
            self.ledger.apply_payment(make_payment("PAY-1", 2124), TOTAL)

        assert self.ledger.paid_amount == Money.of(2124)
        assert len(self.ledger.payments) == 1

    def test_duplicate_reference_in_initial_payments(self):
        """Test replayed payments are checked too."""
        with pytest.raises(DuplicatePaymentReference):
            PaymentLedger(payments=[make_payment("PAY-1", 50), make_payment("PAY-1", 50)])

    def test_overpayment_is_not_clamped(self):
        """Test balance due goes negative on overpayment."""
        state = self.ledger.apply_payment(make_payment("PAY-1", 2200), TOTAL)

        assert state.balance_due == Money.of(-76, allow_negative=True)
        assert state.balance_due.is_negative
        assert state.payment_status == PaymentStatus.OVERPAID

    def test_payments_ordered_by_date_then_insertion(self):
        """Test ordering of the payment history."""
        self.ledger.apply_payment(make_payment("PAY-B", 10, date(2024, 3, 5)), TOTAL)
        self.ledger.apply_payment(make_payment("PAY-A", 10, date(2024, 3, 1)), TOTAL)
        self.ledger.apply_payment(make_payment("PAY-C", 10, date(2024, 3, 5)), TOTAL)

        assert [p.reference for p in self.ledger.payments] == ["PAY-A", "PAY-B", "PAY-C"]

    def test_dates_and_timestamps_can_be_mixed(self):
        """Test payments given as datetimes order alongside plain dates."""
        self.ledger.apply_payment(make_payment("PAY-1", 10, date(2024, 1, 1)), TOTAL)
        state = self.ledger.apply_payment(make_payment("PAY-2", 10, datetime(2024, 1, 2, 10)), TOTAL)

        assert [p.payment_date for p in state.payments] == [date(2024, 1, 1), date(2024, 1, 2)]

    def test_balance_follows_total(self):
        """Test balance is computed against whichever total is passed in."""
        self.ledger.apply_payment(make_payment("PAY-1", 1000), TOTAL)

        assert self.ledger.balance_due(Money.of(1500)) == Money.of(500)
        assert self.ledger.state(Money.of(1500)).balance_due == Money.of(500)

    def test_contains(self):
        """Test reference lookup."""
        self.ledger.apply_payment(make_payment("PAY-1", 10), TOTAL)

        assert self.ledger.contains("PAY-1")
        assert not self.ledger.contains("PAY-2")
        assert self.ledger.references == frozenset({"PAY-1"})

    def test_state_to_dict(self):
        """Test snapshot serialization."""
        self.ledger.apply_payment(make_payment("PAY-1", 124), TOTAL)
        data = self.ledger.state(TOTAL).to_dict()

        assert data["payment_status"] == "partially_paid"
        assert str(data["balance_due"]) == "2000.00"
        assert data["payments"][0]["reference"] == "PAY-1"
