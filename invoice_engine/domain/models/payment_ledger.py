"""
Payment ledger for a single invoice.
Accumulates payments append-only and derives paid amount and balance due.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from invoice_engine.domain.models.base import DuplicatePaymentReference
from invoice_engine.domain.models.money import Money
from invoice_engine.domain.models.value_objects import Payment, PaymentStatus


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerState:
    """Snapshot of the ledger against a given invoice total."""

    payments: Tuple[Payment, ...]
    total: Money
    paid_amount: Money
    balance_due: Money

    @property
    def payment_status(self) -> PaymentStatus:
        """Classify the balance; a negative balance is an overpayment."""
        if self.balance_due.is_negative:
            return PaymentStatus.OVERPAID
        if self.balance_due.is_zero:
            return PaymentStatus.PAID
        if self.paid_amount.is_zero:
            return PaymentStatus.UNPAID
        return PaymentStatus.PARTIALLY_PAID

    @property
    def is_settled(self) -> bool:
        return not self.balance_due.is_positive

    def to_dict(self) -> dict:
        return {
            "payments": [payment.to_dict() for payment in self.payments],
            "paid_amount": self.paid_amount.amount,
            "balance_due": self.balance_due.amount,
            "payment_status": self.payment_status.value,
        }


class PaymentLedger:
    """
    Append-only record of payments for one invoice.

    The ledger owns no total and no balance: callers pass the current
    invoice total, and paid amount and balance due are recomputed from it
    on every read, so a total recalculation can never leave a stale balance
    behind. Payments are kept ordered by payment date, then by insertion
    order.
    """

    def __init__(self, payments: Iterable[Payment] = ()):
        self._payments: List[Payment] = []
        for payment in payments:
            self._append(payment)

    @property
    def payments(self) -> Tuple[Payment, ...]:
        return tuple(self._payments)

    @property
    def references(self) -> frozenset:
        return frozenset(payment.reference for payment in self._payments)

    @property
    def has_payments(self) -> bool:
        return bool(self._payments)

    @property
    def paid_amount(self) -> Money:
        paid = Money.zero()
        for payment in self._payments:
            paid = paid + payment.amount
        return paid

    def balance_due(self, total: Money) -> Money:
        """Total minus paid amount; negative on overpayment."""
        return total - self.paid_amount

    def contains(self, reference: str) -> bool:
        """Check whether a payment reference was already applied."""
        return reference in self.references

    def apply_payment(self, payment: Payment, total: Money) -> LedgerState:
        """
        Append a payment and return the ledger state against ``total``.
        A reference seen before is rejected instead of being counted twice,
        which guards against retried submissions.
        """
        self._append(payment)

        state = self.state(total)
        logger.info(
            f"Applied payment {payment.reference} of {payment.amount}; "
            f"balance due {state.balance_due}"
        )
        return state

    def state(self, total: Money) -> LedgerState:
        """Snapshot of the ledger against the given invoice total."""
        paid = self.paid_amount
        return LedgerState(
            payments=self.payments,
            total=total,
            paid_amount=paid,
            balance_due=total - paid,
        )

    def _append(self, payment: Payment) -> None:
        if self.contains(payment.reference):
            logger.warning(f"Rejected duplicate payment reference {payment.reference}")
            raise DuplicatePaymentReference(payment.reference)

        # sorted() is stable, so equal dates keep insertion order
        self._payments = sorted(self._payments + [payment], key=lambda p: p.payment_date)
