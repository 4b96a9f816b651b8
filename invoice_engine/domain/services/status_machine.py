"""
Invoice status machine.
Validates explicit status transitions and derives the effective status that
list, detail and dashboard views display.

State machine:
    DRAFT → SENT → PAID | OVERDUE | CANCELLED
    DRAFT → CANCELLED
    OVERDUE → PAID
    PAID and CANCELLED are terminal.
"""

import logging
from datetime import date
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, List, Optional

from invoice_engine.domain.models.base import InvalidTransition
from invoice_engine.domain.models.money import Money
from invoice_engine.domain.models.value_objects import InvoiceStatus, parse_enum
from invoice_engine.domain.events.invoice_events import InvoiceSent, InvoiceVoided

if TYPE_CHECKING:
    from invoice_engine.domain.models.invoice import Invoice


logger = logging.getLogger(__name__)


_VALID_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID}),
    InvoiceStatus.PAID: frozenset(),  # Terminal
    InvoiceStatus.CANCELLED: frozenset(),  # Terminal
}

_VOIDABLE = frozenset({InvoiceStatus.DRAFT, InvoiceStatus.SENT})

ACTION_EDIT = "edit"
ACTION_SEND = "send"
ACTION_VOID = "void"
ACTION_RECORD_PAYMENT = "record_payment"


def effective_status(
    stored_status: InvoiceStatus,
    due_date: Optional[date],
    balance_due: Money,
    today: Optional[date] = None
) -> InvoiceStatus:
    """
    Derive the status shown to the user.

    Full payment always takes precedence over overdue, even past the due
    date. An invoice without a due date never becomes overdue.
    """
    stored_status = parse_enum(InvoiceStatus, stored_status, "status")
    today = today or date.today()

    if stored_status == InvoiceStatus.CANCELLED:
        return InvoiceStatus.CANCELLED

    if not balance_due.is_positive and stored_status != InvoiceStatus.DRAFT:
        return InvoiceStatus.PAID

    if (
        stored_status == InvoiceStatus.SENT
        and due_date is not None
        and due_date < today
        and balance_due.is_positive
    ):
        return InvoiceStatus.OVERDUE

    return stored_status


def days_until_due(due_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Whole days until the due date, negative once it has passed."""
    if due_date is None:
        return None
    today = today or date.today()
    return (due_date - today).days


class InvoiceStatusMachine:
    """
    Domain service for invoice status changes.
    All explicit transitions go through here; failures raise InvalidTransition.
    """

    def can_transition(self, source: InvoiceStatus, target: InvoiceStatus) -> bool:
        """Check the transition table."""
        source = parse_enum(InvoiceStatus, source, "status")
        target = parse_enum(InvoiceStatus, target, "status")
        return target in _VALID_TRANSITIONS.get(source, frozenset())

    def allowed_targets(self, source: InvoiceStatus) -> FrozenSet[InvoiceStatus]:
        return _VALID_TRANSITIONS.get(parse_enum(InvoiceStatus, source, "status"), frozenset())

    def send(self, invoice: "Invoice") -> None:
        """
        Send a draft invoice to the client.
        Requires at least one line item and a non-negative total.
        """
        self._assert_can_transition(invoice, InvoiceStatus.SENT)

        if not invoice.line_items:
            self._reject(invoice, "Cannot send an invoice without line items")

        totals = invoice.totals
        if totals.total.is_negative:
            self._reject(invoice, "Cannot send an invoice with a negative total")

        invoice.apply_status(InvoiceStatus.SENT)
        invoice.add_event(InvoiceSent(
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            total_amount=totals.total.amount,
            due_date=invoice.due_date
        ))

    def void(self, invoice: "Invoice", reason: Optional[str] = None) -> None:
        """Void a draft or sent invoice that has no payments."""
        previous = invoice.status

        if previous not in _VOIDABLE:
            self._reject(invoice, f"Cannot void an invoice in status {previous.value}")

        if invoice.has_payments:
            self._reject(invoice, "Cannot void an invoice with recorded payments")

        invoice.apply_status(InvoiceStatus.CANCELLED)
        invoice.add_event(InvoiceVoided(
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            previous_status=previous.value,
            reason=reason
        ))

    def effective_status(self, invoice: "Invoice", today: Optional[date] = None) -> InvoiceStatus:
        """Effective status of an invoice aggregate."""
        return effective_status(invoice.status, invoice.due_date, invoice.balance_due, today)

    def available_actions(self, invoice: "Invoice") -> List[str]:
        """
        Actions a view may offer for this invoice.
        Recording a payment is disabled once nothing is left to pay.
        """
        actions = []
        if invoice.status == InvoiceStatus.DRAFT:
            actions.append(ACTION_EDIT)
            if invoice.line_items:
                actions.append(ACTION_SEND)

        if invoice.status in _VOIDABLE and not invoice.has_payments:
            actions.append(ACTION_VOID)

        if self.can_record_payment(invoice):
            actions.append(ACTION_RECORD_PAYMENT)

        return actions

    def can_record_payment(self, invoice: "Invoice") -> bool:
        if invoice.status in (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED):
            return False
        return invoice.balance_due.is_positive

    def collect_overdue(self, invoices: Iterable["Invoice"], today: Optional[date] = None) -> List["Invoice"]:
        """Invoices whose effective status is overdue. Nothing is mutated."""
        today = today or date.today()
        return [
            invoice for invoice in invoices
            if self.effective_status(invoice, today) == InvoiceStatus.OVERDUE
        ]

    def _assert_can_transition(self, invoice: "Invoice", target: InvoiceStatus) -> None:
        if not self.can_transition(invoice.status, target):
            self._reject(
                invoice,
                f"Cannot transition from {invoice.status.value} to {target.value}"
            )

    def _reject(self, invoice: "Invoice", message: str) -> None:
        logger.warning(f"Invoice {invoice.invoice_number}: {message}")
        raise InvalidTransition(message)
