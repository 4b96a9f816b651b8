"""
Domain events related to invoices.
Raised by the invoice aggregate on status changes and recorded payments.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from .base import DomainEvent


@dataclass
class InvoiceSent(DomainEvent):
    """Event fired when a draft invoice is sent to the client."""

    invoice_number: str
    client_id: str
    total_amount: Decimal
    due_date: Optional[date] = None

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_number": self.invoice_number,
            "client_id": self.client_id,
            "total_amount": str(self.total_amount),
            "due_date": self.due_date.isoformat() if self.due_date else None
        }


@dataclass
class InvoicePaymentRecorded(DomainEvent):
    """Event fired when a payment is applied to the invoice ledger."""

    invoice_number: str
    reference: str
    amount: Decimal
    payment_method: str
    payment_date: date
    balance_due: Decimal

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_number": self.invoice_number,
            "reference": self.reference,
            "amount": str(self.amount),
            "payment_method": self.payment_method,
            "payment_date": self.payment_date.isoformat(),
            "balance_due": str(self.balance_due)
        }


@dataclass
class InvoiceVoided(DomainEvent):
    """Event fired when an invoice is voided."""

    invoice_number: str
    client_id: str
    previous_status: str
    reason: Optional[str] = None

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "invoice_number": self.invoice_number,
            "client_id": self.client_id,
            "previous_status": self.previous_status,
            "reason": self.reason
        }
