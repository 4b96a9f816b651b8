"""
Domain events for the invoice engine.
"""

from .base import DomainEvent
from .invoice_events import InvoiceSent, InvoicePaymentRecorded, InvoiceVoided

__all__ = [
    "DomainEvent",
    "InvoiceSent",
    "InvoicePaymentRecorded",
    "InvoiceVoided",
]
