"""
Application layer use cases.
Invoice calculations, status actions and payments for callers of the engine.
"""

from .base_use_case import *
from .invoice_use_cases import *

__all__ = [
    # Base Use Cases
    "BaseUseCase",
    "QueryUseCase",
    "CommandUseCase",
    "UseCaseResult",

    # Invoice Use Cases
    "PreviewTotalsUseCase",
    "GetInvoiceSummaryUseCase",
    "FindOverdueInvoicesUseCase",
    "SendInvoiceUseCase",
    "VoidInvoiceUseCase",
    "RecordPaymentUseCase",
    "ReconcileInvoiceUseCase",
]
