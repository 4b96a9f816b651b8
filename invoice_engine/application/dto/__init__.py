"""
Application layer DTOs.
Data Transfer Objects for invoice requests and responses.
"""

from .base_dto import *
from .invoice_dto import *

__all__ = [
    # Base DTOs
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "ErrorResponseDTO",

    # Invoice DTOs
    "LineItemDTO",
    "PaymentDTO",
    "InvoiceRecordDTO",
    "TotalsRequestDTO",
    "TotalsResponseDTO",
    "InvoiceSummaryResponseDTO",
    "InvoiceResponseDTO",
    "InvoiceActionRequestDTO",
    "RecordPaymentRequestDTO",
    "OverdueInvoicesRequestDTO",
    "ReportedFiguresDTO",
    "ReconcileRequestDTO",
    "DiscrepancyDTO",
    "ReconcileResponseDTO",
]
