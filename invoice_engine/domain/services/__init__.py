"""
Domain services for the invoice engine.
This module exports the calculators and the status machine.
"""

from .billing_service import (
    LineItemCalculator,
    DiscountEngine,
    TaxEngine,
    InvoiceTotalsCalculator,
    compute_totals,
)
from .status_machine import InvoiceStatusMachine, effective_status, days_until_due
from .reconciliation_service import ReconciliationService, ReportedFigures, Discrepancy

__all__ = [
    "LineItemCalculator",
    "DiscountEngine",
    "TaxEngine",
    "InvoiceTotalsCalculator",
    "compute_totals",
    "InvoiceStatusMachine",
    "effective_status",
    "days_until_due",
    "ReconciliationService",
    "ReportedFigures",
    "Discrepancy",
]
