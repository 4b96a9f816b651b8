"""
Reconciliation of stored invoice figures.
Compares what a persisted record claims against what the engine computes,
so inconsistent records can be found and repaired by the caller.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional

from invoice_engine.domain.models.money import to_decimal
from invoice_engine.domain.models.value_objects import InvoiceStatus, parse_enum

if TYPE_CHECKING:
    from invoice_engine.domain.models.invoice import Invoice


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportedFigures:
    """
    Figures as stored on an invoice record; any of them may be missing.
    Amounts are kept exactly as stored, without rounding to minor units.
    """

    subtotal: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    balance_due: Optional[Decimal] = None
    status: Optional[InvoiceStatus] = None


@dataclass(frozen=True)
class Discrepancy:
    """A stored figure that does not match the recomputed one."""

    field: str
    reported: Any
    expected: Any

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "reported": str(self.reported),
            "expected": str(self.expected),
        }


class ReconciliationService:
    """Finds stored figures that drifted from the computed ones."""

    def reconcile(
        self,
        invoice: "Invoice",
        reported: ReportedFigures,
        today: Optional[date] = None
    ) -> List[Discrepancy]:
        """
        Return one discrepancy per mismatching figure.
        The stored status is compared against the effective status; the
        invoice itself is never modified.
        """
        totals = invoice.totals
        ledger = invoice.ledger_state

        expected = {
            "subtotal": totals.subtotal,
            "discount_amount": totals.discount_amount,
            "tax_amount": totals.tax_amount,
            "total": totals.total,
            "paid_amount": ledger.paid_amount,
            "balance_due": ledger.balance_due,
        }

        discrepancies = []
        for field, computed in expected.items():
            stored = getattr(reported, field)
            if stored is None:
                continue
            # Sub-minor drift such as 1999.996 against 2000.00 is a mismatch
            stored = to_decimal(stored, field)
            if stored != computed.amount:
                discrepancies.append(Discrepancy(field, stored, computed.amount))

        if reported.status is not None:
            stored_status = parse_enum(InvoiceStatus, reported.status, "status")
            computed_status = invoice.effective_status(today)
            if stored_status != computed_status:
                discrepancies.append(Discrepancy("status", stored_status.value, computed_status.value))

        if discrepancies:
            logger.info(
                f"Invoice {invoice.invoice_number} has {len(discrepancies)} inconsistent figure(s): "
                f"{', '.join(d.field for d in discrepancies)}"
            )

        return discrepancies
