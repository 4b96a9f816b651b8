"""
Invoice DTOs for the application layer.
Data Transfer Objects for invoice records, totals previews and payments.

Numeric ranges such as positive quantities and discount caps are checked by
the domain, which reports them as typed errors.
"""

from typing import Optional, List
from datetime import date
from decimal import Decimal
from pydantic import Field

from invoice_engine.domain.models.value_objects import (
    DiscountType,
    InvoiceStatus,
    PaymentMethod,
    PaymentStatus,
)
from .base_dto import RequestDTO, ResponseDTO


# Nested DTOs
class LineItemDTO(RequestDTO):
    """DTO for a line item."""

    description: str = Field(description="Item description")
    quantity: Decimal = Field(description="Quantity")
    rate: Decimal = Field(description="Rate per unit")
    amount: Optional[Decimal] = Field(
        default=None, description="Stored amount; always recomputed from quantity and rate"
    )


class PaymentDTO(RequestDTO):
    """DTO for a payment record."""

    amount: Decimal = Field(description="Payment amount")
    reference: str = Field(description="Payment reference, unique per invoice")
    method: PaymentMethod = Field(default=PaymentMethod.BANK_TRANSFER, description="Payment method")
    payment_date: date = Field(alias="date", description="Payment date")
    notes: str = Field(default="", max_length=500, description="Payment notes")


class InvoiceRecordDTO(RequestDTO):
    """
    Raw invoice record as held by the caller.
    Calculated fields such as subtotal or balanceDue are not part of the
    record; they are always produced by the engine.
    """

    id: Optional[str] = Field(default=None, description="Invoice ID")
    invoice_number: str = Field(min_length=1, max_length=50, description="Invoice number")
    client_id: str = Field(min_length=1, description="Client ID")
    project_id: Optional[str] = Field(default=None, description="Project ID")
    invoice_date: Optional[date] = Field(default=None, description="Invoice date")
    due_date: Optional[date] = Field(default=None, description="Due date")
    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT, description="Stored status")
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3, description="Currency code")

    line_items: List[LineItemDTO] = Field(default_factory=list, description="Line items")
    discount: Decimal = Field(default=Decimal("0"), description="Discount value")
    discount_type: DiscountType = Field(default=DiscountType.AMOUNT, description="Discount type")
    tax_rate: Optional[Decimal] = Field(default=None, description="Tax rate in percent")

    payments: List[PaymentDTO] = Field(default_factory=list, description="Recorded payments")
    notes: Optional[str] = Field(default=None, max_length=2000, description="Notes")
    version: int = Field(default=1, ge=1, description="Record version for optimistic concurrency")


class TotalsRequestDTO(RequestDTO):
    """DTO for a live totals preview while an invoice is being authored."""

    line_items: List[LineItemDTO] = Field(default_factory=list, description="Line items")
    discount: Decimal = Field(default=Decimal("0"), description="Discount value")
    discount_type: DiscountType = Field(default=DiscountType.AMOUNT, description="Discount type")
    tax_rate: Optional[Decimal] = Field(default=None, description="Tax rate in percent")


class TotalsResponseDTO(ResponseDTO):
    """DTO for computed totals."""

    subtotal: Decimal = Field(description="Sum of line-item amounts")
    discount_amount: Decimal = Field(description="Discount amount")
    taxable_amount: Decimal = Field(description="Subtotal minus discount")
    tax_amount: Decimal = Field(description="Tax amount")
    total: Decimal = Field(description="Invoice total")
    line_amounts: List[Decimal] = Field(default_factory=list, description="Amount per line item")


class InvoiceSummaryResponseDTO(ResponseDTO):
    """DTO with every computed figure a list, detail or dashboard view needs."""

    invoice_number: str = Field(description="Invoice number")
    subtotal: Decimal = Field(description="Sum of line-item amounts")
    discount_amount: Decimal = Field(description="Discount amount")
    tax_amount: Decimal = Field(description="Tax amount")
    total: Decimal = Field(description="Invoice total")
    paid_amount: Decimal = Field(description="Sum of recorded payments")
    balance_due: Decimal = Field(description="Total minus paid amount; negative when overpaid")
    status: InvoiceStatus = Field(description="Effective status")
    stored_status: InvoiceStatus = Field(description="Last explicitly set status")
    payment_status: PaymentStatus = Field(description="Unpaid, partially paid, paid or overpaid")
    due_date: Optional[date] = Field(default=None, description="Due date")
    days_until_due: Optional[int] = Field(default=None, description="Days until due, negative when past")
    can_record_payment: bool = Field(description="Whether a payment may be recorded")
    available_actions: List[str] = Field(default_factory=list, description="Actions the view may offer")
    version: int = Field(description="Record version")


class InvoiceResponseDTO(ResponseDTO):
    """Updated record to persist, plus its computed summary."""

    invoice: InvoiceRecordDTO = Field(description="Record to persist")
    summary: InvoiceSummaryResponseDTO = Field(description="Computed figures")
    events: List[str] = Field(default_factory=list, description="Domain events raised")


# Request DTOs
class InvoiceActionRequestDTO(RequestDTO):
    """DTO for a status action (send, void) on an invoice record."""

    invoice: InvoiceRecordDTO = Field(description="Current invoice record")
    reason: Optional[str] = Field(default=None, max_length=500, description="Reason, used when voiding")


class RecordPaymentRequestDTO(RequestDTO):
    """DTO for recording a payment against an invoice record."""

    invoice: InvoiceRecordDTO = Field(description="Invoice record as currently persisted")
    payment: PaymentDTO = Field(description="Payment to record")
    expected_version: Optional[int] = Field(
        default=None,
        description="Version the payment was entered against; compared with the persisted record version"
    )


class OverdueInvoicesRequestDTO(RequestDTO):
    """DTO for sweeping a batch of invoice records for overdue ones."""

    invoices: List[InvoiceRecordDTO] = Field(default_factory=list, description="Invoice records")


class ReportedFiguresDTO(RequestDTO):
    """Calculated figures as stored by the back end, to be checked."""

    subtotal: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    balance_due: Optional[Decimal] = None
    status: Optional[InvoiceStatus] = None


class ReconcileRequestDTO(RequestDTO):
    """DTO for checking stored figures against recomputed ones."""

    invoice: InvoiceRecordDTO = Field(description="Invoice record")
    reported: ReportedFiguresDTO = Field(description="Stored figures")


class DiscrepancyDTO(ResponseDTO):
    """A stored figure that differs from the computed one."""

    field: str = Field(description="Figure name")
    reported: str = Field(description="Stored value")
    expected: str = Field(description="Computed value")


class ReconcileResponseDTO(ResponseDTO):
    """Result of a reconciliation."""

    invoice_number: str = Field(description="Invoice number")
    consistent: bool = Field(description="True when no discrepancy was found")
    discrepancies: List[DiscrepancyDTO] = Field(default_factory=list, description="Mismatching figures")
    summary: InvoiceSummaryResponseDTO = Field(description="Computed figures")
