"""
Invoice mapper for converting between invoice records and domain entities.
"""

from datetime import date, timedelta
from typing import List, Optional

from invoice_engine.config import Settings, get_settings
from invoice_engine.domain.models.money import Money
from invoice_engine.domain.models.invoice import Invoice
from invoice_engine.domain.models.value_objects import (
    DiscountSpec,
    InvoiceTotals,
    LineItem,
    Payment,
    TaxSpec,
)
from invoice_engine.domain.services.billing_service import LineItemCalculator
from invoice_engine.domain.services.reconciliation_service import ReportedFigures
from invoice_engine.domain.services.status_machine import InvoiceStatusMachine, days_until_due
from invoice_engine.application.dto.invoice_dto import (
    InvoiceRecordDTO,
    InvoiceSummaryResponseDTO,
    LineItemDTO,
    PaymentDTO,
    ReportedFiguresDTO,
    TotalsRequestDTO,
    TotalsResponseDTO,
)


class InvoiceMapper:
    """Maps between invoice record DTOs and the Invoice aggregate."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.status_machine = InvoiceStatusMachine()
        self.line_item_calculator = LineItemCalculator()

    # Record -> domain

    def record_to_domain(self, record: InvoiceRecordDTO) -> Invoice:
        """
        Build the aggregate from a stored record.
        Payments are replayed through the ledger, so a record holding the
        same reference twice is rejected rather than double counted.
        """
        invoice_date = record.invoice_date or date.today()
        due_date = record.due_date or invoice_date + timedelta(
            days=self.settings.default_payment_terms_days
        )

        return Invoice(
            id=record.id,
            invoice_number=record.invoice_number,
            client_id=record.client_id,
            project_id=record.project_id,
            invoice_date=invoice_date,
            due_date=due_date,
            status=record.status,
            currency=record.currency or self.settings.default_currency,
            line_items=self.line_items_to_domain(record.line_items),
            discount=self.discount_to_domain(record.discount, record.discount_type),
            tax=self.tax_to_domain(record.tax_rate),
            payments=[self.payment_to_domain(p) for p in record.payments],
            notes=record.notes,
            version=record.version
        )

    def line_items_to_domain(self, items: List[LineItemDTO]) -> List[LineItem]:
        return [
            LineItem(description=item.description, quantity=item.quantity, rate=item.rate)
            for item in items
        ]

    def discount_to_domain(self, value, discount_type) -> Optional[DiscountSpec]:
        """A zero discount is the same as no discount."""
        if value is None or value == 0:
            return None
        return DiscountSpec(discount_type, value)

    def tax_to_domain(self, rate) -> TaxSpec:
        """Records without a tax rate use the configured default."""
        return TaxSpec(rate if rate is not None else self.settings.default_tax_rate)

    def payment_to_domain(self, payment: PaymentDTO) -> Payment:
        return Payment(
            amount=Money.of(payment.amount, field="payment amount"),
            reference=payment.reference,
            method=payment.method,
            payment_date=payment.payment_date,
            notes=payment.notes
        )

    def reported_to_domain(self, reported: ReportedFiguresDTO) -> ReportedFigures:
        return ReportedFigures(
            subtotal=reported.subtotal,
            discount_amount=reported.discount_amount,
            tax_amount=reported.tax_amount,
            total=reported.total,
            paid_amount=reported.paid_amount,
            balance_due=reported.balance_due,
            status=reported.status
        )

    # Domain -> record

    def domain_to_record(self, invoice: Invoice) -> InvoiceRecordDTO:
        """Convert the aggregate back to a record ready to persist."""
        discount = invoice.discount
        return InvoiceRecordDTO(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            project_id=invoice.project_id,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            status=invoice.status,
            currency=invoice.currency,
            line_items=[
                LineItemDTO(
                    description=item.description,
                    quantity=item.quantity,
                    rate=item.rate,
                    amount=self.line_item_calculator.compute_amount(item).amount
                )
                for item in invoice.line_items
            ],
            discount=discount.value if discount else 0,
            discount_type=discount.type if discount else "amount",
            tax_rate=invoice.tax.rate if invoice.tax else None,
            payments=[
                PaymentDTO(
                    amount=payment.amount.amount,
                    reference=payment.reference,
                    method=payment.method,
                    payment_date=payment.payment_date,
                    notes=payment.notes
                )
                for payment in invoice.payments
            ],
            notes=invoice.notes,
            version=invoice.version
        )

    def domain_to_summary(self, invoice: Invoice, today: Optional[date] = None) -> InvoiceSummaryResponseDTO:
        """Computed figures for display and action gating."""
        today = today or date.today()
        totals = invoice.totals
        ledger = invoice.ledger_state

        return InvoiceSummaryResponseDTO(
            invoice_number=invoice.invoice_number,
            subtotal=totals.subtotal.amount,
            discount_amount=totals.discount_amount.amount,
            tax_amount=totals.tax_amount.amount,
            total=totals.total.amount,
            paid_amount=ledger.paid_amount.amount,
            balance_due=ledger.balance_due.amount,
            status=invoice.effective_status(today),
            stored_status=invoice.status,
            payment_status=ledger.payment_status,
            due_date=invoice.due_date,
            days_until_due=days_until_due(invoice.due_date, today),
            can_record_payment=self.status_machine.can_record_payment(invoice),
            available_actions=self.status_machine.available_actions(invoice),
            version=invoice.version
        )

    # Totals preview

    def totals_request_to_domain(self, request: TotalsRequestDTO):
        return (
            self.line_items_to_domain(request.line_items),
            self.discount_to_domain(request.discount, request.discount_type),
            self.tax_to_domain(request.tax_rate),
        )

    def totals_to_response(self, totals: InvoiceTotals, line_items: List[LineItem]) -> TotalsResponseDTO:
        return TotalsResponseDTO(
            subtotal=totals.subtotal.amount,
            discount_amount=totals.discount_amount.amount,
            taxable_amount=totals.taxable_amount.amount,
            tax_amount=totals.tax_amount.amount,
            total=totals.total.amount,
            line_amounts=[self.line_item_calculator.compute_amount(item).amount for item in line_items]
        )
