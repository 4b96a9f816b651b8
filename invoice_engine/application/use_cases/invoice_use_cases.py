"""
Invoice use cases for the application layer.
Each use case takes the invoice record the caller currently holds, runs the
engine and returns the updated record plus its computed figures. Persisting
the result, and serialising concurrent writes to the same invoice, is left
to the caller.
"""

import logging
from datetime import date
from typing import Callable, List, Optional

from invoice_engine.application.use_cases.base_use_case import CommandUseCase, QueryUseCase
from invoice_engine.application.dto.invoice_dto import (
    DiscrepancyDTO,
    InvoiceActionRequestDTO,
    InvoiceRecordDTO,
    InvoiceResponseDTO,
    InvoiceSummaryResponseDTO,
    OverdueInvoicesRequestDTO,
    ReconcileRequestDTO,
    ReconcileResponseDTO,
    RecordPaymentRequestDTO,
    TotalsRequestDTO,
    TotalsResponseDTO,
)
from invoice_engine.application.mappers.invoice_mapper import InvoiceMapper
from invoice_engine.domain.models.base import StaleInvoiceVersion
from invoice_engine.domain.models.invoice import Invoice
from invoice_engine.domain.services.billing_service import InvoiceTotalsCalculator
from invoice_engine.domain.services.reconciliation_service import ReconciliationService
from invoice_engine.domain.services.status_machine import InvoiceStatusMachine


logger = logging.getLogger(__name__)

Clock = Callable[[], date]


class PreviewTotalsUseCase(QueryUseCase[TotalsRequestDTO, TotalsResponseDTO]):
    """Use case for the live totals preview of the invoice form."""

    def __init__(self, mapper: Optional[InvoiceMapper] = None):
        super().__init__()
        self.mapper = mapper or InvoiceMapper()
        self.calculator = InvoiceTotalsCalculator()

    def _execute_business_logic(self, request: TotalsRequestDTO) -> TotalsResponseDTO:
        line_items, discount, tax = self.mapper.totals_request_to_domain(request)
        totals = self.calculator.compute(line_items, discount, tax)
        return self.mapper.totals_to_response(totals, line_items)


class GetInvoiceSummaryUseCase(QueryUseCase[InvoiceRecordDTO, InvoiceSummaryResponseDTO]):
    """Use case for the figures shown by invoice list and detail views."""

    def __init__(self, mapper: Optional[InvoiceMapper] = None, clock: Clock = date.today):
        super().__init__()
        self.mapper = mapper or InvoiceMapper()
        self.clock = clock

    def _execute_business_logic(self, request: InvoiceRecordDTO) -> InvoiceSummaryResponseDTO:
        invoice = self.mapper.record_to_domain(request)
        return self.mapper.domain_to_summary(invoice, self.clock())


class FindOverdueInvoicesUseCase(QueryUseCase[OverdueInvoicesRequestDTO, List[InvoiceSummaryResponseDTO]]):
    """Use case for listing which invoices are effectively overdue."""

    def __init__(self, mapper: Optional[InvoiceMapper] = None, clock: Clock = date.today):
        super().__init__()
        self.mapper = mapper or InvoiceMapper()
        self.clock = clock
        self.status_machine = InvoiceStatusMachine()

    def _execute_business_logic(self, request: OverdueInvoicesRequestDTO) -> List[InvoiceSummaryResponseDTO]:
        today = self.clock()
        invoices = [self.mapper.record_to_domain(record) for record in request.invoices]
        overdue = self.status_machine.collect_overdue(invoices, today)
        logger.info(f"{len(overdue)} of {len(invoices)} invoice(s) overdue as of {today.isoformat()}")
        return [self.mapper.domain_to_summary(invoice, today) for invoice in overdue]


class _InvoiceCommandUseCase(CommandUseCase):
    """Shared plumbing for commands that change an invoice record."""

    def __init__(self, mapper: Optional[InvoiceMapper] = None, clock: Clock = date.today):
        super().__init__()
        self.mapper = mapper or InvoiceMapper()
        self.clock = clock
        self.status_machine = InvoiceStatusMachine()

    def _respond(self, invoice: Invoice) -> InvoiceResponseDTO:
        self.events = invoice.pull_events()
        return InvoiceResponseDTO(
            invoice=self.mapper.domain_to_record(invoice),
            summary=self.mapper.domain_to_summary(invoice, self.clock()),
            events=[event.event_type for event in self.events]
        )


class SendInvoiceUseCase(_InvoiceCommandUseCase):
    """Use case for sending a draft invoice to the client."""

    def _execute_command_logic(self, request: InvoiceActionRequestDTO) -> InvoiceResponseDTO:
        invoice = self.mapper.record_to_domain(request.invoice)
        self.status_machine.send(invoice)
        return self._respond(invoice)


class VoidInvoiceUseCase(_InvoiceCommandUseCase):
    """Use case for voiding an invoice that has no payments."""

    def _execute_command_logic(self, request: InvoiceActionRequestDTO) -> InvoiceResponseDTO:
        invoice = self.mapper.record_to_domain(request.invoice)
        self.status_machine.void(invoice, request.reason)
        return self._respond(invoice)


class RecordPaymentUseCase(_InvoiceCommandUseCase):
    """
    Use case for recording a payment.

    ``invoice`` must be the record as currently persisted, re-read at write
    time. ``expected_version`` is the version the payment was entered
    against, for example the one shown in the payment form; a mismatch means
    another writer changed the invoice in between and the caller should
    re-read and retry. Callers still run read-apply-persist for one invoice
    as a single step.
    """

    def _execute_command_logic(self, request: RecordPaymentRequestDTO) -> InvoiceResponseDTO:
        record = request.invoice
        if request.expected_version is not None and request.expected_version != record.version:
            raise StaleInvoiceVersion(request.expected_version, record.version)

        invoice = self.mapper.record_to_domain(record)
        payment = self.mapper.payment_to_domain(request.payment)
        invoice.record_payment(payment)
        return self._respond(invoice)


class ReconcileInvoiceUseCase(QueryUseCase[ReconcileRequestDTO, ReconcileResponseDTO]):
    """Use case for checking stored invoice figures against the engine."""

    def __init__(self, mapper: Optional[InvoiceMapper] = None, clock: Clock = date.today):
        super().__init__()
        self.mapper = mapper or InvoiceMapper()
        self.clock = clock
        self.reconciliation_service = ReconciliationService()

    def _execute_business_logic(self, request: ReconcileRequestDTO) -> ReconcileResponseDTO:
        today = self.clock()
        invoice = self.mapper.record_to_domain(request.invoice)
        reported = self.mapper.reported_to_domain(request.reported)
        discrepancies = self.reconciliation_service.reconcile(invoice, reported, today)

        return ReconcileResponseDTO(
            invoice_number=invoice.invoice_number,
            consistent=not discrepancies,
            discrepancies=[DiscrepancyDTO(**d.to_dict()) for d in discrepancies],
            summary=self.mapper.domain_to_summary(invoice, today)
        )
