"""Recurring invoice processing: materializes due templates into invoices.

One batch run walks every template in sequence. A template whose schedule
has come due produces exactly one draft invoice, and only after that insert
succeeds is the template's ``next_invoice_date`` moved forward by one
frequency step. Problems with a single template (bad data, missing client,
failed writes) are recorded as that template's outcome and the run moves
on. The only failure that aborts a run is being unable to list templates.

The processor does not guard against overlapping runs; callers must make
sure at most one ``run_batch`` is in flight.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, List, Optional, Protocol

from pydantic import ValidationError

from backend.app.core.time import utc_today
from backend.app.schemas.client import ClientRecord
from backend.app.schemas.invoice import InvoiceCreate
from backend.app.schemas.invoice_template import TemplateRecord
from backend.app.schemas.recurring import BatchResult, ProcessingStats, SkipReason, TemplateOutcome
from backend.app.services.schedule import due_date_for, next_occurrence, parse_schedule_date

logger = logging.getLogger(__name__)


class TemplateStore(Protocol):
    def read_all_templates(self) -> List[TemplateRecord]: ...

    def update_next_invoice_date(self, template_id: int, next_date: date) -> None: ...


class ClientDirectory(Protocol):
    def read_client(self, client_id: int) -> Optional[ClientRecord]: ...


class InvoiceStore(Protocol):
    def count_invoices(self) -> int: ...

    def insert_invoice(self, invoice: InvoiceCreate) -> int: ...


def format_invoice_number(sequence: int, prefix: str = "INV") -> str:
    return f"{prefix}-{sequence:04d}"


class RecurringInvoiceProcessor:
    def __init__(
        self,
        templates: TemplateStore,
        clients: ClientDirectory,
        invoices: InvoiceStore,
        *,
        clock: Callable[[], date] = utc_today,
        invoice_prefix: str = "INV",
    ):
        self.templates = templates
        self.clients = clients
        self.invoices = invoices
        self.clock = clock
        self.invoice_prefix = invoice_prefix

    def _run_date(self, today: date | None) -> date:
        value = today or self.clock()
        if isinstance(value, datetime):
            return value.date()
        return value

    def run_batch(self, today: date | None = None) -> BatchResult:
        run_date = self._run_date(today)
        logger.info("Starting recurring invoice processing for %s", run_date.isoformat())

        try:
            templates = self.templates.read_all_templates()
        except Exception as exc:
            logger.exception("Could not load recurring invoice templates")
            return BatchResult(success=False, error=str(exc) or exc.__class__.__name__)

        if not templates:
            logger.info("No recurring invoice templates found")
            return BatchResult(success=True, processed=0, message="No templates to process")

        outcomes = [self.process_template(template, run_date) for template in templates]
        processed = sum(1 for outcome in outcomes if outcome.ok)

        logger.info("Recurring invoice processing completed. Processed %d invoices.", processed)
        return BatchResult(
            success=True,
            processed=processed,
            message=f"Processed {processed} recurring invoices",
            outcomes=outcomes,
        )

    def process_template(self, template: TemplateRecord, today: date) -> TemplateOutcome:
        """Materialize one template if it is due and advance its schedule."""

        def skip(reason: SkipReason, **extra) -> TemplateOutcome:
            return TemplateOutcome(template_id=template.id, ok=False, skip_reason=reason, **extra)

        if not template.is_active:
            logger.debug("Skipping template %s - inactive", template.label)
            return skip(SkipReason.INACTIVE)

        if not template.client_id or not template.amount or not template.next_invoice_date:
            logger.warning("Skipping template %s - missing required data", template.label)
            return skip(SkipReason.MISSING_REQUIRED_FIELDS)

        scheduled = parse_schedule_date(template.next_invoice_date)
        if scheduled is None:
            logger.warning(
                "Skipping template %s - invalid next_invoice_date %r", template.label, template.next_invoice_date
            )
            return skip(SkipReason.INVALID_NEXT_INVOICE_DATE)

        if scheduled > today:
            return skip(SkipReason.NOT_DUE)

        logger.info("Creating recurring invoice for template %s", template.label)

        try:
            client = self.clients.read_client(template.client_id)
            invoice_count = self.invoices.count_invoices()
        except Exception:
            logger.exception("Lookup failed for template %s", template.label)
            return skip(SkipReason.LOOKUP_FAILED)

        if client is None:
            logger.error("Client %s not found for template %s", template.client_id, template.label)
            return skip(SkipReason.CLIENT_NOT_FOUND)

        invoice_number = format_invoice_number(invoice_count + 1, self.invoice_prefix)
        try:
            invoice = self.build_invoice(template, client, invoice_number, today)
        except ValidationError as exc:
            logger.error("Invalid invoice data for template %s: %s", template.label, exc.errors())
            return skip(SkipReason.INVALID_INVOICE)

        try:
            invoice_id = self.invoices.insert_invoice(invoice)
        except Exception:
            logger.exception("Failed to insert invoice %s for template %s", invoice_number, template.label)
            return skip(SkipReason.INSERT_FAILED)

        new_next_date = next_occurrence(template.frequency, scheduled)
        try:
            self.templates.update_next_invoice_date(template.id, new_next_date)
        except Exception:
            # The invoice already exists; the template stays due and the next run may duplicate it.
            logger.exception(
                "Invoice %s created but next_invoice_date for template %s was not advanced to %s",
                invoice_number,
                template.label,
                new_next_date.isoformat(),
            )
            return skip(
                SkipReason.SCHEDULE_ADVANCE_FAILED,
                invoice_id=invoice_id,
                invoice_number=invoice_number,
            )

        logger.info("Next invoice for %s scheduled for: %s", template.label, new_next_date.isoformat())
        return TemplateOutcome(
            template_id=template.id,
            ok=True,
            invoice_id=invoice_id,
            invoice_number=invoice_number,
            next_invoice_date=new_next_date,
        )

    def build_invoice(
        self, template: TemplateRecord, client: ClientRecord, invoice_number: str, today: date
    ) -> InvoiceCreate:
        return InvoiceCreate(
            invoice_number=invoice_number,
            client_id=template.client_id,
            template_id=template.id,
            client_name=client.name,
            client_email=client.email,
            client_phone=client.phone or "",
            client_address=client.address_snapshot(),
            status="draft",
            amount=template.amount,
            tax_amount=template.tax_amount or Decimal("0.00"),
            shipping_amount=template.shipping_amount or Decimal("0.00"),
            description=template.description or "",
            notes=template.notes or "",
            line_items=template.line_items or "[]",
            issue_date=today,
            due_date=due_date_for(template.payment_terms, today),
        )

    def processing_stats(self, today: date | None = None) -> ProcessingStats:
        """Summarize how many active templates are due, overdue and upcoming."""
        run_date = self._run_date(today)
        due_today = overdue = active = 0
        upcoming: list[date] = []
        for template in self.templates.read_all_templates():
            if not template.is_active:
                continue
            active += 1
            scheduled = parse_schedule_date(template.next_invoice_date)
            if scheduled is None:
                continue
            if scheduled == run_date:
                due_today += 1
            elif scheduled < run_date:
                overdue += 1
            else:
                upcoming.append(scheduled)
        return ProcessingStats(
            total_active_templates=active,
            templates_due_today=due_today,
            templates_overdue=overdue,
            next_processing_date=min(upcoming) if upcoming else None,
        )
