"""Result types for recurring invoice batch runs."""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class SkipReason(str, Enum):
    INACTIVE = "inactive"
    MISSING_REQUIRED_FIELDS = "missing_required_fields"
    INVALID_NEXT_INVOICE_DATE = "invalid_next_invoice_date"
    NOT_DUE = "not_due"
    CLIENT_NOT_FOUND = "client_not_found"
    LOOKUP_FAILED = "lookup_failed"
    INVALID_INVOICE = "invalid_invoice"
    INSERT_FAILED = "insert_failed"
    SCHEDULE_ADVANCE_FAILED = "schedule_advance_failed"


class TemplateOutcome(BaseModel):
    template_id: int
    ok: bool
    skip_reason: Optional[SkipReason] = None
    invoice_id: Optional[int] = None
    invoice_number: Optional[str] = None
    next_invoice_date: Optional[date] = None


class BatchResult(BaseModel):
    success: bool
    processed: int = 0
    message: Optional[str] = None
    error: Optional[str] = None
    outcomes: List[TemplateOutcome] = []

    def skipped(self, reason: SkipReason) -> List[TemplateOutcome]:
        return [outcome for outcome in self.outcomes if outcome.skip_reason == reason]


class ProcessingStats(BaseModel):
    total_active_templates: int
    templates_due_today: int
    templates_overdue: int
    next_processing_date: Optional[date] = None
