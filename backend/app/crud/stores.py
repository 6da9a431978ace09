"""Session-bound stores backing the recurring invoice processor."""

import logging
from datetime import date
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from backend.app.core.settings import get_settings
from backend.app.crud.crud_client import client_crud
from backend.app.crud.crud_invoice import invoice_crud
from backend.app.crud.crud_invoice_template import invoice_template_crud
from backend.app.schemas.client import ClientRecord
from backend.app.schemas.invoice import InvoiceCreate
from backend.app.schemas.invoice_template import TemplateRecord
from backend.app.services.recurring import RecurringInvoiceProcessor

logger = logging.getLogger(__name__)


class SQLTemplateStore:
    def __init__(self, db: Session):
        self.db = db

    def read_all_templates(self) -> List[TemplateRecord]:
        records = []
        for row in invoice_template_crud.get_multi_raw(self.db):
            try:
                records.append(TemplateRecord.model_validate(row))
            except ValidationError as exc:
                logger.warning("Skipping unreadable invoice template id=%s: %s", row.id, exc.errors())
        return records

    def update_next_invoice_date(self, template_id: int, next_date: date) -> None:
        try:
            invoice_template_crud.update_next_invoice_date(self.db, template_id=template_id, next_date=next_date)
        except Exception:
            self.db.rollback()
            raise


class SQLClientDirectory:
    def __init__(self, db: Session):
        self.db = db

    def read_client(self, client_id: int) -> Optional[ClientRecord]:
        client = client_crud.get(self.db, client_id=client_id)
        if client is None:
            return None
        return ClientRecord.model_validate(client)


class SQLInvoiceStore:
    def __init__(self, db: Session):
        self.db = db

    def count_invoices(self) -> int:
        return invoice_crud.count(self.db)

    def insert_invoice(self, invoice: InvoiceCreate) -> int:
        try:
            return invoice_crud.create(self.db, obj_in=invoice).id
        except Exception:
            self.db.rollback()
            raise


def build_recurring_processor(db: Session) -> RecurringInvoiceProcessor:
    settings = get_settings()
    return RecurringInvoiceProcessor(
        SQLTemplateStore(db),
        SQLClientDirectory(db),
        SQLInvoiceStore(db),
        invoice_prefix=settings.invoice_number_prefix,
    )
