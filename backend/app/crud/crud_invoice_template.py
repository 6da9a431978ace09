"""CRUD operations for recurring invoice templates."""

from datetime import date
from typing import List, Optional

from sqlalchemy import Integer, String, type_coerce
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from backend.app.models.invoice_template import InvoiceTemplate


class CRUDInvoiceTemplate:
    def get(self, db: Session, *, template_id: int) -> Optional[InvoiceTemplate]:
        return db.query(InvoiceTemplate).filter(InvoiceTemplate.id == template_id).first()

    def get_multi_raw(self, db: Session) -> List[Row]:
        """Return template rows with stored values left unconverted.

        Numeric and Boolean columns are read through their raw storage type so
        a malformed value in one row (text in ``amount``, say) surfaces when that
        row is validated instead of failing the whole query.
        """
        columns = [
            InvoiceTemplate.id,
            InvoiceTemplate.name,
            InvoiceTemplate.client_id,
            type_coerce(InvoiceTemplate.amount, String).label("amount"),
            InvoiceTemplate.description,
            InvoiceTemplate.frequency,
            InvoiceTemplate.payment_terms,
            InvoiceTemplate.next_invoice_date,
            type_coerce(InvoiceTemplate.is_active, Integer).label("is_active"),
            InvoiceTemplate.line_items,
            type_coerce(InvoiceTemplate.tax_amount, String).label("tax_amount"),
            type_coerce(InvoiceTemplate.shipping_amount, String).label("shipping_amount"),
            InvoiceTemplate.notes,
        ]
        return db.query(*columns).order_by(InvoiceTemplate.id.asc()).all()

    def update_next_invoice_date(self, db: Session, *, template_id: int, next_date: date) -> InvoiceTemplate:
        template = self.get(db, template_id=template_id)
        if template is None:
            raise LookupError(f"Invoice template {template_id} not found")
        template.next_invoice_date = next_date.isoformat()
        db.commit()
        db.refresh(template)
        return template


invoice_template_crud = CRUDInvoiceTemplate()
