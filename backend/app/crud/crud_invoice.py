"""CRUD operations for invoices."""

from sqlalchemy.orm import Session

from backend.app.models.invoice import Invoice
from backend.app.schemas.invoice import InvoiceCreate


class CRUDInvoice:
    def count(self, db: Session) -> int:
        return db.query(Invoice).count()

    def create(self, db: Session, *, obj_in: InvoiceCreate) -> Invoice:
        obj = Invoice(**obj_in.model_dump(), total_amount=obj_in.total_amount)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj


invoice_crud = CRUDInvoice()
