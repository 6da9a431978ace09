"""Recurring invoice template model.

``next_invoice_date`` is kept as ISO ``YYYY-MM-DD`` text. Rows imported from
older installs can carry malformed values, so the column is not a DATE and
the recurring processor parses it per row.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base


class InvoiceTemplate(Base):
    __tablename__ = "invoice_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    amount = Column(Numeric(10, 2), nullable=True)
    description = Column(Text, nullable=True)
    frequency = Column(String(20), nullable=False, default="monthly")
    payment_terms = Column(String(100), nullable=False, default="net_30")
    next_invoice_date = Column(String(32), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    line_items = Column(Text, nullable=True)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    shipping_amount = Column(Numeric(10, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="invoice_templates")
    invoices = relationship("Invoice", back_populates="template")
