"""Invoice model for billing."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(50), unique=True, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    template_id = Column(Integer, ForeignKey("invoice_templates.id", ondelete="SET NULL"), nullable=True, index=True)

    # Contact snapshot taken when the invoice was issued
    client_name = Column(String(100), nullable=True)
    client_email = Column(String(255), nullable=True)
    client_phone = Column(String(20), nullable=True)
    client_address = Column(String(255), nullable=True)

    status = Column(String, default="draft", nullable=False)
    amount = Column(Numeric(10, 2), default=0.00, nullable=False)
    tax_amount = Column(Numeric(10, 2), default=0.00, nullable=False)
    shipping_amount = Column(Numeric(10, 2), default=0.00, nullable=False)
    total_amount = Column(Numeric(10, 2), default=0.00, nullable=False)

    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    line_items = Column(Text, nullable=True)

    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    client = relationship("Client", back_populates="invoices")
    template = relationship("InvoiceTemplate", back_populates="invoices")
