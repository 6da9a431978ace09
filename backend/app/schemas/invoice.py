"""Invoice schemas."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class InvoiceCreate(BaseModel):
    """Invoice materialized from a recurring template."""

    invoice_number: str = Field(min_length=1)
    client_id: int = Field(gt=0)
    template_id: Optional[int] = None

    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None

    status: str = "draft"
    amount: Decimal = Field(gt=0)
    tax_amount: Decimal = Decimal("0.00")
    shipping_amount: Decimal = Decimal("0.00")

    description: Optional[str] = None
    notes: Optional[str] = None
    line_items: Optional[str] = None

    issue_date: date
    due_date: date

    @property
    def total_amount(self) -> Decimal:
        return self.amount + self.tax_amount + self.shipping_amount
