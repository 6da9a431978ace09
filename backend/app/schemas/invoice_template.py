"""Recurring invoice template schemas."""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


class TemplateRecord(BaseModel):
    """A template row as loaded for a batch run.

    ``client_id``, ``amount`` and ``next_invoice_date`` are optional here so a
    single corrupt row can be loaded and skipped without failing the read of
    every other template.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str = ""
    client_id: Optional[int] = None
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    frequency: Optional[str] = None
    payment_terms: Optional[str] = None
    next_invoice_date: Optional[Union[date, str]] = None
    is_active: bool = True
    line_items: Optional[str] = None
    tax_amount: Optional[Decimal] = None
    shipping_amount: Optional[Decimal] = None
    notes: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name or 'template'} (id={self.id})"

    @field_validator("amount", mode="before")
    @classmethod
    def unreadable_amount_is_missing(cls, value):
        # Legacy rows can hold '' or free text; treat them like a missing amount.
        if value is None or isinstance(value, (int, float, Decimal)):
            return value
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        return amount if amount.is_finite() else None
