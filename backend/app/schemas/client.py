"""Client schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ClientRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

    def address_snapshot(self) -> str:
        """Render the postal address as a single line for invoice headers."""
        locality = " ".join(part for part in (self.state, self.zip_code) if part)
        parts = [self.address, self.city, locality]
        return ", ".join(part.strip() for part in parts if part and part.strip())
