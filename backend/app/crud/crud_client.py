"""Read access to clients."""

from typing import Optional

from sqlalchemy.orm import Session

from backend.app.models.client import Client


class CRUDClient:
    def get(self, db: Session, *, client_id: int) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()


client_crud = CRUDClient()
